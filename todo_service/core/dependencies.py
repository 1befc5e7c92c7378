"""
Shared FastAPI dependencies and request helpers.
"""
import logging
from typing import Any, List

from fastapi import HTTPException, Request, status

from .store import TodoStore

logger = logging.getLogger(__name__)


def get_store(request: Request) -> TodoStore:
    """Store dependency; the instance is created once by create_app"""
    return request.app.state.store


async def read_json_body(request: Request, error_message: str = "Invalid request body") -> Any:
    """Decode the request body as JSON or fail with a generic 400"""
    try:
        return await request.json()
    except ValueError:
        logger.warning(f"Malformed JSON body on {request.method} {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_message
        )


def validation_failed(errors: List[str]) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "Validation failed", "details": errors}
    )
