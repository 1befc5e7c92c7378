import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..core.auth import get_current_user, CurrentUser
from ..core.dependencies import get_store, read_json_body
from ..core.store import TodoStore
from ..core.validation import validate_todo_state
from ..schemas.todo import MigrationResponse, MigrationStats, UserData

logger = logging.getLogger(__name__)

router = APIRouter()


def already_migrated(user_id: str) -> HTTPException:
    logger.warning(f"Rejected repeated migration for user {user_id}")
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "Data already migrated", "migrated": True}
    )


@router.get("", response_model=UserData)
async def get_data(
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """Get all user data (todos, categories, tags, migrated flag)"""
    return store.get_user_data(current_user.user_id)


@router.post("", response_model=MigrationResponse, response_model_exclude_none=True)
async def migrate_data(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """
    Import client-held data into the server, once per user.

    Every item is validated and sanitized; rejected items are reported as
    warnings instead of failing the import.
    """
    user_id = current_user.user_id

    if store.has_user_migrated(user_id):
        raise already_migrated(user_id)

    body = await read_json_body(request, "Invalid JSON data")

    result = validate_todo_state(body)
    if not result.valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Invalid data format", "details": result.errors}
        )

    # Re-check after the body await: a concurrent migration may have finished.
    # No await may sit between this check and the import.
    if store.has_user_migrated(user_id):
        raise already_migrated(user_id)
    user_data = store.import_user_data(user_id, result.data)
    logger.info(
        f"Migrated data for user {user_id}: {len(user_data.todos)} todos, "
        f"{len(user_data.categories)} categories, {len(user_data.tags)} tags, "
        f"{len(result.errors)} warnings"
    )

    return MigrationResponse(
        stats=MigrationStats(
            todos=len(user_data.todos),
            categories=len(user_data.categories),
            tags=len(user_data.tags),
        ),
        warnings=result.errors or None,
    )
