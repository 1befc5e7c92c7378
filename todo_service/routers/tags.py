import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..core.auth import get_current_user, CurrentUser
from ..core.dependencies import get_store, read_json_body, validation_failed
from ..core.store import TodoStore
from ..core.validation import validate_new_tag_input
from ..schemas.todo import SuccessResponse, Tag
from ..utils.helpers import generate_id

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[Tag])
async def get_tags(
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """Get all tags for the authenticated user"""
    return store.get_tags(current_user.user_id)


@router.post("", response_model=Tag, status_code=status.HTTP_201_CREATED)
async def create_tag(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """Create a new tag"""
    body = await read_json_body(request)

    result = validate_new_tag_input(body)
    if not result.valid:
        raise validation_failed(result.errors)

    tag = Tag(id=generate_id(), **result.data)
    logger.info(f"Creating tag {tag.id} for user {current_user.user_id}")
    return store.add_tag(current_user.user_id, tag)


@router.delete("/{tag_id}", response_model=SuccessResponse)
async def delete_tag(
    tag_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """Delete a tag and remove it from every todo"""
    if not store.delete_tag(current_user.user_id, tag_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tag not found"
        )
    return SuccessResponse()
