import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..core.auth import get_current_user, CurrentUser
from ..core.dependencies import get_store, read_json_body, validation_failed
from ..core.store import TodoStore
from ..core.validation import validate_new_category_input
from ..schemas.todo import Category, SuccessResponse
from ..utils.helpers import generate_id

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[Category])
async def get_categories(
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """Get all categories for the authenticated user"""
    return store.get_categories(current_user.user_id)


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """Create a new category"""
    body = await read_json_body(request)

    result = validate_new_category_input(body)
    if not result.valid:
        raise validation_failed(result.errors)

    category = Category(id=generate_id(), **result.data)
    logger.info(f"Creating category {category.id} for user {current_user.user_id}")
    return store.add_category(current_user.user_id, category)


@router.delete("/{category_id}", response_model=SuccessResponse)
async def delete_category(
    category_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """Delete a category; its todos become uncategorized"""
    if not store.delete_category(current_user.user_id, category_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )
    return SuccessResponse()
