import logging
from typing import List, Union
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from ..core.auth import get_current_user, CurrentUser
from ..core.dependencies import get_store, read_json_body, validation_failed
from ..core.store import TodoStore
from ..core.validation import (
    validate_new_todo_input, validate_references, validate_reorder_input, validate_update_todo_input
)
from ..schemas.todo import SuccessResponse, Todo
from ..utils.helpers import generate_id, utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[Todo])
async def get_todos(
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """Get all todos for the authenticated user, in display order"""
    return store.get_todos(current_user.user_id)


@router.post("", response_model=Union[Todo, List[Todo]], status_code=status.HTTP_201_CREATED)
async def create_or_reorder_todos(
    request: Request,
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """Create a new todo, or reorder when the body is {action: "reorder", fromIndex, toIndex}"""
    body = await read_json_body(request)
    user_id = current_user.user_id

    if isinstance(body, dict) and body.get("action") == "reorder":
        result = validate_reorder_input(body, len(store.get_todos(user_id)))
        if not result.valid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"error": "Invalid reorder parameters", "details": result.errors}
            )
        response.status_code = status.HTTP_200_OK
        return store.reorder_todos(user_id, result.data["from_index"], result.data["to_index"])

    result = validate_new_todo_input(body)
    if not result.valid:
        raise validation_failed(result.errors)

    fields = result.data
    errors = validate_references(
        fields["category_id"], fields["tags"], store.get_categories(user_id), store.get_tags(user_id)
    )
    if errors:
        raise validation_failed(errors)

    now = utc_now_iso()
    todo = Todo(
        id=generate_id(),
        title=fields["title"],
        completed=False,
        category_id=fields["category_id"],
        tags=fields["tags"],
        created_at=now,
        updated_at=now,
    )
    logger.info(f"Creating todo {todo.id} for user {user_id}")
    return store.add_todo(user_id, todo)


@router.get("/{todo_id}", response_model=Todo)
async def get_todo(
    todo_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """Get a specific todo by ID"""
    todo = store.get_todo(current_user.user_id, todo_id)
    if todo is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Todo not found"
        )
    return todo


@router.put("/{todo_id}", response_model=Todo)
async def update_todo(
    todo_id: str,
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """Update a todo with a partial body"""
    body = await read_json_body(request)
    user_id = current_user.user_id

    result = validate_update_todo_input(body)
    if not result.valid:
        raise validation_failed(result.errors)

    updates = result.data
    errors = validate_references(
        updates.get("category_id"), updates.get("tags"), store.get_categories(user_id), store.get_tags(user_id)
    )
    if errors:
        raise validation_failed(errors)

    todo = store.update_todo(user_id, todo_id, updates)
    if todo is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Todo not found"
        )
    return todo


@router.delete("/{todo_id}", response_model=SuccessResponse)
async def delete_todo(
    todo_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    store: TodoStore = Depends(get_store)
):
    """Delete a todo"""
    if not store.delete_todo(current_user.user_id, todo_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Todo not found"
        )
    return SuccessResponse()
