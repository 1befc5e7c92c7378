"""
Pydantic schemas for Todo Service.

Field names are snake_case in Python and camelCase on the wire.
"""
from typing import Optional, List
from pydantic import BaseModel, Field


class Todo(BaseModel):
    """A single task owned by one user"""
    id: str = Field(..., description="Todo ID, unique within the user's collection")
    title: str = Field(..., description="Todo title")
    completed: bool = Field(False, description="Completion flag")
    category_id: Optional[str] = Field(None, alias="categoryId", description="Referenced category ID")
    tags: List[str] = Field(default_factory=list, description="Referenced tag IDs")
    created_at: str = Field(..., alias="createdAt", description="Creation timestamp (ISO-8601 UTC)")
    updated_at: str = Field(..., alias="updatedAt", description="Last update timestamp (ISO-8601 UTC)")

    class Config:
        populate_by_name = True


class Category(BaseModel):
    """Single-select grouping label"""
    id: str = Field(..., description="Category ID")
    name: str = Field(..., description="Category name")
    icon: str = Field(..., description="Category icon")
    color: str = Field(..., description="Hex color #RRGGBB")


class Tag(BaseModel):
    """Multi-select label"""
    id: str = Field(..., description="Tag ID")
    name: str = Field(..., description="Tag name")
    color: str = Field(..., description="Hex color #RRGGBB")


class TodoState(BaseModel):
    """Sanitized collections produced by the migration validator"""
    todos: List[Todo] = Field(default_factory=list)
    categories: List[Category] = Field(default_factory=list)
    tags: List[Tag] = Field(default_factory=list)


class UserData(TodoState):
    """Everything one user owns"""
    migrated: bool = Field(False, description="Whether local data was imported")


class MigrationStats(BaseModel):
    todos: int
    categories: int
    tags: int


class MigrationResponse(BaseModel):
    """Schema for migration result"""
    success: bool = True
    migrated: bool = True
    stats: MigrationStats
    warnings: Optional[List[str]] = Field(None, description="Per-item rejection reasons")


class SuccessResponse(BaseModel):
    success: bool = True


DEFAULT_CATEGORIES = (
    Category(id="work", name="Work", icon="💼", color="#3B82F6"),
    Category(id="personal", name="Personal", icon="🏠", color="#10B981"),
)

DEFAULT_TAGS = (
    Tag(id="urgent", name="Urgent", color="#EF4444"),
    Tag(id="important", name="Important", color="#F59E0B"),
)
