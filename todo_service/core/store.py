"""
Per-user data store.

``TodoStore`` is the capability handlers depend on; ``InMemoryTodoStore``
keeps everything in a process-local dict and is lost on restart. A
database-backed store only needs to implement the same methods.

Store operations never raise for a missing target: they return ``None`` or
``False`` and leave the HTTP translation to the caller.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..schemas.todo import DEFAULT_CATEGORIES, DEFAULT_TAGS, Category, Tag, Todo, TodoState, UserData
from ..utils.helpers import utc_now_iso

logger = logging.getLogger(__name__)


def get_default_user_data() -> UserData:
    return UserData(
        todos=[],
        categories=[category.model_copy() for category in DEFAULT_CATEGORIES],
        tags=[tag.model_copy() for tag in DEFAULT_TAGS],
        migrated=False,
    )


class TodoStore(ABC):
    """Storage capability for user todo data"""

    @abstractmethod
    def get_user_data(self, user_id: str) -> UserData:
        """Return the user's data, creating the defaults on first access."""

    @abstractmethod
    def set_user_data(self, user_id: str, **fields: Any) -> UserData:
        """
        Shallow-merge todos/categories/tags over the user's current data.

        References that no longer resolve are dropped; the migrated flag
        cannot be set here.
        """

    @abstractmethod
    def add_todo(self, user_id: str, todo: Todo) -> Todo:
        ...

    @abstractmethod
    def update_todo(self, user_id: str, todo_id: str, updates: Dict[str, Any]) -> Optional[Todo]:
        ...

    @abstractmethod
    def delete_todo(self, user_id: str, todo_id: str) -> bool:
        ...

    @abstractmethod
    def reorder_todos(self, user_id: str, from_index: int, to_index: int) -> Optional[List[Todo]]:
        ...

    @abstractmethod
    def add_category(self, user_id: str, category: Category) -> Category:
        ...

    @abstractmethod
    def delete_category(self, user_id: str, category_id: str) -> bool:
        ...

    @abstractmethod
    def add_tag(self, user_id: str, tag: Tag) -> Tag:
        ...

    @abstractmethod
    def delete_tag(self, user_id: str, tag_id: str) -> bool:
        ...

    @abstractmethod
    def set_user_migrated(self, user_id: str) -> None:
        ...

    @abstractmethod
    def import_user_data(self, user_id: str, data: TodoState) -> UserData:
        """Replace all three collections and mark the user as migrated."""

    # Read helpers shared by every implementation

    def get_todos(self, user_id: str) -> List[Todo]:
        return self.get_user_data(user_id).todos

    def get_todo(self, user_id: str, todo_id: str) -> Optional[Todo]:
        for todo in self.get_todos(user_id):
            if todo.id == todo_id:
                return todo
        return None

    def get_categories(self, user_id: str) -> List[Category]:
        return self.get_user_data(user_id).categories

    def get_tags(self, user_id: str) -> List[Tag]:
        return self.get_user_data(user_id).tags

    def has_user_migrated(self, user_id: str) -> bool:
        return self.get_user_data(user_id).migrated


class InMemoryTodoStore(TodoStore):
    """In-memory store, one UserData per user ID"""

    def __init__(self):
        self._users: Dict[str, UserData] = {}

    def _data(self, user_id: str) -> UserData:
        if user_id not in self._users:
            logger.debug(f"Creating default data for user {user_id}")
            self._users[user_id] = get_default_user_data()
        return self._users[user_id]

    def get_user_data(self, user_id: str) -> UserData:
        # Deep copy so callers cannot mutate stored state behind the store's back
        return self._data(user_id).model_copy(deep=True)

    def set_user_data(self, user_id: str, **fields: Any) -> UserData:
        allowed = {"todos", "categories", "tags"}
        unknown = set(fields) - allowed
        if unknown:
            # migrated only flips through import_user_data / set_user_migrated
            raise ValueError(f"Cannot set user data fields: {sorted(unknown)}")
        merged = self._data(user_id).model_copy(update=fields)
        category_ids = {category.id for category in merged.categories}
        tag_ids = {tag.id for tag in merged.tags}
        merged.todos = [
            todo.model_copy(update={
                "category_id": todo.category_id if todo.category_id in category_ids else None,
                "tags": [t for t in todo.tags if t in tag_ids],
            })
            for todo in merged.todos
        ]
        self._users[user_id] = merged
        return self.get_user_data(user_id)

    def add_todo(self, user_id: str, todo: Todo) -> Todo:
        data = self._data(user_id)
        data.todos = [todo.model_copy(deep=True), *data.todos]
        logger.debug(f"Added todo {todo.id} for user {user_id}")
        return todo

    def update_todo(self, user_id: str, todo_id: str, updates: Dict[str, Any]) -> Optional[Todo]:
        data = self._data(user_id)
        for index, todo in enumerate(data.todos):
            if todo.id == todo_id:
                # id and createdAt are immutable
                fields = {k: v for k, v in updates.items() if k not in ("id", "created_at")}
                fields["updated_at"] = utc_now_iso()
                data.todos[index] = todo.model_copy(update=fields)
                logger.debug(f"Updated todo {todo_id} for user {user_id}")
                return data.todos[index].model_copy(deep=True)
        return None

    def delete_todo(self, user_id: str, todo_id: str) -> bool:
        data = self._data(user_id)
        initial_length = len(data.todos)
        data.todos = [todo for todo in data.todos if todo.id != todo_id]
        removed = len(data.todos) < initial_length
        if removed:
            logger.debug(f"Deleted todo {todo_id} for user {user_id}")
        return removed

    def reorder_todos(self, user_id: str, from_index: int, to_index: int) -> Optional[List[Todo]]:
        data = self._data(user_id)
        length = len(data.todos)
        if not (0 <= from_index < length and 0 <= to_index < length):
            return None
        todos = list(data.todos)
        moved = todos.pop(from_index)
        todos.insert(to_index, moved)
        data.todos = todos
        logger.debug(f"Moved todo {moved.id} from {from_index} to {to_index} for user {user_id}")
        return self.get_todos(user_id)

    def add_category(self, user_id: str, category: Category) -> Category:
        data = self._data(user_id)
        data.categories = [*data.categories, category.model_copy()]
        logger.debug(f"Added category {category.id} for user {user_id}")
        return category

    def delete_category(self, user_id: str, category_id: str) -> bool:
        data = self._data(user_id)
        initial_length = len(data.categories)
        data.categories = [c for c in data.categories if c.id != category_id]
        if len(data.categories) == initial_length:
            return False
        # Cascade: todos in the deleted category become uncategorized
        data.todos = [
            todo.model_copy(update={"category_id": None}) if todo.category_id == category_id else todo
            for todo in data.todos
        ]
        logger.debug(f"Deleted category {category_id} for user {user_id}")
        return True

    def add_tag(self, user_id: str, tag: Tag) -> Tag:
        data = self._data(user_id)
        data.tags = [*data.tags, tag.model_copy()]
        logger.debug(f"Added tag {tag.id} for user {user_id}")
        return tag

    def delete_tag(self, user_id: str, tag_id: str) -> bool:
        data = self._data(user_id)
        initial_length = len(data.tags)
        data.tags = [t for t in data.tags if t.id != tag_id]
        if len(data.tags) == initial_length:
            return False
        # Cascade: drop the tag from every todo
        data.todos = [
            todo.model_copy(update={"tags": [t for t in todo.tags if t != tag_id]}) if tag_id in todo.tags else todo
            for todo in data.todos
        ]
        logger.debug(f"Deleted tag {tag_id} for user {user_id}")
        return True

    def set_user_migrated(self, user_id: str) -> None:
        self._data(user_id).migrated = True

    def import_user_data(self, user_id: str, data: TodoState) -> UserData:
        imported = data.model_copy(deep=True)
        self._users[user_id] = UserData(
            todos=imported.todos,
            categories=imported.categories,
            tags=imported.tags,
            migrated=True,
        )
        logger.debug(f"Imported data for user {user_id}")
        return self.get_user_data(user_id)
