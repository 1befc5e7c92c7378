"""
Validation and sanitization of untrusted input.

Two policies live here:

* entity validators (``validate_todo``, ``validate_category``,
  ``validate_tag``) feed ``validate_todo_state``, which is lenient: bad items
  are dropped and reported as warnings so a migration never loses a user's
  whole history over one record.
* input validators (``validate_new_todo_input`` and friends) guard live
  mutations and are strict: any invalid field fails the whole request.

String sanitization is a conservative denylist (script blocks and inline
event handlers), not a full HTML sanitizer.
"""
import logging
import re
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..schemas.todo import Category, Tag, Todo, TodoState
from ..utils.helpers import convert_datetime_to_utc, to_iso_string, utc_now_iso

logger = logging.getLogger(__name__)

# Maximum lengths for string fields
MAX_TITLE_LENGTH = 500
MAX_NAME_LENGTH = 100
MAX_ICON_LENGTH = 50
MAX_ID_LENGTH = 100

# Collection caps, excess entries are dropped
MAX_TODOS = 10000
MAX_CATEGORIES = 100
MAX_TAGS = 100
MAX_TAGS_PER_TODO = 20

HEX_COLOR_REGEX = re.compile(r"#[0-9A-Fa-f]{6}")
SAFE_ID_REGEX = re.compile(r"[a-zA-Z0-9_-]+")
UUID_REGEX = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)
ISO_DATE_REGEX = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{3})?Z")

SCRIPT_TAG_REGEX = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
EVENT_HANDLER_REGEX = re.compile(r"on\w+\s*=", re.IGNORECASE | re.ASCII)

_datetime_adapter = TypeAdapter(datetime)


class ValidationResult(BaseModel):
    """Outcome of validating one untrusted value"""
    valid: bool
    data: Any = None
    errors: List[str] = Field(default_factory=list)


def _failed(errors: List[str]) -> ValidationResult:
    return ValidationResult(valid=False, errors=errors)


def sanitize_string(value: Any, max_length: int) -> Optional[str]:
    """Trim, truncate and strip script blocks / inline event handlers."""
    if not isinstance(value, str):
        return None
    sanitized = value.strip()[:max_length]
    sanitized = SCRIPT_TAG_REGEX.sub("", sanitized)
    return EVENT_HANDLER_REGEX.sub("", sanitized)


def is_valid_uuid(value: str) -> bool:
    return UUID_REGEX.fullmatch(value) is not None


def validate_id(value: Any) -> Optional[str]:
    """Accept restricted-charset IDs and canonical UUIDs, reject anything else."""
    if not isinstance(value, str):
        return None
    sanitized = value.strip()[:MAX_ID_LENGTH]
    if not SAFE_ID_REGEX.fullmatch(sanitized) and not is_valid_uuid(sanitized):
        return None
    return sanitized


def validate_color(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not HEX_COLOR_REGEX.fullmatch(trimmed):
        return None
    return trimmed


def _parse_datetime(value: str) -> Optional[datetime]:
    try:
        return convert_datetime_to_utc(_datetime_adapter.validate_python(value))
    except (ValidationError, OverflowError):
        # OverflowError: UTC conversion pushes the value past year 1 or 9999
        return None


def validate_iso_date(value: Any) -> Optional[str]:
    """
    Validate a timestamp string.

    Canonical ``YYYY-MM-DDTHH:MM:SS(.mmm)Z`` strings are kept verbatim; any
    other parseable date is re-serialized to canonical form.

    Returns:
        str: canonical ISO string, or None when the value cannot be parsed
    """
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    parsed = _parse_datetime(trimmed)
    if parsed is None:
        return None
    if ISO_DATE_REGEX.fullmatch(trimmed):
        return trimmed
    return to_iso_string(parsed)


def _validate_tag_ids(values: Iterable[Any]) -> List[str]:
    """Cap a tag-ID list, silently dropping malformed and repeated entries."""
    tags = []
    for raw in list(values)[:MAX_TAGS_PER_TODO]:
        tag_id = validate_id(raw)
        if tag_id is not None and tag_id not in tags:
            tags.append(tag_id)
    return tags


def validate_todo(todo: Any) -> ValidationResult:
    """Validate and sanitize a single Todo"""
    if not isinstance(todo, dict):
        return _failed(["Todo must be an object"])

    errors = []

    todo_id = validate_id(todo.get("id"))
    if not todo_id:
        errors.append("Invalid or missing todo ID")

    title = sanitize_string(todo.get("title"), MAX_TITLE_LENGTH)
    if not title:
        errors.append("Invalid or missing todo title")

    completed = todo.get("completed")
    if not isinstance(completed, bool):
        completed = False

    category_id = None
    if todo.get("categoryId") is not None:
        category_id = validate_id(todo["categoryId"])
        if category_id is None:
            errors.append("Invalid category ID format")

    tags = _validate_tag_ids(todo["tags"]) if isinstance(todo.get("tags"), list) else []

    # Unparseable timestamps fall back to now rather than rejecting the todo
    now = utc_now_iso()
    created_at = validate_iso_date(todo.get("createdAt")) or now
    updated_at = validate_iso_date(todo.get("updatedAt")) or now
    created = _parse_datetime(created_at)
    updated = _parse_datetime(updated_at)
    if created is None:
        created_at, created = now, _parse_datetime(now)
    if updated is None or updated < created:
        updated_at = created_at

    if errors:
        return _failed(errors)

    return ValidationResult(
        valid=True,
        data=Todo(
            id=todo_id,
            title=title,
            completed=completed,
            category_id=category_id,
            tags=tags,
            created_at=created_at,
            updated_at=updated_at,
        ),
    )


def validate_category(category: Any) -> ValidationResult:
    """Validate and sanitize a single Category"""
    if not isinstance(category, dict):
        return _failed(["Category must be an object"])

    errors = []

    category_id = validate_id(category.get("id"))
    if not category_id:
        errors.append("Invalid or missing category ID")

    name = sanitize_string(category.get("name"), MAX_NAME_LENGTH)
    if not name:
        errors.append("Invalid or missing category name")

    icon = sanitize_string(category.get("icon"), MAX_ICON_LENGTH)
    if not icon:
        errors.append("Invalid or missing category icon")

    color = validate_color(category.get("color"))
    if not color:
        errors.append("Invalid or missing category color (must be hex format #RRGGBB)")

    if errors:
        return _failed(errors)

    return ValidationResult(valid=True, data=Category(id=category_id, name=name, icon=icon, color=color))


def validate_tag(tag: Any) -> ValidationResult:
    """Validate and sanitize a single Tag"""
    if not isinstance(tag, dict):
        return _failed(["Tag must be an object"])

    errors = []

    tag_id = validate_id(tag.get("id"))
    if not tag_id:
        errors.append("Invalid or missing tag ID")

    name = sanitize_string(tag.get("name"), MAX_NAME_LENGTH)
    if not name:
        errors.append("Invalid or missing tag name")

    color = validate_color(tag.get("color"))
    if not color:
        errors.append("Invalid or missing tag color (must be hex format #RRGGBB)")

    if errors:
        return _failed(errors)

    return ValidationResult(valid=True, data=Tag(id=tag_id, name=name, color=color))


def _validate_items(raw: Any, limit: int, validator, label: str, errors: List[str]) -> list:
    valid_items = []
    if not isinstance(raw, list):
        return valid_items
    seen_ids = set()
    for index, item in enumerate(raw[:limit]):
        result = validator(item)
        if not result.valid:
            errors.append(f"{label} at index {index}: {', '.join(result.errors)}")
        elif result.data.id in seen_ids:
            # IDs are compared after truncation, so long IDs sharing a prefix collide here too
            errors.append(f"{label} at index {index}: Duplicate {label.lower()} ID")
        else:
            seen_ids.add(result.data.id)
            valid_items.append(result.data)
    return valid_items


def validate_todo_state(state: Any) -> ValidationResult:
    """
    Validate and sanitize a full client-side state for migration.

    Item failures are collected in ``errors`` as warnings; the result is
    valid with whatever survived. Todo references to categories or tags that
    did not survive validation are dropped.
    """
    if not isinstance(state, dict):
        return _failed(["State must be an object"])

    warnings: List[str] = []
    todos = _validate_items(state.get("todos"), MAX_TODOS, validate_todo, "Todo", warnings)
    categories = _validate_items(state.get("categories"), MAX_CATEGORIES, validate_category, "Category", warnings)
    tags = _validate_items(state.get("tags"), MAX_TAGS, validate_tag, "Tag", warnings)

    # Cross-validate: todo categoryIds and tags must reference surviving items
    category_ids = {category.id for category in categories}
    tag_ids = {tag.id for tag in tags}
    cross_validated = [
        todo.model_copy(update={
            "category_id": todo.category_id if todo.category_id in category_ids else None,
            "tags": [tag_id for tag_id in todo.tags if tag_id in tag_ids],
        })
        for todo in todos
    ]

    if warnings:
        logger.debug(f"State validation produced {len(warnings)} warnings")

    return ValidationResult(
        valid=True,
        data=TodoState(todos=cross_validated, categories=categories, tags=tags),
        errors=warnings,
    )


def validate_new_todo_input(payload: Any) -> ValidationResult:
    """Validate input for creating a new todo"""
    if not isinstance(payload, dict):
        return _failed(["Input must be an object"])

    title = sanitize_string(payload.get("title"), MAX_TITLE_LENGTH)
    if not title:
        return _failed(["Title is required and must be a non-empty string"])

    category_id = None
    if payload.get("categoryId") is not None:
        category_id = validate_id(payload["categoryId"])

    tags = _validate_tag_ids(payload["tags"]) if isinstance(payload.get("tags"), list) else []

    return ValidationResult(valid=True, data={"title": title, "category_id": category_id, "tags": tags})


def validate_update_todo_input(payload: Any) -> ValidationResult:
    """Validate a partial todo update; only keys present in the payload are checked."""
    if not isinstance(payload, dict):
        return _failed(["Input must be an object"])

    errors = []
    updates: Dict[str, Any] = {}

    if "title" in payload:
        title = sanitize_string(payload["title"], MAX_TITLE_LENGTH)
        if not title:
            errors.append("Title must be a non-empty string")
        else:
            updates["title"] = title

    if "completed" in payload:
        if not isinstance(payload["completed"], bool):
            errors.append("Completed must be a boolean")
        else:
            updates["completed"] = payload["completed"]

    if "categoryId" in payload:
        if payload["categoryId"] is None:
            updates["category_id"] = None
        else:
            category_id = validate_id(payload["categoryId"])
            if category_id is None:
                errors.append("Invalid category ID format")
            else:
                updates["category_id"] = category_id

    if "tags" in payload:
        if not isinstance(payload["tags"], list):
            errors.append("Tags must be an array")
        else:
            updates["tags"] = _validate_tag_ids(payload["tags"])

    if errors:
        return _failed(errors)

    return ValidationResult(valid=True, data=updates)


def validate_new_category_input(payload: Any) -> ValidationResult:
    """Validate input for creating a new category"""
    if not isinstance(payload, dict):
        return _failed(["Input must be an object"])

    errors = []

    name = sanitize_string(payload.get("name"), MAX_NAME_LENGTH)
    if not name:
        errors.append("Name is required and must be a non-empty string")

    icon = sanitize_string(payload.get("icon"), MAX_ICON_LENGTH)
    if not icon:
        errors.append("Icon is required and must be a non-empty string")

    color = validate_color(payload.get("color"))
    if not color:
        errors.append("Color is required and must be in hex format (#RRGGBB)")

    if errors:
        return _failed(errors)

    return ValidationResult(valid=True, data={"name": name, "icon": icon, "color": color})


def validate_new_tag_input(payload: Any) -> ValidationResult:
    """Validate input for creating a new tag"""
    if not isinstance(payload, dict):
        return _failed(["Input must be an object"])

    errors = []

    name = sanitize_string(payload.get("name"), MAX_NAME_LENGTH)
    if not name:
        errors.append("Name is required and must be a non-empty string")

    color = validate_color(payload.get("color"))
    if not color:
        errors.append("Color is required and must be in hex format (#RRGGBB)")

    if errors:
        return _failed(errors)

    return ValidationResult(valid=True, data={"name": name, "color": color})


def validate_references(
    category_id: Optional[str],
    tag_ids: Optional[List[str]],
    categories: List[Category],
    tags: List[Tag],
) -> List[str]:
    """Return one error per category or tag reference that does not resolve."""
    errors = []
    if category_id is not None and category_id not in {category.id for category in categories}:
        errors.append(f"Category not found: {category_id}")
    known_tags = {tag.id for tag in tags}
    for tag_id in tag_ids or []:
        if tag_id not in known_tags:
            errors.append(f"Tag not found: {tag_id}")
    return errors


def _is_index(value: Any) -> bool:
    # bool is an int subclass; JSON true/false are not positions
    return isinstance(value, int) and not isinstance(value, bool)


def validate_reorder_input(payload: Dict[str, Any], length: int) -> ValidationResult:
    """Validate fromIndex/toIndex against the current todo list length"""
    from_index = payload.get("fromIndex")
    to_index = payload.get("toIndex")
    if not _is_index(from_index) or not _is_index(to_index):
        return _failed(["fromIndex and toIndex must be integers"])
    if not (0 <= from_index < length and 0 <= to_index < length):
        return _failed([f"Indices must be between 0 and {length - 1}"])
    return ValidationResult(valid=True, data={"from_index": from_index, "to_index": to_index})
