"""Shared schema building blocks: camelCase wire naming and reusable field checks."""

import re
from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from gymdesk.app.core.time import ensure_utc

NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]+$")
PHONE_PATTERN = re.compile(r"^[\d\s\-\+\(\)]+$")
STAFF_PHONE_PATTERN = re.compile(r"^[\+]?[(]?[\d\s\-\(\)]{10,}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")

UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def fail(message: str, error_type: str = "value_error"):
    raise PydanticCustomError(error_type, message)


def required_text(value: Any, label: str, max_length: int) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        fail(f"{label} is required", "missing")
    if len(text) > max_length:
        fail(f"{label} must be less than {max_length} characters")
    return text


def person_name(value: Any, label: str) -> str:
    text = required_text(value, label, 50)
    if not NAME_PATTERN.match(text):
        fail(f"{label} contains invalid characters")
    return text


def optional_text(value: Any, label: str, max_length: int) -> Optional[str]:
    if value is None or value == "":
        return None
    text = str(value)
    if len(text) > max_length:
        fail(f"{label} must be less than {max_length} characters")
    return text


def optional_email(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    text = str(value).strip().lower()
    if not EMAIL_PATTERN.match(text):
        fail("Invalid email format")
    return text


def optional_phone(value: Any, pattern: re.Pattern = PHONE_PATTERN) -> Optional[str]:
    if value is None or value == "":
        return None
    text = str(value)
    if not pattern.match(text):
        fail("Invalid phone number format")
    return text


PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def strong_password(value: Any) -> str:
    text = "" if value is None else str(value)
    if len(text) < 8:
        fail("Password must be at least 8 characters")
    if len(text) > 128:
        fail("Password must be less than 128 characters")
    if not PASSWORD_PATTERN.match(text):
        fail("Password must contain at least one lowercase letter, one uppercase letter, and one number")
    return text


def string_list(value: Any, item_label: str, *, min_items: int = 0, max_items: int, plural: str) -> list[str]:
    items = list(value or [])
    if len(items) < min_items:
        fail(f"At least one {item_label.lower()} is required")
    if len(items) > max_items:
        fail(f"Maximum {max_items} {plural} allowed")
    for item in items:
        if not isinstance(item, str) or not item.strip():
            fail(f"{item_label} cannot be empty")
    return items


def bounded_number(value: Any, *, minimum: float, maximum: float, below: str, above: str):
    if value is None:
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        # Let the field type produce its own message for non-numbers.
        return value
    if value < minimum:
        fail(below)
    if value > maximum:
        fail(above)
    return value
