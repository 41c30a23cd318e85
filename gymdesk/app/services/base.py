"""
Shared plumbing for the data access services.

Every public service method returns a ServiceResponse(data, error) pair: on
success ``error`` is None, on failure ``data`` is None (or an empty list for
list retrievals) and ``error`` is a user-facing message.
"""

import logging
from typing import Any, Generic, NamedTuple, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import NoResultFound, SQLAlchemyError
from sqlalchemy.orm import Session

from gymdesk.app.core.cache import CacheKey, QueryCache

logger = logging.getLogger(__name__)

NOT_FOUND = "The requested resource does not exist"
DUPLICATE = "This record already exists"
REFERENCED = "Cannot delete - this record is referenced by other data"
FORBIDDEN = "You do not have permission to perform this action"

# Postgres SQLSTATE codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INSUFFICIENT_PRIVILEGE = "42501"
UNDEFINED_TABLE = "42P01"
UNDEFINED_COLUMN = "42703"

SchemaT = TypeVar("SchemaT", bound=BaseModel)
T = TypeVar("T")


class ServiceResponse(NamedTuple, Generic[T]):
    data: Optional[T]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _sqlstate(exc: BaseException) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _message(exc: BaseException) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc)


def handle_store_error(exc: BaseException, default_message: str = "An unexpected error occurred") -> str:
    """Map a store failure to the message shown to the user."""
    code = _sqlstate(exc)
    message = _message(exc)

    if isinstance(exc, NoResultFound):
        return NOT_FOUND
    if code == UNIQUE_VIOLATION or "UNIQUE constraint failed" in message:
        return DUPLICATE
    if code == FOREIGN_KEY_VIOLATION or "FOREIGN KEY constraint failed" in message:
        return REFERENCED
    if code == INSUFFICIENT_PRIVILEGE or "permission denied" in message.lower():
        return FORBIDDEN
    return message or default_message


def is_missing_schema_error(exc: BaseException) -> bool:
    """True when the store reports a table or column that has not been provisioned."""
    if _sqlstate(exc) in (UNDEFINED_TABLE, UNDEFINED_COLUMN):
        return True
    message = _message(exc).lower()
    return "no such table" in message or "no such column" in message or "does not exist" in message


def describe_validation_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ()))
    message = error.get("msg", "Invalid input")
    return f"{field}: {message}" if field else message


def validate_payload(schema: Type[SchemaT], payload: Any) -> tuple[Optional[SchemaT], Optional[str]]:
    """Validate ``payload`` against ``schema`` before anything touches the store."""
    if isinstance(payload, schema):
        return payload, None
    try:
        return schema.model_validate(payload or {}), None
    except ValidationError as exc:
        return None, describe_validation_error(exc)


class BaseService:
    """Holds the request's store session and the optional query cache."""

    def __init__(self, db: Session, cache: Optional[QueryCache] = None):
        self.db = db
        self.cache = cache

    def _cached(self, key: CacheKey, loader) -> ServiceResponse:
        if self.cache is None:
            return loader()
        return self.cache.get_or_load(key, loader, should_cache=lambda result: result.error is None)

    def _invalidate(self, *prefixes: CacheKey) -> None:
        if self.cache is not None:
            self.cache.invalidate(*prefixes)

    def _store_failure(self, exc: SQLAlchemyError, operation: str, default_message: str) -> ServiceResponse:
        self.db.rollback()
        logger.error("Store error during %s: %s", operation, _message(exc))
        return ServiceResponse(None, handle_store_error(exc, default_message))

    def _list_failure(self, exc: SQLAlchemyError, operation: str) -> ServiceResponse:
        self.db.rollback()
        if is_missing_schema_error(exc):
            logger.warning("Schema not provisioned during %s, returning empty result", operation)
            return ServiceResponse([], None)
        logger.error("Store error during %s: %s", operation, _message(exc))
        return ServiceResponse([], handle_store_error(exc))

