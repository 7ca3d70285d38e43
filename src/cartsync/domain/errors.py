"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class RemoteStoreError(Exception):
    """A remote call failed (transport error or non-2xx response)."""


def user_not_found(user_id: str) -> str:
    """Return message for missing user."""
    return f"User {user_id} not found"


def category_not_found(category_id: str) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_name_not_found(name: str) -> str:
    """Return message for missing category by name."""
    return f"Category '{name}' not found"


def duplicate_category_name(name: str) -> str:
    """Return message for a category whose normalized name already exists."""
    return f"Category with name '{name.strip()}' already exists"


def pin_taken() -> str:
    """Return message when a PIN belongs to another user."""
    return "PIN is already taken. Please choose another one."


def record_not_found(table: str, record_id: str) -> str:
    """Return message for a missing record in an arbitrary table."""
    return f"No {table} record with id {record_id}"
