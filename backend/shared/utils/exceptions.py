"""
Centralized exceptions for consistent error handling.

Every error is an HTTPException subclass so the REST layer maps it to a
status code without translation, while the domain layer raises and catches
the same typed classes. Each exception logs itself on construction and
keeps its context as attributes for programmatic callers.

Usage:
    from shared.utils.exceptions import NotFoundError, ForbiddenError, ValidationError

    raise NotFoundError("Product", product_id)
    raise ForbiddenError("command.mark_paid", staff_id=staff_id)
    raise ValidationError("Quantity must be between 1 and 99", field="quantity")
"""

from typing import Any, Sequence

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions inherit from this class to ensure consistent
    logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        self.context = log_context
        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def __str__(self) -> str:
        return str(self.detail)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Command", command_id)
        raise NotFoundError("Table", table_id, restaurant_id=restaurant_id)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 403 Forbidden Errors
# =============================================================================


class ForbiddenError(AppException):
    """
    Authorization error (403).

    Usage:
        raise ForbiddenError("command.close", staff_id=staff_id, restaurant_id=rid)
    """

    def __init__(self, action: str | None = None, **log_context: Any):
        if action:
            detail = f"Not authorized to perform {action}"
        else:
            detail = "Access denied"

        self.action = action
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Price must not be negative")
        raise ValidationError("Invalid quantity", field="quantity", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        self.field = log_context.get("field")
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 422 Unresolvable Data Errors
# =============================================================================


class MissingFieldError(AppException):
    """
    A required field could not be resolved from a stored record (422).

    Raised by the schema resolver when none of the aliases of a required
    field carries a value, and by the SQL repository when no physical
    column exists for a required field on write.
    """

    def __init__(self, entity: str, field: str, aliases: Sequence[str], **log_context: Any):
        self.entity = entity
        self.field = field
        self.aliases = tuple(aliases)
        self.first_alias = self.aliases[0] if self.aliases else field

        detail = (
            f"{entity} record is missing required field '{field}' "
            f"(tried: {', '.join(self.aliases)})"
        )
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            log_level="error",
            entity=entity,
            field=field,
            first_alias=self.first_alias,
            aliases=list(self.aliases),
            **log_context,
        )


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("Table 4 already has an open command")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidTableStateError(ConflictError):
    """Table is not in a status that allows the requested transition."""

    def __init__(self, table_id: str, current_status: str, operation: str, **log_context: Any):
        self.table_id = table_id
        self.current_status = current_status
        self.operation = operation
        detail = f"Cannot {operation} table {table_id} while it is '{current_status}'"
        super().__init__(
            detail,
            table_id=table_id,
            current_status=current_status,
            operation=operation,
            **log_context,
        )


class InvalidTransitionError(ConflictError):
    """Command status does not allow the requested operation."""

    def __init__(
        self,
        entity: str,
        from_status: str,
        operation: str,
        reason: str | None = None,
        **log_context: Any,
    ):
        self.entity = entity
        self.from_status = from_status
        self.operation = operation
        self.reason = reason
        detail = f"Cannot {operation} {entity} in status '{from_status}'"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(
            detail,
            entity=entity,
            from_status=from_status,
            operation=operation,
            **log_context,
        )


class ConcurrentModificationError(ConflictError):
    """A conditional write matched no row: another writer changed the record first."""

    def __init__(self, entity: str, entity_id: str, expected_status: str, **log_context: Any):
        self.entity = entity
        self.entity_id = entity_id
        self.expected_status = expected_status
        detail = f"{entity} {entity_id} was modified concurrently (expected status '{expected_status}')"
        super().__init__(
            detail,
            entity=entity,
            entity_id=entity_id,
            expected_status=expected_status,
            **log_context,
        )


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """Internal server error (500)."""

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        self.operation = operation
        detail = f"Database error during {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)
