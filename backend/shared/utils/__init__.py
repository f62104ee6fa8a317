"""
Utilities module: Exceptions, validators, schemas.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ForbiddenError,
    ValidationError,
    MissingFieldError,
    ConflictError,
    InvalidTableStateError,
    InvalidTransitionError,
    ConcurrentModificationError,
    DatabaseError,
)
from shared.utils.validators import (
    parse_money,
    escape_like_pattern,
    validate_quantity,
)
from shared.utils.schemas import ErrorResponse

__all__ = [
    # exceptions
    "AppException",
    "NotFoundError",
    "ForbiddenError",
    "ValidationError",
    "MissingFieldError",
    "ConflictError",
    "InvalidTableStateError",
    "InvalidTransitionError",
    "ConcurrentModificationError",
    "DatabaseError",
    # validators
    "parse_money",
    "escape_like_pattern",
    "validate_quantity",
    # schemas
    "ErrorResponse",
]
