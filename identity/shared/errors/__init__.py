from .base import (
    AppError,
    BadRequestError,
    ConflictError,
    DomainError,
    InfrastructureError,
    RepositoryError,
    UnauthenticatedError,
    UnauthorizedError,
    ValidationError,
)
from .http import handle_app_error, register_error_handler

__all__ = [
    "AppError",
    "BadRequestError",
    "ConflictError",
    "DomainError",
    "InfrastructureError",
    "RepositoryError",
    "UnauthenticatedError",
    "UnauthorizedError",
    "ValidationError",
    "handle_app_error",
    "register_error_handler",
]
