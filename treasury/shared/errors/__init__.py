from .base import (
    AppError,
    AuthenticationError,
    CapacityError,
    ConflictError,
    DomainError,
    InfrastructureError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from .http import handle_app_error, register_error_handler

__all__ = [
    "AppError",
    "AuthenticationError",
    "CapacityError",
    "ConflictError",
    "DomainError",
    "InfrastructureError",
    "NotFoundError",
    "StoreUnavailableError",
    "ValidationError",
    "handle_app_error",
    "register_error_handler",
]
