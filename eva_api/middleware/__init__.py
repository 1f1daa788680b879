"""Middleware package: error hierarchy, principal context and request ID."""

from eva_api.middleware.auth import PrincipalMiddleware
from eva_api.middleware.error_handler import (
    BadRequestError,
    ConflictError,
    EvaError,
    ForbiddenError,
    NotFoundError,
    ServerError,
    TooManyRequestsError,
    UnauthorizedError,
    ValidationError,
    register_error_handlers,
)
from eva_api.middleware.request_id import RequestIdMiddleware

__all__ = [
    "BadRequestError",
    "ConflictError",
    "EvaError",
    "ForbiddenError",
    "NotFoundError",
    "PrincipalMiddleware",
    "RequestIdMiddleware",
    "ServerError",
    "TooManyRequestsError",
    "UnauthorizedError",
    "ValidationError",
    "register_error_handlers",
]
