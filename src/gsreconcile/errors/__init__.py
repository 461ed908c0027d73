"""Public error exports for gsreconcile."""

from __future__ import annotations

from .exceptions import (
    AbsenceError,
    ApiError,
    AuthError,
    CancelledError,
    ConflictError,
    DeadlineExceededError,
    GSReconcileError,
    HttpErrorInfo,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    RemoteCallError,
    ValidationError,
    map_http_error,
)

__all__ = [
    "GSReconcileError",
    "ValidationError",
    "RemoteCallError",
    "AbsenceError",
    "CancelledError",
    "DeadlineExceededError",
    "AuthError",
    "PermissionError",
    "InvalidArgumentError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "NetworkError",
    "ApiError",
    "HttpErrorInfo",
    "map_http_error",
]
