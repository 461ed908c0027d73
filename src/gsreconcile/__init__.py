"""gsreconcile public API."""

from __future__ import annotations

from gsreconcile.config import ApiConfig
from gsreconcile.context import RequestContext
from gsreconcile.controller import GridscaleController, RemoteResourceClient
from gsreconcile.errors import (
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
from gsreconcile.executor import PlanExecutor
from gsreconcile.manager import ServerReconciler
from gsreconcile.models import (
    CreatePayload,
    HardwareProfile,
    IPAttachment,
    NetworkAttachment,
    OperationResult,
    PeripheralKind,
    PeripheralRef,
    ReconcileResult,
    ServerSpec,
    ServerState,
    StorageAttachment,
)
from gsreconcile.plan import Operation, OperationKind, ServerPlan

__all__ = [
    # High-level
    "ServerReconciler",
    "PlanExecutor",
    "ApiConfig",
    "RequestContext",
    # Client
    "GridscaleController",
    "RemoteResourceClient",
    # Plan / Models
    "OperationKind",
    "Operation",
    "ServerPlan",
    "PeripheralKind",
    "PeripheralRef",
    "HardwareProfile",
    "StorageAttachment",
    "NetworkAttachment",
    "IPAttachment",
    "ServerSpec",
    "ServerState",
    "CreatePayload",
    "OperationResult",
    "ReconcileResult",
    # Errors
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
