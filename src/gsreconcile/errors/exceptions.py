"""Exception hierarchy and HTTP error mapping for gsreconcile."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class GSReconcileError(Exception):
    """
    Base exception for gsreconcile.

    Attributes:
        details: Optional structured information (e.g., HTTP status, op kind).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class ValidationError(GSReconcileError):
    """Raised when a desired spec violates an invariant (no remote call issued)."""


class RemoteCallError(GSReconcileError):
    """
    Raised when a plan operation fails against the remote client.

    details carries op_kind, target_id, seq and server_id of the failing
    operation; cause is the client-side error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
        results: Optional[list[Any]] = None,
    ) -> None:
        super().__init__(message, details=details, cause=cause)
        self.results = list(results or [])

    @property
    def op_kind(self) -> Optional[str]:
        return self.details.get("op_kind")

    @property
    def target_id(self) -> Optional[str]:
        return self.details.get("target_id")


class AbsenceError(GSReconcileError):
    """Raised when a server that must exist is absent remotely."""


class CancelledError(GSReconcileError):
    """Raised when a reconciliation is cancelled by its caller."""


class DeadlineExceededError(GSReconcileError):
    """Raised when the caller-supplied deadline has passed."""


class AuthError(GSReconcileError):
    """Raised when the API rejects the credentials (HTTP 401)."""


class PermissionError(GSReconcileError):
    """Raised when access is denied (HTTP 403)."""


class InvalidArgumentError(GSReconcileError):
    """Raised when request arguments are invalid (HTTP 400, etc.)."""


class NotFoundError(GSReconcileError):
    """Raised when a remote object is not found (HTTP 404)."""


class ConflictError(GSReconcileError):
    """Raised when the object is locked or in a conflicting state (HTTP 409/412/424)."""


class RateLimitError(GSReconcileError):
    """Raised when rate-limited (HTTP 429)."""


class NetworkError(GSReconcileError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(GSReconcileError):
    """Raised for unclassified API errors (5xx, unknown 4xx, failed requests)."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to gsreconcile exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> GSReconcileError:
    """
    Map an HTTP error to a gsreconcile exception.

    Policy:
        - 400 -> InvalidArgumentError
        - 401 -> AuthError
        - 403 -> PermissionError
        - 404 -> NotFoundError
        - 409/412/424 -> ConflictError
        - 429 -> RateLimitError
        - otherwise -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code in (409, 412, 424):
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
