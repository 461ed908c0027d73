"""Public model exports for gsreconcile."""

from __future__ import annotations

from .results import OperationResult, OperationStatus, ReconcileResult, ReconcileStatus
from .server import (
    DEFAULT_LOCATION_ID,
    MAX_NETWORKS,
    MAX_STORAGES,
    CreatePayload,
    HardwareProfile,
    IPAttachment,
    NetworkAttachment,
    PeripheralKind,
    PeripheralRef,
    ServerSpec,
    ServerState,
    StorageAttachment,
    iso_ref,
)

__all__ = [
    "DEFAULT_LOCATION_ID",
    "MAX_NETWORKS",
    "MAX_STORAGES",
    "PeripheralKind",
    "PeripheralRef",
    "HardwareProfile",
    "StorageAttachment",
    "NetworkAttachment",
    "IPAttachment",
    "iso_ref",
    "ServerSpec",
    "ServerState",
    "CreatePayload",
    "OperationStatus",
    "ReconcileStatus",
    "OperationResult",
    "ReconcileResult",
]
