"""Operation kinds for server plans."""

from __future__ import annotations

from enum import Enum


class OperationKind(str, Enum):
    """Every remote mutation a plan can issue."""

    SHUTDOWN = "SHUTDOWN"
    START = "START"
    UPDATE_ATTRIBUTES = "UPDATE_ATTRIBUTES"
    LINK_STORAGE = "LINK_STORAGE"
    UNLINK_STORAGE = "UNLINK_STORAGE"
    LINK_NETWORK = "LINK_NETWORK"
    UNLINK_NETWORK = "UNLINK_NETWORK"
    LINK_IP = "LINK_IP"
    UNLINK_IP = "UNLINK_IP"
    LINK_ISO = "LINK_ISO"
    UNLINK_ISO = "UNLINK_ISO"
    DELETE = "DELETE"


POWER_KINDS: frozenset[OperationKind] = frozenset(
    {OperationKind.SHUTDOWN, OperationKind.START}
)

PERIPHERAL_KINDS: frozenset[OperationKind] = frozenset(
    {
        OperationKind.LINK_STORAGE,
        OperationKind.UNLINK_STORAGE,
        OperationKind.LINK_NETWORK,
        OperationKind.UNLINK_NETWORK,
        OperationKind.LINK_IP,
        OperationKind.UNLINK_IP,
        OperationKind.LINK_ISO,
        OperationKind.UNLINK_ISO,
    }
)
