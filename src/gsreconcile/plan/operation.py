"""Plan operation model (explicit typed payloads; no args dict)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gsreconcile.models import IPAttachment, NetworkAttachment, StorageAttachment

from .actions import OperationKind


@dataclass(frozen=True, slots=True)
class AttributeUpdate:
    """Attributes sent with UPDATE_ATTRIBUTES; unchanged fields are no-ops remotely."""

    name: str
    cores: int
    memory_gb: int
    availability_zone: Optional[str] = None
    labels: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class Operation:
    """
    A single operation within a ServerPlan.

    The payload field used depends on kind:
        - UPDATE_ATTRIBUTES: attributes
        - LINK_STORAGE: storage
        - LINK_NETWORK: network
        - LINK_IP: ip
        - UNLINK_* / LINK_ISO: target_id
        - SHUTDOWN / START / DELETE: none
    """

    seq: int
    kind: OperationKind

    attributes: Optional[AttributeUpdate] = None
    storage: Optional[StorageAttachment] = None
    network: Optional[NetworkAttachment] = None
    ip: Optional[IPAttachment] = None
    target_id: Optional[str] = None

    @property
    def target(self) -> Optional[str]:
        """Object id this operation acts on (None for server-level operations)."""
        if self.storage is not None:
            return self.storage.ref.object_id
        if self.network is not None:
            return self.network.ref.object_id
        if self.ip is not None:
            return self.ip.ref.object_id
        return self.target_id

    def describe(self) -> str:
        target = self.target
        if target is None:
            return self.kind.value
        return f"{self.kind.value}({target})"

    def validate_required_fields(self) -> None:
        """Validate required fields according to kind. Raises ValueError."""
        if self.kind in (OperationKind.SHUTDOWN, OperationKind.START, OperationKind.DELETE):
            return

        if self.kind is OperationKind.UPDATE_ATTRIBUTES:
            _require(self.attributes, "attributes")
            return

        if self.kind is OperationKind.LINK_STORAGE:
            _require(self.storage, "storage")
            return

        if self.kind is OperationKind.LINK_NETWORK:
            _require(self.network, "network")
            return

        if self.kind is OperationKind.LINK_IP:
            _require(self.ip, "ip")
            return

        if self.kind in (
            OperationKind.UNLINK_STORAGE,
            OperationKind.UNLINK_NETWORK,
            OperationKind.UNLINK_IP,
            OperationKind.LINK_ISO,
            OperationKind.UNLINK_ISO,
        ):
            _require(self.target_id, "target_id")
            return

        raise ValueError(f"Unsupported operation kind: {self.kind}")


def _require(value: object, field_name: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"Missing required field: {field_name}")
