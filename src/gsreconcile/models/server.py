"""Data model for servers and their peripherals."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_LOCATION_ID: str = "45ed677b-3702-4b36-be2a-a2eab9827950"

MAX_STORAGES: int = 8
MAX_NETWORKS: int = 7


class PeripheralKind(str, Enum):
    """Kinds of attachable server peripherals."""

    STORAGE = "storage"
    NETWORK = "network"
    PUBLIC_IP = "public_ip"
    ISO_IMAGE = "iso_image"


class HardwareProfile(str, Enum):
    """Server hardware profiles accepted by the API."""

    DEFAULT = "default"
    LEGACY = "legacy"
    NESTED = "nested"
    CISCO_CSR = "cisco_csr"
    SOPHOS_UTM = "sophos_utm"
    F5_BIGIP = "f5_bigip"
    Q35 = "q35"
    Q35_NESTED = "q35_nested"

    @classmethod
    def parse(cls, value: str) -> "HardwareProfile":
        try:
            return cls(value)
        except ValueError:
            valid = ",".join(p.value for p in cls)
            raise ValueError(
                f"{value} is not a valid hardware profile. "
                f"Valid hardware profiles are: {valid}"
            ) from None


@dataclass(frozen=True, slots=True)
class PeripheralRef:
    """Identifies one attachable resource. Identity is (kind, object_id)."""

    object_id: str
    kind: PeripheralKind

    @property
    def identity(self) -> tuple[PeripheralKind, str]:
        return (self.kind, self.object_id)


@dataclass(frozen=True, slots=True)
class StorageAttachment:
    ref: PeripheralRef
    is_boot_device: bool = False

    @classmethod
    def of(cls, object_id: str, *, boot: bool = False) -> "StorageAttachment":
        return cls(PeripheralRef(object_id, PeripheralKind.STORAGE), boot)


@dataclass(frozen=True, slots=True)
class NetworkAttachment:
    ref: PeripheralRef
    is_boot_device: bool = False
    firewall_template_id: Optional[str] = None

    @classmethod
    def of(
        cls,
        object_id: str,
        *,
        boot: bool = False,
        firewall_template_id: Optional[str] = None,
    ) -> "NetworkAttachment":
        return cls(
            PeripheralRef(object_id, PeripheralKind.NETWORK),
            boot,
            firewall_template_id,
        )


@dataclass(frozen=True, slots=True)
class IPAttachment:
    ref: PeripheralRef
    family: int

    def __post_init__(self) -> None:
        if self.family not in (4, 6):
            raise ValueError(f"IP family must be 4 or 6, got {self.family}")

    @classmethod
    def of(cls, object_id: str, family: int) -> "IPAttachment":
        return cls(PeripheralRef(object_id, PeripheralKind.PUBLIC_IP), family)


def iso_ref(object_id: str) -> PeripheralRef:
    """Build a PeripheralRef for an ISO image."""
    return PeripheralRef(object_id, PeripheralKind.ISO_IMAGE)


@dataclass(frozen=True, slots=True)
class ServerSpec:
    """
    Desired server configuration. Caller-owned, read-only per reconciliation.

    Notes:
        - storages is ordered; the order drives attachment order.
        - hardware_profile and location_id are fixed at creation; changing
          either on an existing server requires replacing it.
    """

    name: str
    cores: int
    memory_gb: int
    hardware_profile: HardwareProfile = HardwareProfile.DEFAULT
    availability_zone: Optional[str] = None
    labels: frozenset[str] = frozenset()
    storages: tuple[StorageAttachment, ...] = ()
    networks: frozenset[NetworkAttachment] = frozenset()
    ipv4: Optional[IPAttachment] = None
    ipv6: Optional[IPAttachment] = None
    iso_image: Optional[PeripheralRef] = None
    power_on: bool = False
    location_id: str = DEFAULT_LOCATION_ID

    @property
    def boot_storage(self) -> Optional[StorageAttachment]:
        for storage in self.storages:
            if storage.is_boot_device:
                return storage
        return None

    @property
    def has_public_ip(self) -> bool:
        return self.ipv4 is not None or self.ipv6 is not None


@dataclass(frozen=True, slots=True)
class ServerState:
    """
    Observed server snapshot. Never mutated; each read yields a new one.

    The public network is not part of networks: it follows the public IPs.
    The read-only fields at the bottom are reported but never diffed.
    """

    server_id: str
    name: str = ""
    cores: int = 0
    memory_gb: int = 0
    hardware_profile: HardwareProfile = HardwareProfile.DEFAULT
    availability_zone: Optional[str] = None
    labels: frozenset[str] = frozenset()
    storages: tuple[StorageAttachment, ...] = ()
    networks: frozenset[NetworkAttachment] = frozenset()
    ipv4: Optional[IPAttachment] = None
    ipv6: Optional[IPAttachment] = None
    iso_image: Optional[PeripheralRef] = None
    power: bool = False
    legacy: bool = False
    location_id: Optional[str] = None

    current_price: Optional[float] = None
    console_token: Optional[str] = None
    usage_minutes_cores: Optional[int] = None
    usage_minutes_memory: Optional[int] = None
    auto_recovery: Optional[bool] = None

    @classmethod
    def empty(cls, server_id: str = "") -> "ServerState":
        """Substitute state for a server that does not exist yet."""
        return cls(server_id=server_id)

    @property
    def is_legacy(self) -> bool:
        return self.legacy or self.hardware_profile is HardwareProfile.LEGACY

    @property
    def has_public_ip(self) -> bool:
        return self.ipv4 is not None or self.ipv6 is not None


@dataclass(frozen=True, slots=True)
class CreatePayload:
    """Everything sent with the single create call."""

    name: str
    cores: int
    memory_gb: int
    hardware_profile: HardwareProfile
    location_id: str
    availability_zone: Optional[str] = None
    labels: frozenset[str] = frozenset()
    boot_storage: Optional[StorageAttachment] = None
    iso_image: Optional[PeripheralRef] = None
    ips: tuple[IPAttachment, ...] = ()
    public_network: Optional[NetworkAttachment] = None
    networks: tuple[NetworkAttachment, ...] = ()
