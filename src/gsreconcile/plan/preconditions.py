"""Validation of a desired ServerSpec before any remote mutation."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Optional

from gsreconcile.errors import GSReconcileError, ValidationError
from gsreconcile.models import (
    MAX_NETWORKS,
    MAX_STORAGES,
    HardwareProfile,
    IPAttachment,
    PeripheralRef,
    ServerSpec,
    ServerState,
)

from .differ import identity_of

if TYPE_CHECKING:
    from gsreconcile.context import RequestContext
    from gsreconcile.controller.protocol import RemoteResourceClient

MAX_NAME_LENGTH: int = 64


def validate_server_spec(spec: ServerSpec) -> None:
    """
    Check local invariants of a desired spec.

    Raises:
        ValidationError: on the first violated invariant.
    """
    if not isinstance(spec.name, str) or not spec.name.strip():
        raise ValidationError("Server name must be a non-empty string")
    if len(spec.name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Server name exceeds {MAX_NAME_LENGTH} characters",
            details={"name": spec.name},
        )
    if spec.cores < 1:
        raise ValidationError("cores must be >= 1", details={"cores": spec.cores})
    if spec.memory_gb < 1:
        raise ValidationError("memory must be >= 1", details={"memory_gb": spec.memory_gb})

    boot = [s.ref.object_id for s in spec.storages if s.is_boot_device]
    if len(boot) > 1:
        raise ValidationError(
            "At most one storage may be the boot device",
            details={"boot_storages": boot},
        )

    if len(spec.storages) > MAX_STORAGES:
        raise ValidationError(
            f"At most {MAX_STORAGES} storages can be attached",
            details={"count": len(spec.storages)},
        )
    if len(spec.networks) > MAX_NETWORKS:
        raise ValidationError(
            f"At most {MAX_NETWORKS} networks can be attached",
            details={"count": len(spec.networks)},
        )

    _reject_duplicates("storage", [identity_of(s)[1] for s in spec.storages])
    _reject_duplicates("network", [identity_of(n)[1] for n in spec.networks])

    _check_family_slot(spec.ipv4, 4, "ipv4")
    _check_family_slot(spec.ipv6, 6, "ipv6")


def validate_ip_families(
    spec: ServerSpec,
    client: "RemoteResourceClient",
    ctx: "RequestContext",
    *,
    only: Optional[set[str]] = None,
) -> None:
    """
    Check each requested IP against the family the remote side reports.

    Args:
        only: restrict the check to these IP object ids (e.g. newly linked ones).

    Raises:
        ValidationError: on a family mismatch or when the family cannot be read.
    """
    for ip, expected in ((spec.ipv4, 4), (spec.ipv6, 6)):
        if ip is None:
            continue
        ip_id = ip.ref.object_id
        if only is not None and ip_id not in only:
            continue

        try:
            actual = client.resolve_ip_family(ctx, ip_id)
        except GSReconcileError as exc:
            raise ValidationError(
                f"Could not read the family of IP address {ip_id}",
                details={"ip_id": ip_id},
                cause=exc,
            ) from exc

        if actual != expected:
            raise ValidationError(
                f"The IP address with UUID {ip_id} is not version {expected}",
                details={"ip_id": ip_id, "expected": expected, "actual": actual},
            )


def validate_in_place_change(old: ServerState, new: ServerSpec) -> None:
    """
    Reject changes that can only be made by replacing the server.

    hardware_profile and location_id are fixed at creation. An observed
    location of None (not reported) is not compared.

    Raises:
        ValidationError: with details["requires_replacement"] set.
    """
    observed_profile = HardwareProfile.LEGACY if old.legacy else old.hardware_profile
    if new.hardware_profile is not observed_profile:
        raise ValidationError(
            "hardware_profile cannot be changed on an existing server",
            details={
                "field": "hardware_profile",
                "observed": observed_profile.value,
                "desired": new.hardware_profile.value,
                "requires_replacement": True,
            },
        )
    if old.location_id is not None and new.location_id != old.location_id:
        raise ValidationError(
            "location_id cannot be changed on an existing server",
            details={
                "field": "location_id",
                "observed": old.location_id,
                "desired": new.location_id,
                "requires_replacement": True,
            },
        )


def reject_declared_public_network(spec: ServerSpec, public_network: PeripheralRef) -> None:
    """
    The public network follows the public IPs and must not be listed in networks.

    Raises:
        ValidationError: if networks contains the public network.
    """
    for network in spec.networks:
        if network.ref.object_id == public_network.object_id:
            raise ValidationError(
                "The public network is attached through ipv4/ipv6, not networks",
                details={"network_id": public_network.object_id},
            )


def _check_family_slot(ip: Optional[IPAttachment], expected: int, slot: str) -> None:
    if ip is not None and ip.family != expected:
        raise ValidationError(
            f"{slot} must reference an IPv{expected} address",
            details={"ip_id": ip.ref.object_id, "family": ip.family},
        )


def _reject_duplicates(what: str, object_ids: list[str]) -> None:
    dupes = sorted(oid for oid, n in Counter(object_ids).items() if n > 1)
    if dupes:
        raise ValidationError(
            f"Duplicate {what} attachments",
            details={"object_ids": dupes},
        )
