"""Creation sequencer: one create call plus deferred post-create operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from gsreconcile.errors import GSReconcileError, NotFoundError, ValidationError
from gsreconcile.models import CreatePayload, NetworkAttachment, PeripheralRef, ServerSpec

from .actions import OperationKind
from .differ import identity_of
from .preconditions import (
    reject_declared_public_network,
    validate_ip_families,
    validate_server_spec,
)
from .server_plan import PlanWriter, ServerPlan

if TYPE_CHECKING:
    from gsreconcile.context import RequestContext
    from gsreconcile.controller.protocol import RemoteResourceClient


def build_creation(
    new: ServerSpec,
    client: "RemoteResourceClient",
    ctx: "RequestContext",
) -> tuple[CreatePayload, ServerPlan]:
    """
    Build the create payload and the plan to run once the server exists.

    Only the boot storage goes into the create call: with more than one
    storage attached at creation the remote side may pick any of them to
    boot from. Every other storage is linked afterwards, in desired order,
    followed by START when power_on is set.

    The returned plan has an empty server_id; bind it once the id is known.

    Raises:
        ValidationError: on a local invariant violation, an IP family
            mismatch, a networks entry that is the public network, or when
            the public network cannot be resolved for a requested IP.
    """
    validate_server_spec(new)
    validate_ip_families(new, client, ctx)

    public_ref: Optional[PeripheralRef] = None
    if new.has_public_ip or new.networks:
        try:
            public_ref = client.resolve_public_network(ctx)
        except NotFoundError as exc:
            # Only fatal when an IP needs it.
            if new.has_public_ip:
                raise ValidationError("Public network could not be resolved", cause=exc) from exc
        except GSReconcileError as exc:
            raise ValidationError("Public network could not be resolved", cause=exc) from exc

    if public_ref is not None:
        reject_declared_public_network(new, public_ref)

    public_network: Optional[NetworkAttachment] = None
    if new.has_public_ip and public_ref is not None:
        public_network = NetworkAttachment(public_ref)

    payload = CreatePayload(
        name=new.name,
        cores=new.cores,
        memory_gb=new.memory_gb,
        hardware_profile=new.hardware_profile,
        location_id=new.location_id,
        availability_zone=new.availability_zone,
        labels=new.labels,
        boot_storage=new.boot_storage,
        iso_image=new.iso_image,
        ips=tuple(ip for ip in (new.ipv4, new.ipv6) if ip is not None),
        public_network=public_network,
        networks=tuple(sorted(new.networks, key=identity_of)),
    )

    writer = PlanWriter()
    for storage in new.storages:
        if not storage.is_boot_device:
            writer.add(OperationKind.LINK_STORAGE, storage=storage)
    if new.power_on:
        writer.add(OperationKind.START)

    return payload, writer.build(server_id="")
