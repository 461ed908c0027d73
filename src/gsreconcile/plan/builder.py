"""Update-path plan builder: observed state + desired spec -> ordered plan."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from gsreconcile.errors import ValidationError
from gsreconcile.models import (
    IPAttachment,
    NetworkAttachment,
    PeripheralRef,
    ServerSpec,
    ServerState,
)

from .actions import OperationKind
from .differ import diff_attachments, ref_changed
from .operation import AttributeUpdate
from .power import requires_power_cycle
from .preconditions import validate_in_place_change
from .server_plan import PlanWriter, ServerPlan

PublicNetworkResolver = Callable[[], PeripheralRef]


def build_update_plan(
    old: ServerState,
    new: ServerSpec,
    *,
    public_network: Optional[PublicNetworkResolver] = None,
) -> ServerPlan:
    """
    Build the ordered plan converging old towards new.

    Order:
        1. SHUTDOWN if a power cycle is required
        2. UPDATE_ATTRIBUTES (always)
        3. ISO image unlink/link
        4. IP unlink/link, per family
        5. public network link/unlink on a none <-> some IP transition
        6. network unlinks, then links
        7. storage unlinks, then links in desired order
        8. trailing power step

    public_network is called at most once, and only when step 5 needs it.

    Raises:
        ValidationError: if hardware_profile or location_id differ (the
            server would have to be replaced), or if step 5 needs the public
            network and no resolver was given.
    """
    validate_in_place_change(old, new)

    writer = PlanWriter()
    cycle = requires_power_cycle(old, new)

    if cycle:
        writer.add(OperationKind.SHUTDOWN)

    writer.add(
        OperationKind.UPDATE_ATTRIBUTES,
        attributes=AttributeUpdate(
            name=new.name,
            cores=new.cores,
            memory_gb=new.memory_gb,
            availability_zone=new.availability_zone,
            labels=new.labels,
        ),
    )

    if ref_changed(old.iso_image, new.iso_image):
        if old.iso_image is not None:
            writer.add(OperationKind.UNLINK_ISO, target_id=old.iso_image.object_id)
        if new.iso_image is not None:
            writer.add(OperationKind.LINK_ISO, target_id=new.iso_image.object_id)

    _add_ip_changes(writer, old.ipv4, new.ipv4)
    _add_ip_changes(writer, old.ipv6, new.ipv6)

    public_ref: Optional[PeripheralRef] = None
    transition = public_network_transition(old, new)
    if transition is not None:
        if public_network is None:
            raise ValidationError(
                "Public network is required for this change but no resolver was given",
                details={"transition": transition.value},
            )
        public_ref = public_network()
        if transition is OperationKind.LINK_NETWORK:
            writer.add(OperationKind.LINK_NETWORK, network=NetworkAttachment(public_ref))
        else:
            writer.add(OperationKind.UNLINK_NETWORK, target_id=public_ref.object_id)

    networks = diff_attachments(
        _without(old.networks, public_ref),
        _without(new.networks, public_ref),
    )
    for network in networks.to_remove:
        writer.add(OperationKind.UNLINK_NETWORK, target_id=network.ref.object_id)
    for network in networks.to_add:
        writer.add(OperationKind.LINK_NETWORK, network=network)

    storages = diff_attachments(old.storages, new.storages)
    for storage in storages.to_remove:
        writer.add(OperationKind.UNLINK_STORAGE, target_id=storage.ref.object_id)
    for storage in storages.to_add:
        writer.add(OperationKind.LINK_STORAGE, storage=storage)

    # After step 1 the server is off, whatever old.power said.
    running = old.power and not cycle
    if new.power_on and not running:
        writer.add(OperationKind.START)
    elif not new.power_on and running:
        writer.add(OperationKind.SHUTDOWN)

    return writer.build(old.server_id)


def public_network_transition(old: ServerState, new: ServerSpec) -> Optional[OperationKind]:
    """
    Return LINK_NETWORK / UNLINK_NETWORK when the set of public IPs goes from
    none to some / some to none, else None.

    Replacing one family while the other survives is not a transition.
    """
    if not old.has_public_ip and new.has_public_ip:
        return OperationKind.LINK_NETWORK
    if old.has_public_ip and not new.has_public_ip:
        return OperationKind.UNLINK_NETWORK
    return None


def _add_ip_changes(
    writer: PlanWriter,
    old: Optional[IPAttachment],
    new: Optional[IPAttachment],
) -> None:
    if not ref_changed(old, new):
        return
    if old is not None:
        writer.add(OperationKind.UNLINK_IP, target_id=old.ref.object_id)
    if new is not None:
        writer.add(OperationKind.LINK_IP, ip=new)


def _without(
    networks: Iterable[NetworkAttachment],
    public_ref: Optional[PeripheralRef],
) -> frozenset[NetworkAttachment]:
    if public_ref is None:
        return frozenset(networks)
    return frozenset(n for n in networks if n.ref.object_id != public_ref.object_id)
