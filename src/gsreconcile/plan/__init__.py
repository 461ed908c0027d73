"""Public plan exports for gsreconcile."""

from __future__ import annotations

from .actions import PERIPHERAL_KINDS, POWER_KINDS, OperationKind
from .builder import PublicNetworkResolver, build_update_plan, public_network_transition
from .creation import build_creation
from .differ import AttachmentDiff, diff_attachments, identity_of, ref_changed
from .operation import AttributeUpdate, Operation
from .ordering import validate_plan_order
from .power import peripherals_changed, requires_power_cycle
from .preconditions import (
    reject_declared_public_network,
    validate_in_place_change,
    validate_ip_families,
    validate_server_spec,
)
from .server_plan import PlanWriter, ServerPlan

__all__ = [
    "OperationKind",
    "POWER_KINDS",
    "PERIPHERAL_KINDS",
    "AttributeUpdate",
    "Operation",
    "ServerPlan",
    "PlanWriter",
    "AttachmentDiff",
    "diff_attachments",
    "identity_of",
    "ref_changed",
    "requires_power_cycle",
    "peripherals_changed",
    "PublicNetworkResolver",
    "build_update_plan",
    "public_network_transition",
    "build_creation",
    "validate_plan_order",
    "validate_server_spec",
    "validate_ip_families",
    "validate_in_place_change",
    "reject_declared_public_network",
]
