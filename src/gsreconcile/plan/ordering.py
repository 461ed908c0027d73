"""Ordering rules every ServerPlan must satisfy before it is applied."""

from __future__ import annotations

from typing import Sequence

from .actions import PERIPHERAL_KINDS, OperationKind
from .operation import Operation


def validate_plan_order(operations: Sequence[Operation]) -> None:
    """
    Check plan ordering. Raises ValueError.

    Rules:
        - seq is 0..n-1 in list order.
        - UPDATE_ATTRIBUTES, when present, precedes every attach/detach.
        - DELETE, when present, is the last operation.
    """
    seen_peripheral = False

    for index, op in enumerate(operations):
        if op.seq != index:
            raise ValueError(f"Operation seq {op.seq} out of order at position {index}")

        if op.kind is OperationKind.UPDATE_ATTRIBUTES and seen_peripheral:
            raise ValueError("UPDATE_ATTRIBUTES must precede attach/detach operations")
        if op.kind in PERIPHERAL_KINDS:
            seen_peripheral = True

        if op.kind is OperationKind.DELETE and index != len(operations) - 1:
            raise ValueError("DELETE must be the last operation")
