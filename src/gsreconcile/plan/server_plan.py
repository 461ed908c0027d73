"""ServerPlan model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from gsreconcile.util.ids import new_plan_id
from gsreconcile.util.time import now_utc

from .actions import OperationKind
from .operation import Operation


@dataclass(frozen=True, slots=True)
class ServerPlan:
    """An ordered sequence of operations for one reconciliation pass."""

    plan_id: str
    server_id: str
    created_at: datetime
    operations: tuple[Operation, ...]

    @property
    def kinds(self) -> list[OperationKind]:
        return [op.kind for op in self.operations]

    def is_empty(self) -> bool:
        return not self.operations


class PlanWriter:
    """Accumulates operations with consecutive seq numbers."""

    def __init__(self) -> None:
        self._ops: list[Operation] = []

    def add(self, kind: OperationKind, **payload: object) -> Operation:
        op = Operation(seq=len(self._ops), kind=kind, **payload)  # type: ignore[arg-type]
        op.validate_required_fields()
        self._ops.append(op)
        return op

    def build(self, server_id: str) -> ServerPlan:
        return ServerPlan(
            plan_id=new_plan_id(),
            server_id=server_id,
            created_at=now_utc(),
            operations=tuple(self._ops),
        )
