"""Result models for plan execution and reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional


OperationStatus = Literal["success", "failed"]
ReconcileStatus = Literal["converged", "absent"]


@dataclass(slots=True)
class OperationResult:
    """Result for a single executed Operation."""

    seq: int
    kind: str
    status: OperationStatus
    target_id: Optional[str] = None

    error_type: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[dict[str, Any]] = None


@dataclass(slots=True)
class ReconcileResult:
    """Aggregate result for ServerReconciler.reconcile / reconcile_by_id."""

    status: ReconcileStatus
    server_id: str
    plan_id: Optional[str] = None
    results: list[OperationResult] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)

    @property
    def converged(self) -> bool:
        return self.status == "converged"
