"""PlanExecutor: applies a ServerPlan against a RemoteResourceClient."""

from __future__ import annotations

from typing import Optional

from loguru import logger

from gsreconcile.context import RequestContext
from gsreconcile.controller import RemoteResourceClient
from gsreconcile.errors import (
    CancelledError,
    DeadlineExceededError,
    InvalidArgumentError,
    RemoteCallError,
)
from gsreconcile.models import OperationResult
from gsreconcile.plan import Operation, OperationKind, ServerPlan, validate_plan_order


class PlanExecutor:
    """
    Execute plans strictly in order, one client call per operation.

    Policy:
        - Stop at the first failing operation and raise RemoteCallError,
          whatever the client raised (cause keeps the original error).
        - No rollback: applied operations stay applied.
        - The request context is checked before each operation; cancellation
          stops further operations without undoing earlier ones.
    """

    def __init__(self, client: RemoteResourceClient) -> None:
        self._client = client

    def execute(
        self,
        plan: ServerPlan,
        ctx: Optional[RequestContext] = None,
    ) -> list[OperationResult]:
        """
        Apply every operation of plan.

        Raises:
            InvalidArgumentError: if the plan is malformed (nothing is applied).
            RemoteCallError: on the first failing operation.
            CancelledError / DeadlineExceededError: when ctx ends between operations.
        """
        ctx = ctx or RequestContext.background()
        if not plan.server_id:
            raise InvalidArgumentError("Plan has no server_id", details={"plan_id": plan.plan_id})
        try:
            validate_plan_order(plan.operations)
        except ValueError as exc:
            raise InvalidArgumentError(
                "Invalid plan ordering",
                details={"plan_id": plan.plan_id},
                cause=exc,
            ) from exc

        log = logger.bind(server_id=plan.server_id, plan_id=plan.plan_id)
        log.info("Applying {count} operations", count=len(plan.operations))

        results: list[OperationResult] = []
        for op in plan.operations:
            ctx.raise_if_done()
            log.debug("Applying {op}", op=op.describe())
            try:
                self._apply_one(ctx, plan.server_id, op)
            except (CancelledError, DeadlineExceededError):
                raise
            except Exception as exc:
                results.append(_failed_result(op, exc))
                log.warning("{op} failed: {error}", op=op.describe(), error=exc)
                raise RemoteCallError(
                    f"{op.kind.value} failed for server {plan.server_id}: {exc}",
                    details={
                        "op_kind": op.kind.value,
                        "target_id": op.target,
                        "seq": op.seq,
                        "server_id": plan.server_id,
                    },
                    cause=exc,
                    results=results,
                ) from exc
            results.append(_success_result(op))

        log.info("Plan applied")
        return results

    def _apply_one(self, ctx: RequestContext, server_id: str, op: Operation) -> None:
        """Apply one operation. Raises gsreconcile errors on failure."""
        client = self._client

        if op.kind is OperationKind.SHUTDOWN:
            client.shutdown(ctx, server_id)
            return

        if op.kind is OperationKind.START:
            client.start(ctx, server_id)
            return

        if op.kind is OperationKind.UPDATE_ATTRIBUTES:
            client.update_attributes(ctx, server_id, op.attributes)  # type: ignore[arg-type]
            return

        if op.kind is OperationKind.LINK_STORAGE:
            client.link_storage(ctx, server_id, op.storage)  # type: ignore[arg-type]
            return

        if op.kind is OperationKind.UNLINK_STORAGE:
            client.unlink_storage(ctx, server_id, op.target_id)  # type: ignore[arg-type]
            return

        if op.kind is OperationKind.LINK_NETWORK:
            client.link_network(ctx, server_id, op.network)  # type: ignore[arg-type]
            return

        if op.kind is OperationKind.UNLINK_NETWORK:
            client.unlink_network(ctx, server_id, op.target_id)  # type: ignore[arg-type]
            return

        if op.kind is OperationKind.LINK_IP:
            client.link_ip(ctx, server_id, op.ip)  # type: ignore[arg-type]
            return

        if op.kind is OperationKind.UNLINK_IP:
            client.unlink_ip(ctx, server_id, op.target_id)  # type: ignore[arg-type]
            return

        if op.kind is OperationKind.LINK_ISO:
            client.link_iso(ctx, server_id, op.target_id)  # type: ignore[arg-type]
            return

        if op.kind is OperationKind.UNLINK_ISO:
            client.unlink_iso(ctx, server_id, op.target_id)  # type: ignore[arg-type]
            return

        if op.kind is OperationKind.DELETE:
            client.delete(ctx, server_id)
            return

        raise InvalidArgumentError("Unsupported operation", details={"kind": op.kind})


def _success_result(op: Operation) -> OperationResult:
    return OperationResult(
        seq=op.seq,
        kind=op.kind.value,
        status="success",
        target_id=op.target,
    )


def _failed_result(op: Operation, exc: Exception) -> OperationResult:
    return OperationResult(
        seq=op.seq,
        kind=op.kind.value,
        status="failed",
        target_id=op.target,
        error_type=exc.__class__.__name__,
        error_message=str(exc),
        error_details=getattr(exc, "details", None),
    )
