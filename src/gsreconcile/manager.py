"""ServerReconciler: validates, plans and applies server changes."""

from __future__ import annotations

import dataclasses
from typing import Optional

from loguru import logger

from gsreconcile.config import ApiConfig
from gsreconcile.context import RequestContext
from gsreconcile.controller import GridscaleController, RemoteResourceClient
from gsreconcile.errors import (
    AbsenceError,
    CancelledError,
    DeadlineExceededError,
    GSReconcileError,
    NotFoundError,
    RemoteCallError,
    ValidationError,
)
from gsreconcile.executor import PlanExecutor
from gsreconcile.models import (
    OperationResult,
    PeripheralRef,
    ReconcileResult,
    ServerSpec,
    ServerState,
)
from gsreconcile.plan import (
    OperationKind,
    PlanWriter,
    PublicNetworkResolver,
    ServerPlan,
    build_creation,
    build_update_plan,
    ref_changed,
    reject_declared_public_network,
    validate_in_place_change,
    validate_ip_families,
    validate_server_spec,
)


class ServerReconciler:
    """High-level entry points: create, reconcile, delete."""

    def __init__(self, config: ApiConfig) -> None:
        self._client: RemoteResourceClient = GridscaleController(config)
        self._executor = PlanExecutor(self._client)

    @classmethod
    def from_client(cls, client: RemoteResourceClient) -> "ServerReconciler":
        """Create reconciler with an injected client (useful for tests)."""
        obj = cls.__new__(cls)
        obj._client = client
        obj._executor = PlanExecutor(client)
        return obj

    def refresh(
        self,
        server_id: str,
        *,
        ctx: Optional[RequestContext] = None,
    ) -> Optional[ServerState]:
        """Fetch a fresh snapshot; None if the server no longer exists."""
        return self._client.fetch_state(ctx or RequestContext.background(), server_id)

    def plan_update(
        self,
        desired: ServerSpec,
        observed: ServerState,
        *,
        ctx: Optional[RequestContext] = None,
    ) -> ServerPlan:
        """
        Validate desired and build the update plan without applying it.

        Only reads are issued (IP families of newly linked IPs, public network).

        Raises:
            ValidationError: if desired is invalid or can only be reached by
                replacing the server (hardware_profile, location_id).
        """
        ctx = ctx or RequestContext.background()
        validate_server_spec(desired)
        validate_in_place_change(observed, desired)

        new_ips = {
            ip.ref.object_id
            for old_ip, ip in ((observed.ipv4, desired.ipv4), (observed.ipv6, desired.ipv6))
            if ip is not None and ref_changed(old_ip, ip)
        }
        if new_ips:
            validate_ip_families(desired, self._client, ctx, only=new_ips)

        public_network = self._public_network_resolver(ctx)
        if desired.networks:
            try:
                reject_declared_public_network(desired, public_network())
            except ValidationError as exc:
                # No public network at all cannot clash with networks.
                if not isinstance(exc.cause, NotFoundError):
                    raise

        return build_update_plan(observed, desired, public_network=public_network)

    def reconcile(
        self,
        desired: ServerSpec,
        observed: ServerState,
        *,
        ctx: Optional[RequestContext] = None,
    ) -> ReconcileResult:
        """
        Converge the server described by observed towards desired.

        Policy:
            - Validation errors raise before any remote mutation.
            - The first failing operation raises RemoteCallError; nothing is
              rolled back, a later reconcile resumes from the new state.
            - If an operation fails with NotFound and the server itself is
              gone, the result is status="absent" instead of an error.
        """
        ctx = ctx or RequestContext.background()
        plan = self.plan_update(desired, observed, ctx=ctx)

        try:
            results = self._executor.execute(plan, ctx)
        except RemoteCallError as exc:
            if isinstance(exc.cause, NotFoundError) and self._is_gone(ctx, plan.server_id):
                logger.warning(
                    "Server {server_id} vanished during reconciliation",
                    server_id=plan.server_id,
                )
                return ReconcileResult(
                    status="absent",
                    server_id=plan.server_id,
                    plan_id=plan.plan_id,
                    results=exc.results,
                    summary=_summarize_results(exc.results),
                )
            raise

        return ReconcileResult(
            status="converged",
            server_id=plan.server_id,
            plan_id=plan.plan_id,
            results=results,
            summary=_summarize_results(results),
        )

    def reconcile_by_id(
        self,
        server_id: str,
        desired: ServerSpec,
        *,
        ctx: Optional[RequestContext] = None,
        missing_ok: bool = True,
    ) -> ReconcileResult:
        """
        Fetch the current state of server_id, then reconcile.

        Raises:
            AbsenceError: if the server does not exist and missing_ok is False.
        """
        ctx = ctx or RequestContext.background()
        observed = self._client.fetch_state(ctx, server_id)
        if observed is None:
            if not missing_ok:
                raise AbsenceError(
                    f"Server {server_id} does not exist",
                    details={"server_id": server_id},
                )
            logger.info("Server {server_id} is absent; nothing to converge", server_id=server_id)
            return ReconcileResult(status="absent", server_id=server_id)
        return self.reconcile(desired, observed, ctx=ctx)

    def create(
        self,
        desired: ServerSpec,
        *,
        ctx: Optional[RequestContext] = None,
    ) -> str:
        """
        Create the server, then link the deferred storages and power it on.

        Returns:
            The new server id.

        Raises:
            ValidationError: before any remote mutation.
            RemoteCallError: if the create call or a post-create operation
                fails (details carry server_id once the server exists).
        """
        ctx = ctx or RequestContext.background()
        payload, post_create = build_creation(desired, self._client, ctx)

        try:
            server_id = self._client.create(ctx, payload)
        except (CancelledError, DeadlineExceededError, ValidationError):
            raise
        except Exception as exc:
            raise RemoteCallError(
                f"Creating server {desired.name} failed: {exc}",
                details={"op_kind": "CREATE", "target_id": None, "server_id": None},
                cause=exc,
            ) from exc

        logger.debug("The id for {name} has been set to: {server_id}", name=desired.name, server_id=server_id)

        plan = dataclasses.replace(post_create, server_id=server_id)
        if not plan.is_empty():
            self._executor.execute(plan, ctx)
        return server_id

    def delete(
        self,
        server_id: str,
        *,
        ctx: Optional[RequestContext] = None,
    ) -> bool:
        """
        Shut the server down, then delete it. A failed shutdown aborts the delete.

        Returns:
            True if deleted, False if the server was already gone.
        """
        ctx = ctx or RequestContext.background()
        writer = PlanWriter()
        writer.add(OperationKind.SHUTDOWN)
        writer.add(OperationKind.DELETE)

        try:
            self._executor.execute(writer.build(server_id), ctx)
        except RemoteCallError as exc:
            if isinstance(exc.cause, NotFoundError):
                logger.info("Server {server_id} already absent", server_id=server_id)
                return False
            raise
        return True

    # ----------------------------
    # Internals
    # ----------------------------
    def _public_network_resolver(self, ctx: RequestContext) -> PublicNetworkResolver:
        """Resolve the public network once per plan; failures become ValidationError."""
        resolved: list[PeripheralRef] = []

        def resolve() -> PeripheralRef:
            if not resolved:
                try:
                    resolved.append(self._client.resolve_public_network(ctx))
                except GSReconcileError as exc:
                    raise ValidationError("Public network could not be resolved", cause=exc) from exc
            return resolved[0]

        return resolve

    def _is_gone(self, ctx: RequestContext, server_id: str) -> bool:
        return self._client.fetch_state(ctx, server_id) is None


def _summarize_results(results: list[OperationResult]) -> dict[str, int]:
    summary: dict[str, int] = {"success": 0, "failed": 0}
    for r in results:
        summary[r.status] = summary.get(r.status, 0) + 1
    return summary
