"""Interface of the remote resource client consumed by the reconciler."""

from __future__ import annotations

from typing import Optional, Protocol

from gsreconcile.context import RequestContext
from gsreconcile.models import (
    CreatePayload,
    IPAttachment,
    NetworkAttachment,
    PeripheralRef,
    ServerState,
    StorageAttachment,
)
from gsreconcile.plan import AttributeUpdate


class RemoteResourceClient(Protocol):
    """
    Remote calls the reconciler issues. Each call is idempotent on retry;
    retry/backoff belongs to the implementation.

    Notes:
        - fetch_state returns None when the server does not exist.
        - shutdown/start are no-ops when the server is already in that state.
        - Failures raise gsreconcile errors (NotFoundError, ApiError, ...).
    """

    def fetch_state(self, ctx: RequestContext, server_id: str) -> Optional[ServerState]: ...

    def create(self, ctx: RequestContext, payload: CreatePayload) -> str: ...

    def update_attributes(
        self, ctx: RequestContext, server_id: str, fields: AttributeUpdate
    ) -> None: ...

    def shutdown(self, ctx: RequestContext, server_id: str) -> None: ...

    def start(self, ctx: RequestContext, server_id: str) -> None: ...

    def delete(self, ctx: RequestContext, server_id: str) -> None: ...

    def link_storage(
        self, ctx: RequestContext, server_id: str, storage: StorageAttachment
    ) -> None: ...

    def unlink_storage(self, ctx: RequestContext, server_id: str, storage_id: str) -> None: ...

    def link_network(
        self, ctx: RequestContext, server_id: str, network: NetworkAttachment
    ) -> None: ...

    def unlink_network(self, ctx: RequestContext, server_id: str, network_id: str) -> None: ...

    def link_ip(self, ctx: RequestContext, server_id: str, ip: IPAttachment) -> None: ...

    def unlink_ip(self, ctx: RequestContext, server_id: str, ip_id: str) -> None: ...

    def link_iso(self, ctx: RequestContext, server_id: str, iso_id: str) -> None: ...

    def unlink_iso(self, ctx: RequestContext, server_id: str, iso_id: str) -> None: ...

    def resolve_public_network(self, ctx: RequestContext) -> PeripheralRef: ...

    def resolve_ip_family(self, ctx: RequestContext, ip_id: str) -> int: ...
