"""gridscale API controller: the RemoteResourceClient used in production."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

import httpx
from loguru import logger

from gsreconcile.config import ApiConfig
from gsreconcile.context import RequestContext
from gsreconcile.errors import (
    ApiError,
    GSReconcileError,
    HttpErrorInfo,
    NetworkError,
    NotFoundError,
    RateLimitError,
    map_http_error,
)
from gsreconcile.models import (
    CreatePayload,
    HardwareProfile,
    IPAttachment,
    NetworkAttachment,
    PeripheralKind,
    PeripheralRef,
    ServerState,
    StorageAttachment,
    iso_ref,
)
from gsreconcile.plan import AttributeUpdate

from . import paths

T = TypeVar("T")


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class GridscaleController:
    """
    gridscale API controller.

    Notes:
        - The httpx client is NOT exposed.
        - Mutating calls wait for the asynchronous API request to finish.
        - shutdown/start check the power state first, so both are idempotent.
    """

    def __init__(self, config: ApiConfig) -> None:
        self._config = config
        self._retry_policy = _RetryPolicy(max_retries=config.max_retries)
        self._http = httpx.Client(
            base_url=config.api_url,
            headers=_auth_headers(config),
            timeout=config.request_timeout_sec,
        )
        self._log = logger.bind(component="controller")

    @classmethod
    def from_http_client(
        cls,
        http_client: httpx.Client,
        *,
        config: ApiConfig,
        retry_delay_sec: float = 1.0,
    ) -> "GridscaleController":
        """Create controller from a pre-built httpx client (useful for tests)."""
        obj = cls.__new__(cls)
        obj._config = config
        obj._retry_policy = _RetryPolicy(
            max_retries=config.max_retries,
            initial_delay_sec=retry_delay_sec,
        )
        obj._http = http_client
        obj._log = logger.bind(component="controller")
        return obj

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "GridscaleController":
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    # ----------------------------
    # Public API
    # ----------------------------
    def fetch_state(self, ctx: RequestContext, server_id: str) -> Optional[ServerState]:
        try:
            data = self._request(ctx, "GET", paths.server(server_id))
        except NotFoundError:
            self._log.debug("Server {server_id} not found", server_id=server_id)
            return None
        return _server_dict_to_state(data or {})

    def create(self, ctx: RequestContext, payload: CreatePayload) -> str:
        data = self._mutate(ctx, "POST", paths.SERVERS, _create_body(payload))
        server_id = (data or {}).get("server_uuid") or (data or {}).get("object_uuid")
        if not isinstance(server_id, str) or not server_id:
            raise ApiError("API did not return a server_uuid for the created server")
        return server_id

    def update_attributes(
        self, ctx: RequestContext, server_id: str, fields: AttributeUpdate
    ) -> None:
        body: dict[str, Any] = {
            "name": fields.name,
            "cores": fields.cores,
            "memory": fields.memory_gb,
            "labels": sorted(fields.labels),
        }
        if fields.availability_zone:
            body["availability_zone"] = fields.availability_zone
        self._mutate(ctx, "PATCH", paths.server(server_id), body)

    def shutdown(self, ctx: RequestContext, server_id: str) -> None:
        """
        ACPI shutdown; falls back to a hard power off when the guest does not
        stop within shutdown_timeout_sec. No-op if already off.
        """
        if not self._is_powered_on(ctx, server_id):
            return

        self._mutate(ctx, "PATCH", paths.server_shutdown(server_id), {})
        if self._wait_for_power(ctx, server_id, on=False, timeout=self._config.shutdown_timeout_sec):
            return

        self._log.warning(
            "Graceful shutdown of {server_id} timed out, forcing power off",
            server_id=server_id,
        )
        self._set_power(ctx, server_id, on=False)

    def start(self, ctx: RequestContext, server_id: str) -> None:
        if self._is_powered_on(ctx, server_id):
            return
        self._set_power(ctx, server_id, on=True)

    def delete(self, ctx: RequestContext, server_id: str) -> None:
        self._mutate(ctx, "DELETE", paths.server(server_id))

    def link_storage(
        self, ctx: RequestContext, server_id: str, storage: StorageAttachment
    ) -> None:
        body = {"object_uuid": storage.ref.object_id, "bootdevice": storage.is_boot_device}
        self._mutate(ctx, "POST", paths.server_relation(server_id, "storages"), body)

    def unlink_storage(self, ctx: RequestContext, server_id: str, storage_id: str) -> None:
        self._mutate(ctx, "DELETE", paths.server_relation(server_id, "storages", storage_id))

    def link_network(
        self, ctx: RequestContext, server_id: str, network: NetworkAttachment
    ) -> None:
        body: dict[str, Any] = {
            "object_uuid": network.ref.object_id,
            "bootdevice": network.is_boot_device,
        }
        if network.firewall_template_id:
            body["firewall_template_uuid"] = network.firewall_template_id
        self._mutate(ctx, "POST", paths.server_relation(server_id, "networks"), body)

    def unlink_network(self, ctx: RequestContext, server_id: str, network_id: str) -> None:
        self._mutate(ctx, "DELETE", paths.server_relation(server_id, "networks", network_id))

    def link_ip(self, ctx: RequestContext, server_id: str, ip: IPAttachment) -> None:
        body = {"object_uuid": ip.ref.object_id}
        self._mutate(ctx, "POST", paths.server_relation(server_id, "ips"), body)

    def unlink_ip(self, ctx: RequestContext, server_id: str, ip_id: str) -> None:
        self._mutate(ctx, "DELETE", paths.server_relation(server_id, "ips", ip_id))

    def link_iso(self, ctx: RequestContext, server_id: str, iso_id: str) -> None:
        body = {"object_uuid": iso_id}
        self._mutate(ctx, "POST", paths.server_relation(server_id, "isoimages"), body)

    def unlink_iso(self, ctx: RequestContext, server_id: str, iso_id: str) -> None:
        self._mutate(ctx, "DELETE", paths.server_relation(server_id, "isoimages", iso_id))

    def resolve_public_network(self, ctx: RequestContext) -> PeripheralRef:
        data = self._request(ctx, "GET", paths.NETWORKS) or {}
        networks = data.get("networks", {})
        items = networks.values() if isinstance(networks, dict) else networks

        for network in items:
            if isinstance(network, dict) and network.get("public_net"):
                return PeripheralRef(str(network["object_uuid"]), PeripheralKind.NETWORK)

        raise NotFoundError("Public network not found")

    def resolve_ip_family(self, ctx: RequestContext, ip_id: str) -> int:
        data = self._request(ctx, "GET", paths.ip(ip_id)) or {}
        family = data.get("ip", data).get("family")
        if family not in (4, 6):
            raise ApiError("IP address has no valid family", details={"ip_id": ip_id})
        return int(family)

    # ----------------------------
    # Internals
    # ----------------------------
    def _is_powered_on(self, ctx: RequestContext, server_id: str) -> bool:
        data = self._request(ctx, "GET", paths.server(server_id)) or {}
        return bool(data.get("server", data).get("power", False))

    def _set_power(self, ctx: RequestContext, server_id: str, *, on: bool) -> None:
        self._mutate(ctx, "PATCH", paths.server_power(server_id), {"power": on})
        if not self._wait_for_power(ctx, server_id, on=on, timeout=self._config.wait_timeout_sec):
            raise ApiError(
                "Timed out waiting for server power state",
                details={"server_id": server_id, "power": on},
            )

    def _wait_for_power(
        self,
        ctx: RequestContext,
        server_id: str,
        *,
        on: bool,
        timeout: float,
    ) -> bool:
        deadline = time.monotonic() + timeout
        while True:
            if self._is_powered_on(ctx, server_id) == on:
                return True
            if time.monotonic() >= deadline:
                return False
            ctx.raise_if_done()
            time.sleep(self._config.delay_interval_sec)

    def _mutate(
        self,
        ctx: RequestContext,
        method: str,
        path: str,
        body: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send a mutating request and wait for its async API request to finish."""
        response = self._execute(ctx, lambda: self._send(ctx, method, path, body))
        data = _json_or_none(response)

        request_id = response.headers.get("x-request-id")
        if not request_id and isinstance(data, dict):
            request_id = data.get("request_uuid")
        if request_id:
            self._wait_for_request(ctx, str(request_id))
        return data

    def _request(
        self,
        ctx: RequestContext,
        method: str,
        path: str,
        body: Optional[dict[str, Any]] = None,
    ) -> Any:
        response = self._execute(ctx, lambda: self._send(ctx, method, path, body))
        return _json_or_none(response)

    def _wait_for_request(self, ctx: RequestContext, request_id: str) -> None:
        deadline = time.monotonic() + self._config.wait_timeout_sec
        while True:
            data = self._request(ctx, "GET", paths.request(request_id)) or {}
            info = data.get(request_id, data)
            status = info.get("status") if isinstance(info, dict) else None

            if status == "done":
                return
            if status == "failed":
                raise ApiError(
                    str(info.get("message") or "API request failed"),
                    details={"request_id": request_id},
                )
            if time.monotonic() >= deadline:
                raise ApiError(
                    "Timed out waiting for API request",
                    details={"request_id": request_id, "status": status},
                )
            ctx.raise_if_done()
            time.sleep(self._config.delay_interval_sec)

    def _send(
        self,
        ctx: RequestContext,
        method: str,
        path: str,
        body: Optional[dict[str, Any]],
    ) -> httpx.Response:
        self._log.debug("{method} {path}", method=method, path=path)
        timeout = self._config.request_timeout_sec
        remaining = ctx.remaining()
        if remaining is not None:
            timeout = max(0.001, min(timeout, remaining))

        response = self._http.request(method, path, json=body, timeout=timeout)
        response.raise_for_status()
        return response

    def _execute(self, ctx: RequestContext, func: Callable[[], T]) -> T:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            ctx.raise_if_done()
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if self._should_retry(mapped) and attempt < self._retry_policy.max_retries:
                    self._log.warning(
                        "Retrying after {error} (attempt {attempt})",
                        error=mapped.__class__.__name__,
                        attempt=attempt + 1,
                    )
                    time.sleep(delay)
                    delay *= 2
                    continue
                if mapped is exc:
                    raise
                raise mapped from exc

        raise ApiError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, RateLimitError):
            return True
        if isinstance(exc, NetworkError):
            return True
        if isinstance(exc, ApiError):
            status_code = getattr(exc, "details", {}).get("status_code")
            return isinstance(status_code, int) and 500 <= status_code <= 599
        return False

    def _map_exception(self, exc: Exception) -> Exception:
        if isinstance(exc, GSReconcileError):
            return exc

        if isinstance(exc, httpx.HTTPStatusError):
            info = _http_error_to_info(exc.response)
            return map_http_error(info, cause=exc)

        if isinstance(exc, httpx.TransportError):
            return NetworkError("Network error", cause=exc)

        return ApiError("gridscale API error", cause=exc)


def _auth_headers(config: ApiConfig) -> dict[str, str]:
    return {
        "X-Auth-UserId": config.user_uuid,
        "X-Auth-Token": config.api_token,
        "Accept": "application/json",
    }


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _create_body(payload: CreatePayload) -> dict[str, Any]:
    networks = []
    if payload.public_network is not None:
        networks.append({"network_uuid": payload.public_network.ref.object_id})
    for network in payload.networks:
        entry: dict[str, Any] = {
            "network_uuid": network.ref.object_id,
            "bootdevice": network.is_boot_device,
        }
        if network.firewall_template_id:
            entry["firewall_template_uuid"] = network.firewall_template_id
        networks.append(entry)

    storages = []
    if payload.boot_storage is not None:
        storages.append(
            {
                "storage_uuid": payload.boot_storage.ref.object_id,
                "bootdevice": True,
            }
        )

    body: dict[str, Any] = {
        "name": payload.name,
        "cores": payload.cores,
        "memory": payload.memory_gb,
        "location_uuid": payload.location_id,
        "hardware_profile": payload.hardware_profile.value,
        "labels": sorted(payload.labels),
        "relations": {
            "isoimages": (
                [{"isoimage_uuid": payload.iso_image.object_id}] if payload.iso_image else []
            ),
            "storages": storages,
            "networks": networks,
            "public_ips": [{"ipaddr_uuid": ip.ref.object_id} for ip in payload.ips],
        },
    }
    if payload.availability_zone:
        body["availability_zone"] = payload.availability_zone
    return body


def _server_dict_to_state(data: dict[str, Any]) -> ServerState:
    props = data.get("server", data)
    relations = props.get("relations") or {}

    storages = tuple(
        StorageAttachment.of(str(s["object_uuid"]), boot=bool(s.get("bootdevice", False)))
        for s in relations.get("storages") or []
        if s.get("object_uuid")
    )

    networks = frozenset(
        NetworkAttachment.of(
            str(n["object_uuid"]),
            boot=bool(n.get("bootdevice", False)),
            firewall_template_id=n.get("firewall_template_uuid") or None,
        )
        for n in relations.get("networks") or []
        if n.get("object_uuid") and not n.get("public_net")
    )

    ipv4: Optional[IPAttachment] = None
    ipv6: Optional[IPAttachment] = None
    for ip in relations.get("public_ips") or []:
        if ip.get("family") == 4:
            ipv4 = IPAttachment.of(str(ip["object_uuid"]), 4)
        elif ip.get("family") == 6:
            ipv6 = IPAttachment.of(str(ip["object_uuid"]), 6)

    # Only one ISO image can be attached, but the API returns a list.
    iso_image = None
    for iso in relations.get("isoimages") or []:
        iso_image = iso_ref(str(iso["object_uuid"]))

    try:
        profile = HardwareProfile.parse(str(props.get("hardware_profile") or "default"))
    except ValueError:
        profile = HardwareProfile.DEFAULT

    labels = props.get("labels") or []

    return ServerState(
        server_id=str(props.get("object_uuid", "")),
        name=str(props.get("name", "")),
        cores=int(props.get("cores") or 0),
        memory_gb=int(props.get("memory") or 0),
        hardware_profile=profile,
        availability_zone=props.get("availability_zone") or None,
        labels=frozenset(str(label) for label in labels),
        storages=storages,
        networks=networks,
        ipv4=ipv4,
        ipv6=ipv6,
        iso_image=iso_image,
        power=bool(props.get("power", False)),
        legacy=bool(props.get("legacy", False)),
        location_id=props.get("location_uuid") or None,
        current_price=props.get("current_price"),
        console_token=props.get("console_token"),
        usage_minutes_cores=props.get("usage_in_minutes_cores"),
        usage_minutes_memory=props.get("usage_in_minutes_memory"),
        auto_recovery=props.get("auto_recovery"),
    )


def _http_error_to_info(response: httpx.Response) -> HttpErrorInfo:
    message = None
    details: dict[str, Any] = {}

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        message = payload.get("message") or None
        if payload.get("request_uuid"):
            details["request_id"] = payload["request_uuid"]

    return HttpErrorInfo(
        status_code=response.status_code,
        reason=response.reason_phrase or None,
        message=message,
        details=details or None,
    )
