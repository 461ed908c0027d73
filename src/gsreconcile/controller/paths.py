"""API paths for the gridscale objects endpoints."""

from __future__ import annotations

SERVERS: str = "/objects/servers"
NETWORKS: str = "/objects/networks"
IPS: str = "/objects/ips"
REQUESTS: str = "/requests"


def server(server_id: str) -> str:
    return f"{SERVERS}/{server_id}"


def server_power(server_id: str) -> str:
    return f"{SERVERS}/{server_id}/power"


def server_shutdown(server_id: str) -> str:
    return f"{SERVERS}/{server_id}/shutdown"


def server_relation(server_id: str, relation: str, object_id: str | None = None) -> str:
    """relation is one of storages, networks, ips, isoimages."""
    base = f"{SERVERS}/{server_id}/{relation}"
    if object_id is None:
        return base
    return f"{base}/{object_id}"


def ip(ip_id: str) -> str:
    return f"{IPS}/{ip_id}"


def request(request_id: str) -> str:
    return f"{REQUESTS}/{request_id}"
