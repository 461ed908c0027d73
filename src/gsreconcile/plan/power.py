"""Power requirement classifier."""

from __future__ import annotations

from gsreconcile.models import ServerSpec, ServerState

from .differ import diff_attachments, ref_changed


def requires_power_cycle(old: ServerState, new: ServerSpec) -> bool:
    """
    Decide whether the server must be shut down before applying new.

    Any of these forces a cycle:
        1. cores decrease
        2. memory decreases
        3. the observed server runs the legacy profile and cores or memory
           change at all (no hot-plug in legacy emulation)
        4. ipv4, ipv6, the storage set or the network set change
    """
    if new.cores < old.cores:
        return True
    if new.memory_gb < old.memory_gb:
        return True
    if old.is_legacy and (new.cores != old.cores or new.memory_gb != old.memory_gb):
        return True
    return peripherals_changed(old, new)


def peripherals_changed(old: ServerState, new: ServerSpec) -> bool:
    """True if any IP, storage or network attachment differs by identity."""
    if ref_changed(old.ipv4, new.ipv4) or ref_changed(old.ipv6, new.ipv6):
        return True
    if not diff_attachments(old.storages, new.storages).is_empty():
        return True
    return not diff_attachments(old.networks, new.networks).is_empty()
