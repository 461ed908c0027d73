"""Remote client exports for gsreconcile."""

from __future__ import annotations

from .protocol import RemoteResourceClient
from .server_controller import GridscaleController

__all__ = ["GridscaleController", "RemoteResourceClient"]
