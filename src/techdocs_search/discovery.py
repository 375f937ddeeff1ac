from __future__ import annotations

from typing import Protocol


class DiscoveryError(RuntimeError):
    pass


class PluginEndpointDiscovery(Protocol):
    def get_base_url(self, plugin_id: str) -> str: ...


class SingleHostDiscovery:
    """Resolves every plugin to ``{base_url}{base_path}/{plugin_id}`` on one backend host."""

    def __init__(self, *, base_url: str, base_path: str = "/api") -> None:
        if not base_url.strip():
            raise DiscoveryError("Backend base URL is not configured")
        self._base_url = base_url.rstrip("/")
        self._base_path = "/" + base_path.strip("/") if base_path.strip("/") else ""

    def get_base_url(self, plugin_id: str) -> str:
        plugin_id = plugin_id.strip().strip("/")
        if not plugin_id:
            raise DiscoveryError("Plugin id must not be empty")
        return f"{self._base_url}{self._base_path}/{plugin_id}"
