from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import Protocol

import httpx
from pydantic import ValidationError

from techdocs_search.discovery import PluginEndpointDiscovery
from techdocs_search.tokens import auth_headers
from techdocs_search.types import EntitiesResponse, Entity

logger = logging.getLogger(__name__)


class CatalogClientError(RuntimeError):
    pass


class CatalogApi(Protocol):
    def get_entities(self, *, fields: Sequence[str], token: str) -> EntitiesResponse: ...


class CatalogClient:
    def __init__(
        self,
        *,
        discovery: PluginEndpointDiscovery,
        http_client: httpx.Client,
    ) -> None:
        self._discovery = discovery
        self._http_client = http_client

    def get_entities(self, *, fields: Sequence[str], token: str) -> EntitiesResponse:
        base_url = self._discovery.get_base_url("catalog")
        params = {"fields": ",".join(fields)} if fields else None

        try:
            response = self._http_client.get(
                f"{base_url}/entities",
                params=params,
                headers=auth_headers(token),
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CatalogClientError(f"Failed to list catalog entities: {exc}") from exc

        if not isinstance(payload, list):
            raise CatalogClientError("Invalid catalog payload: expected a list of entities")

        items: list[Entity] = []
        for index, item in enumerate(payload):
            try:
                items.append(Entity.model_validate(item))
            except ValidationError as exc:
                logger.debug("Skipping invalid catalog entity at index %d: %s", index, exc)

        return EntitiesResponse(items=items)
