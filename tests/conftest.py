from collections.abc import Callable, Iterator
import json
from typing import Any

import httpx
import pytest

from techdocs_search.config import get_settings
from techdocs_search.discovery import SingleHostDiscovery
from techdocs_search.tokens import StaticTokenManager

BACKEND_URL = "http://backend.test"
CATALOG_ENTITIES_URL = f"{BACKEND_URL}/api/catalog/entities"
TECHDOCS_BASE_URL = f"{BACKEND_URL}/api/techdocs"


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_entity(
    name: str,
    *,
    kind: str = "Component",
    namespace: str | None = "default",
    techdocs: bool = True,
    title: str | None = None,
    spec: dict[str, Any] | None = None,
    owner: str | None = None,
) -> dict[str, Any]:
    metadata: dict[str, Any] = {"name": name, "annotations": {}}
    if namespace is not None:
        metadata["namespace"] = namespace
    if title is not None:
        metadata["title"] = title
    if techdocs:
        metadata["annotations"]["backstage.io/techdocs-ref"] = "dir:."

    entity: dict[str, Any] = {"kind": kind, "metadata": metadata}
    if spec is not None:
        entity["spec"] = spec
    if owner is not None:
        entity["relations"] = [
            {"type": "dependsOn", "target": {"kind": "component", "namespace": "default", "name": "db"}},
            {"type": "ownedBy", "target": {"kind": "group", "namespace": "default", "name": owner}},
        ]
    return entity


def search_index_payload(*docs: dict[str, Any]) -> dict[str, Any]:
    return {"config": {"lang": ["en"]}, "docs": list(docs)}


@pytest.fixture
def discovery() -> SingleHostDiscovery:
    return SingleHostDiscovery(base_url=BACKEND_URL)


@pytest.fixture
def token_manager() -> StaticTokenManager:
    return StaticTokenManager("service-token")


@pytest.fixture
def make_http_client() -> Iterator[Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]]:
    clients: list[httpx.Client] = []

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


def json_response(payload: Any, *, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode("utf-8"),
        headers={"content-type": "application/json"},
    )
