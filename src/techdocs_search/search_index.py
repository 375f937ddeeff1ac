from __future__ import annotations

from html import unescape
import logging

import httpx

from techdocs_search.location import format_location
from techdocs_search.types import Entity, EntityKey, SearchIndex, TechDocsDocument

logger = logging.getLogger(__name__)


def build_search_index_url(techdocs_base_url: str, entity_key: EntityKey) -> str:
    return (
        f"{techdocs_base_url}/static/docs/{entity_key.namespace}/{entity_key.kind}/"
        f"{entity_key.name}/search/search_index.json"
    )


def fetch_entity_documents(
    http_client: httpx.Client,
    *,
    techdocs_base_url: str,
    entity: Entity,
    entity_key: EntityKey,
    location_template: str,
    log: logging.Logger | None = None,
) -> list[TechDocsDocument]:
    """Fetch one entity's search index and map it into search documents.

    Never raises: any failure is logged at debug level and the entity
    contributes no documents.
    """
    log = log or logger
    try:
        response = http_client.get(build_search_index_url(techdocs_base_url, entity_key))
        response.raise_for_status()
        search_index = SearchIndex.model_validate_json(response.content)
    except Exception as exc:
        log.debug(
            "Failed to retrieve tech docs search index for entity %s",
            entity_key,
            exc_info=exc,
        )
        return []

    entity_title = entity.metadata.title
    component_type = entity.spec_value("type") or "other"
    lifecycle = entity.spec_value("lifecycle")
    owner = entity.owner_name()

    documents: list[TechDocsDocument] = []
    for entry in search_index.docs:
        location = format_location(
            location_template,
            {
                "kind": entity_key.kind,
                "namespace": entity_key.namespace,
                "name": entity_key.name,
                "path": entry.location,
            },
        )
        documents.append(
            TechDocsDocument(
                title=unescape(entry.title),
                text=unescape(entry.text or ""),
                location=location,
                path=entry.location,
                kind=entity.kind,
                namespace=entity.namespace,
                name=entity.metadata.name,
                entity_title=entity_title,
                component_type=component_type,
                lifecycle=lifecycle,
                owner=owner,
            )
        )
    return documents
