from __future__ import annotations

from collections.abc import Iterator, Mapping
from concurrent.futures import Future, ThreadPoolExecutor, wait
import logging
from typing import Any

import httpx

from techdocs_search.catalog import CatalogApi, CatalogClient
from techdocs_search.config import CollatorConfig
from techdocs_search.discovery import PluginEndpointDiscovery
from techdocs_search.location import normalize_entity_key
from techdocs_search.search_index import fetch_entity_documents
from techdocs_search.tokens import TokenManager
from techdocs_search.types import Entity, EntityKey, TechDocsDocument

logger = logging.getLogger(__name__)

ENTITY_FIELDS = (
    "kind",
    "namespace",
    "metadata.annotations",
    "metadata.name",
    "metadata.title",
    "metadata.namespace",
    "spec.type",
    "spec.lifecycle",
    "relations",
)


class DefaultTechDocsCollator:
    """Collects search documents from the TechDocs search index of every catalog entity.

    Each call to :meth:`get_collator` re-queries the catalog and returns a
    fresh single-pass iterator. Nothing happens until the iterator is first
    pulled.
    """

    type = "techdocs"

    def __init__(
        self,
        *,
        discovery: PluginEndpointDiscovery,
        token_manager: TokenManager,
        http_client: httpx.Client,
        config: CollatorConfig | None = None,
        catalog_client: CatalogApi | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._discovery = discovery
        self._token_manager = token_manager
        self._http_client = http_client
        self._config = config or CollatorConfig()
        self._catalog_client = catalog_client or CatalogClient(
            discovery=discovery,
            http_client=http_client,
        )
        self._log = log or logger

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        *,
        discovery: PluginEndpointDiscovery,
        token_manager: TokenManager,
        http_client: httpx.Client,
        location_template: str | None = None,
        parallelism_limit: int | None = None,
        catalog_client: CatalogApi | None = None,
        log: logging.Logger | None = None,
    ) -> DefaultTechDocsCollator:
        return cls(
            discovery=discovery,
            token_manager=token_manager,
            http_client=http_client,
            config=CollatorConfig.from_config(
                config,
                location_template=location_template,
                parallelism_limit=parallelism_limit,
            ),
            catalog_client=catalog_client,
            log=log,
        )

    @property
    def config(self) -> CollatorConfig:
        return self._config

    def get_collator(self) -> Iterator[TechDocsDocument]:
        return self._execute()

    def _execute(self) -> Iterator[TechDocsDocument]:
        techdocs_base_url = self._discovery.get_base_url("techdocs")
        token = self._token_manager.get_token().token
        entities = self._catalog_client.get_entities(fields=ENTITY_FIELDS, token=token)

        eligible = [entity for entity in entities.items if entity.has_techdocs()]
        self._log.info(
            "Collating techdocs for %d of %d catalog entities (parallelism=%d)",
            len(eligible),
            len(entities.items),
            self._config.parallelism_limit,
        )

        with ThreadPoolExecutor(
            max_workers=self._config.parallelism_limit,
            thread_name_prefix="techdocs-collator",
        ) as executor:
            futures: list[Future[list[TechDocsDocument]]] = [
                executor.submit(
                    fetch_entity_documents,
                    self._http_client,
                    techdocs_base_url=techdocs_base_url,
                    entity=entity,
                    entity_key=self._entity_key(entity),
                    location_template=self._config.location_template,
                    log=self._log,
                )
                for entity in eligible
            ]
            wait(futures)

        document_count = 0
        for future in futures:
            documents = future.result()
            document_count += len(documents)
            yield from documents

        self._log.info("Collated %d techdocs documents", document_count)

    def _entity_key(self, entity: Entity) -> EntityKey:
        return normalize_entity_key(
            self._config.legacy_path_casing,
            EntityKey(kind=entity.kind, namespace=entity.namespace, name=entity.metadata.name),
        )
