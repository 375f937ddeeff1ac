from techdocs_search.collator import DefaultTechDocsCollator
from techdocs_search.config import CollatorConfig
from techdocs_search.location import format_location, normalize_entity_key
from techdocs_search.search_index import fetch_entity_documents
from techdocs_search.types import EntityKey, TechDocsDocument

__all__ = [
    "CollatorConfig",
    "DefaultTechDocsCollator",
    "EntityKey",
    "TechDocsDocument",
    "fetch_entity_documents",
    "format_location",
    "normalize_entity_key",
]
