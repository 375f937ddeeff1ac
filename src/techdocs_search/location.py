from __future__ import annotations

from collections.abc import Mapping

from techdocs_search.types import EntityKey


def format_location(template: str, substitutions: Mapping[str, str]) -> str:
    """Replace the first ``:key`` token in ``template`` for every key.

    Longer keys are applied first so that ``:name`` never matches inside
    ``:namespace``. Keys without a token and tokens without a key are left
    alone.
    """
    ordered = sorted(substitutions.items(), key=lambda item: len(item[0]), reverse=True)
    formatted = template
    for key, value in ordered:
        formatted = formatted.replace(f":{key}", value, 1)
    return formatted


def normalize_entity_key(legacy: bool, key: EntityKey) -> EntityKey:
    if legacy:
        return key
    # str.lower() is locale independent
    return EntityKey(
        kind=key.kind.lower(),
        namespace=key.namespace.lower(),
        name=key.name.lower(),
    )
