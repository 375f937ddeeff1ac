from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
import json
import os
from pathlib import Path
from typing import Any

import yaml

DEFAULT_LOCATION_TEMPLATE = "/docs/:namespace/:kind/:name/:path"
DEFAULT_PARALLELISM_LIMIT = 10
LEGACY_PATH_CASING_KEY = "techdocs.legacyUseCaseSensitiveTripletPaths"


class ConfigError(RuntimeError):
    pass


def _to_bool(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(value: str | None, *, default: int, minimum: int) -> int:
    if value is None:
        return default
    parsed = int(value)
    return max(minimum, parsed)


@dataclass(frozen=True)
class Settings:
    backend_base_url: str
    location_template: str
    parallelism_limit: int
    legacy_path_casing: bool
    service_token: str
    http_timeout_seconds: float


@lru_cache
def get_settings() -> Settings:
    return Settings(
        backend_base_url=os.getenv("TECHDOCS_BACKEND_BASE_URL", "http://localhost:7007"),
        location_template=os.getenv("TECHDOCS_LOCATION_TEMPLATE", DEFAULT_LOCATION_TEMPLATE),
        parallelism_limit=_to_int(
            os.getenv("TECHDOCS_PARALLELISM_LIMIT"),
            default=DEFAULT_PARALLELISM_LIMIT,
            minimum=1,
        ),
        legacy_path_casing=_to_bool(
            os.getenv("TECHDOCS_LEGACY_USE_CASE_SENSITIVE_TRIPLET_PATHS"),
            default=False,
        ),
        service_token=os.getenv("TECHDOCS_SERVICE_TOKEN", ""),
        http_timeout_seconds=float(os.getenv("TECHDOCS_HTTP_TIMEOUT_SECONDS", "30")),
    )


@dataclass(frozen=True)
class CollatorConfig:
    location_template: str = DEFAULT_LOCATION_TEMPLATE
    parallelism_limit: int = DEFAULT_PARALLELISM_LIMIT
    legacy_path_casing: bool = False

    def __post_init__(self) -> None:
        if self.parallelism_limit < 1:
            raise ValueError("parallelism_limit must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings) -> CollatorConfig:
        return cls(
            location_template=settings.location_template,
            parallelism_limit=settings.parallelism_limit,
            legacy_path_casing=settings.legacy_path_casing,
        )

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        *,
        location_template: str | None = None,
        parallelism_limit: int | None = None,
    ) -> CollatorConfig:
        """Build a collator config from a nested application config mapping.

        Only ``techdocs.legacyUseCaseSensitiveTripletPaths`` is read from the
        mapping; template and parallelism fall back to their defaults.
        """
        legacy = read_optional_bool(config, LEGACY_PATH_CASING_KEY)
        return cls(
            location_template=location_template or DEFAULT_LOCATION_TEMPLATE,
            parallelism_limit=(
                DEFAULT_PARALLELISM_LIMIT if parallelism_limit is None else parallelism_limit
            ),
            legacy_path_casing=bool(legacy),
        )


def read_optional_bool(config: Mapping[str, Any], key: str) -> bool | None:
    node: Any = config
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]

    if node is None:
        return None
    if not isinstance(node, bool):
        raise ConfigError(f"Invalid type in config for key '{key}', got {type(node).__name__}, wanted boolean")
    return node


def load_app_config(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    try:
        raw = path.read_text(encoding="utf-8")
        if suffix in {".yaml", ".yml"}:
            parsed = yaml.safe_load(raw)
        elif suffix == ".json":
            parsed = json.loads(raw)
        else:
            raise ConfigError(f"Unsupported config file format: {suffix or '<none>'}")
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to load config file {path}: {exc}") from exc

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")
    return parsed
