from __future__ import annotations

import argparse
from dataclasses import replace
import json
import logging
from pathlib import Path
import sys
from time import perf_counter
from typing import TextIO, TypedDict

import httpx

from techdocs_search.collator import DefaultTechDocsCollator
from techdocs_search.config import CollatorConfig, get_settings, load_app_config
from techdocs_search.discovery import SingleHostDiscovery
from techdocs_search.tokens import StaticTokenManager


class CollateResult(TypedDict):
    documents: int
    duration_ms: int
    parallelism_limit: int
    legacy_path_casing: bool


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="techdocs-collate",
        description="Collate TechDocs search index entries for catalog entities as NDJSON",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional app config file (YAML or JSON) read for techdocs.legacyUseCaseSensitiveTripletPaths",
    )
    parser.add_argument("--base-url", default=None, help="Backend base URL used for plugin discovery")
    parser.add_argument("--parallelism", type=int, default=None, help="Max concurrent index fetches")
    parser.add_argument("--location-template", default=None, help="Template for document locations")
    parser.add_argument(
        "--legacy-path-casing",
        action="store_true",
        default=None,
        help="Keep entity triplet casing in index and location paths",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    return parser


def _resolve_collator_config(args: argparse.Namespace) -> CollatorConfig:
    """Merge env settings, the optional app config file and CLI flags.

    CLI values win for template and parallelism. Legacy path casing is on
    when any of the env setting, the app config key or the flag enables it.
    """
    config = CollatorConfig.from_settings(get_settings())
    legacy_path_casing = config.legacy_path_casing or bool(args.legacy_path_casing)
    if args.config is not None:
        file_config = CollatorConfig.from_config(load_app_config(Path(args.config)))
        legacy_path_casing = legacy_path_casing or file_config.legacy_path_casing

    return replace(
        config,
        location_template=args.location_template or config.location_template,
        parallelism_limit=args.parallelism if args.parallelism is not None else config.parallelism_limit,
        legacy_path_casing=legacy_path_casing,
    )


def run_collation(
    collator: DefaultTechDocsCollator,
    *,
    output: TextIO,
) -> CollateResult:
    start = perf_counter()
    count = 0
    for document in collator.get_collator():
        output.write(json.dumps(document.to_dict()) + "\n")
        count += 1
    output.flush()

    return {
        "documents": count,
        "duration_ms": int((perf_counter() - start) * 1000),
        "parallelism_limit": collator.config.parallelism_limit,
        "legacy_path_casing": collator.config.legacy_path_casing,
    }


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    settings = get_settings()

    try:
        config = _resolve_collator_config(args)
        discovery = SingleHostDiscovery(base_url=args.base_url or settings.backend_base_url)
        with httpx.Client(timeout=settings.http_timeout_seconds) as http_client:
            collator = DefaultTechDocsCollator(
                discovery=discovery,
                token_manager=StaticTokenManager(settings.service_token),
                http_client=http_client,
                config=config,
            )
            metrics = run_collation(collator, output=sys.stdout)
    except Exception as exc:
        print(f"[techdocs-collate] failed: {exc}", file=sys.stderr, flush=True)
        raise SystemExit(1) from exc

    print(json.dumps(metrics), file=sys.stderr, flush=True)


if __name__ == "__main__":
    main()
