import io
import json
from pathlib import Path

import httpx
import pytest

from conftest import json_response, make_entity, search_index_payload
from techdocs_search import collate_runner
from techdocs_search.collate_runner import run_collation
from techdocs_search.collator import DefaultTechDocsCollator


def test_run_collation_writes_ndjson(discovery, token_manager, make_http_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/catalog/entities":
            return json_response([make_entity("foo")])
        return json_response(
            search_index_payload(
                {"title": "One", "text": "1", "location": "one/"},
                {"title": "Two", "text": "2", "location": "two/"},
            )
        )

    collator = DefaultTechDocsCollator(
        discovery=discovery,
        token_manager=token_manager,
        http_client=make_http_client(handler),
    )
    output = io.StringIO()

    result = run_collation(collator, output=output)

    lines = [json.loads(line) for line in output.getvalue().splitlines()]
    assert [line["title"] for line in lines] == ["One", "Two"]
    assert lines[0]["location"] == "/docs/default/component/foo/one/"
    assert lines[0]["entityTitle"] is None
    assert result["documents"] == 2
    assert result["parallelism_limit"] == 10
    assert result["legacy_path_casing"] is False


def test_resolve_collator_config_prefers_cli_flags(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TECHDOCS_PARALLELISM_LIMIT", "4")
    config_path = tmp_path / "app-config.yaml"
    config_path.write_text("techdocs:\n  legacyUseCaseSensitiveTripletPaths: true\n", encoding="utf-8")

    args = collate_runner._build_parser().parse_args(
        ["--config", str(config_path), "--location-template", "/d/:name/:path"]
    )
    config = collate_runner._resolve_collator_config(args)

    assert config.legacy_path_casing is True
    assert config.parallelism_limit == 4
    assert config.location_template == "/d/:name/:path"

    args = collate_runner._build_parser().parse_args(["--parallelism", "2", "--legacy-path-casing"])
    config = collate_runner._resolve_collator_config(args)

    assert config.parallelism_limit == 2
    assert config.legacy_path_casing is True


def test_main_exits_with_error_on_fatal_failure(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    with pytest.raises(SystemExit) as exc_info:
        collate_runner.main(["--config", str(tmp_path / "missing.yaml")])

    assert exc_info.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[techdocs-collate] failed: Config file not found" in captured.err


def test_resolve_collator_config_combines_env_and_file_legacy_flags(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("TECHDOCS_LEGACY_USE_CASE_SENSITIVE_TRIPLET_PATHS", "true")
    config_path = tmp_path / "app-config.yaml"
    config_path.write_text("techdocs:\n  legacyUseCaseSensitiveTripletPaths: false\n", encoding="utf-8")

    args = collate_runner._build_parser().parse_args(["--config", str(config_path)])

    assert collate_runner._resolve_collator_config(args).legacy_path_casing is True


def test_resolve_collator_config_uses_env_settings_without_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TECHDOCS_LOCATION_TEMPLATE", "/env/:name/:path")
    monkeypatch.setenv("TECHDOCS_PARALLELISM_LIMIT", "6")
    monkeypatch.delenv("TECHDOCS_LEGACY_USE_CASE_SENSITIVE_TRIPLET_PATHS", raising=False)

    config = collate_runner._resolve_collator_config(collate_runner._build_parser().parse_args([]))

    assert config.location_template == "/env/:name/:path"
    assert config.parallelism_limit == 6
    assert config.legacy_path_casing is False
