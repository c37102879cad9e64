from __future__ import annotations

import os
import re
import stat
from pathlib import Path

import pytest

from core.config.models import OptimizerConfig, SafelistConfig
from core.css.synthesizer import CSS_MARKER
from core.manifest.store import load_manifest, manifest_path_for
from core.orchestrator.pipeline import run_analysis, run_optimize
from core.utils.errors import ConfigError, StylesheetNotFoundError

CARD = '<div class="flex items-center gap-2">card</div>\n'
BUTTON = '<button class="px-4 py-2 js-submit-btn">Go</button>\n'


def _write_build(root: Path, files: dict[str, str]) -> Path:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def _cards_build(tmp_path: Path, *, with_css: bool = True) -> Path:
    files = {"server/app/index.html": f"<html><body>\n{CARD * 3}</body></html>\n"}
    if with_css:
        files["static/css/app.css"] = "body{margin:0}\n"
    return _write_build(tmp_path / ".next", files)


def _read(root: Path, relative: str) -> str:
    return (root / relative).read_text(encoding="utf-8")


def test_repeated_card_layout_is_consolidated(tmp_path: Path) -> None:
    build = _cards_build(tmp_path)

    output = run_optimize(OptimizerConfig(build_dir=build))

    assert output.scan.occurrences["flex gap-2 items-center"].count == 3
    assert len(output.mappings) == 1
    mapping = output.mappings[0]
    assert len(mapping.consolidated) == len("cf-") + 5
    assert re.fullmatch(r"cf-[0-9a-z]{5}", mapping.consolidated)
    assert mapping.css_declarations == ["display: flex", "align-items: center", "gap: 0.5rem"]

    html = _read(build, "server/app/index.html")
    assert html.count(f'class="{mapping.consolidated}"') == 3
    assert "items-center" not in html

    css = _read(build, "static/css/app.css")
    assert css.startswith("body{margin:0}")
    assert css.count(CSS_MARKER) == 1
    assert f".{mapping.consolidated} {{\n  display: flex;" in css

    assert output.rewrite.files_modified == 1
    assert output.metrics.consolidated_css_bytes == len(output.css_text.encode("utf-8"))
    metrics = output.metrics
    assert metrics.net_bytes_saved == output.rewrite.bytes_changed - metrics.consolidated_css_bytes
    assert output.manifest_path == manifest_path_for(build)


def test_safelisted_token_stays_next_to_synthetic_name(tmp_path: Path) -> None:
    build = _write_build(
        tmp_path / ".next",
        {
            "server/app/index.html": BUTTON * 3,
            "static/css/app.css": "body{margin:0}\n",
        },
    )
    config = OptimizerConfig(
        build_dir=build,
        min_bytes_saved=0,
        force_all=True,
        exclude=SafelistConfig(prefixes=["js-"]),
    )

    output = run_optimize(config)

    [mapping] = output.mappings
    assert mapping.classes == ["px-4", "py-2"]
    assert mapping.excluded_classes == ["js-submit-btn"]
    assert mapping.css_declarations == [
        "padding-left: 1rem",
        "padding-right: 1rem",
        "padding-top: 0.5rem",
        "padding-bottom: 0.5rem",
    ]
    assert "js-submit-btn" not in output.css_text
    html = _read(build, "server/app/index.html")
    assert html.count(f'class="{mapping.consolidated} js-submit-btn"') == 3


def test_no_qualifying_patterns_still_writes_empty_manifest(tmp_path: Path) -> None:
    build = _write_build(
        tmp_path / ".next",
        {"server/app/index.html": '<a class="p-4 m-2"></a><b class="flex gap-2"></b>'},
    )

    output = run_optimize(OptimizerConfig(build_dir=build))

    assert output.candidates == []
    assert output.rewrite.files_modified == 0
    assert output.injection is None
    manifest = load_manifest(manifest_path_for(build))
    assert manifest.mappings == []
    assert manifest.metrics.total_files_scanned == 1


def test_second_run_changes_nothing(tmp_path: Path) -> None:
    build = _cards_build(tmp_path)
    first = run_optimize(OptimizerConfig(build_dir=build))
    html_after_first = _read(build, "server/app/index.html")
    css_after_first = _read(build, "static/css/app.css")
    manifest_after_first = _read(build, "classfold-manifest.json")

    second = run_optimize(OptimizerConfig(build_dir=build))

    assert second.candidates == []
    assert second.already_optimized is True
    assert second.rewrite.files_modified == 0
    assert second.manifest_path is None
    assert _read(build, "server/app/index.html") == html_after_first
    assert _read(build, "static/css/app.css") == css_after_first
    assert _read(build, "classfold-manifest.json") == manifest_after_first
    [mapping] = load_manifest(manifest_path_for(build)).mappings
    assert mapping.consolidated == first.mappings[0].consolidated


def test_new_patterns_on_marked_build_are_not_rewritten(tmp_path: Path) -> None:
    build = _cards_build(tmp_path)
    first = run_optimize(OptimizerConfig(build_dir=build))
    _write_build(build, {"server/app/about.html": '<p class="grid gap-4 p-6 m-2"></p>\n' * 4})

    second = run_optimize(OptimizerConfig(build_dir=build))

    assert second.already_optimized is True
    assert second.rewrite.files_modified == 0
    assert "grid gap-4 p-6 m-2" in _read(build, "server/app/about.html")
    assert _read(build, "static/css/app.css").count(CSS_MARKER) == 1
    manifest = load_manifest(manifest_path_for(build))
    assert [m.consolidated for m in manifest.mappings] == [first.mappings[0].consolidated]


def test_rewritten_files_keep_mode_and_line_endings(tmp_path: Path) -> None:
    build = _write_build(tmp_path / ".next", {"static/css/app.css": "body{margin:0}\r\n"})
    page = build / "server" / "app" / "index.html"
    page.parent.mkdir(parents=True)
    crlf_card = CARD.replace("\n", "\r\n").encode("utf-8")
    page.write_bytes(b"<html>\r\n" + crlf_card * 3 + b"</html>\r\n")
    css = build / "static" / "css" / "app.css"
    os.chmod(page, 0o640)
    os.chmod(css, 0o640)

    output = run_optimize(OptimizerConfig(build_dir=build))

    name = output.mappings[0].consolidated.encode("utf-8")
    card = b'<div class="' + name + b'">card</div>\r\n'
    assert page.read_bytes() == b"<html>\r\n" + card * 3 + b"</html>\r\n"
    assert output.rewrite.bytes_changed == (len("flex items-center gap-2") - len(name)) * 3
    assert stat.S_IMODE(page.stat().st_mode) == 0o640
    assert stat.S_IMODE(css.stat().st_mode) == 0o640
    assert css.read_bytes().startswith(b"body{margin:0}\n\n")


def test_missing_stylesheet_aborts_before_rewriting(tmp_path: Path) -> None:
    build = _cards_build(tmp_path, with_css=False)
    before = _read(build, "server/app/index.html")

    with pytest.raises(StylesheetNotFoundError) as exc_info:
        run_optimize(OptimizerConfig(build_dir=build))

    partial = exc_info.value.run_output
    assert partial is not None
    assert len(partial.mappings) == 1
    assert partial.css_text.startswith(CSS_MARKER)
    assert _read(build, "server/app/index.html") == before
    assert not manifest_path_for(build).exists()


def test_dry_run_reports_without_writing(tmp_path: Path) -> None:
    build = _cards_build(tmp_path)
    before_html = _read(build, "server/app/index.html")
    before_css = _read(build, "static/css/app.css")

    output = run_optimize(OptimizerConfig(build_dir=build), dry_run=True)

    assert output.rewrite.files_modified == 1
    assert output.metrics.bytes_saved > 0
    assert output.manifest is None
    assert _read(build, "server/app/index.html") == before_html
    assert _read(build, "static/css/app.css") == before_css
    assert not manifest_path_for(build).exists()


def test_consistency_safe_mode_needs_script_side(tmp_path: Path) -> None:
    build = _cards_build(tmp_path)
    config = OptimizerConfig(build_dir=build, ssr=True)

    assert run_analysis(config).candidates == []

    _write_build(build, {"static/chunks/app.js": 'e("div",{className:"gap-2 flex items-center"})'})
    output = run_optimize(config)

    assert len(output.mappings) == 1
    name = output.mappings[0].consolidated
    assert _read(build, "static/chunks/app.js") == f'e("div",{{className:"{name}"}})'
    assert _read(build, "server/app/index.html").count(name) == 3


def test_dynamic_base_blocks_markup_superset(tmp_path: Path) -> None:
    build = _write_build(
        tmp_path / ".next",
        {
            "server/app/index.html": '<a class="px-4 py-2 rounded-lg shadow-md"></a>\n' * 3,
            "static/chunks/app.js": "e('a',{className:`px-4 py-2 ${variant}`})",
            "static/css/app.css": "body{margin:0}\n",
        },
    )

    output = run_optimize(OptimizerConfig(build_dir=build))

    assert len(output.mappings) == 1
    assert output.rewrite.files_modified == 0
    assert output.rewrite.skipped_for_consistency >= 1
    assert CSS_MARKER not in _read(build, "static/css/app.css")


def test_options_backup_data_attributes_and_layer(tmp_path: Path) -> None:
    build = _cards_build(tmp_path)
    original = _read(build, "server/app/index.html")
    config = OptimizerConfig(
        build_dir=build, backup=True, data_attributes=True, css_layer="classfold"
    )

    output = run_optimize(config)

    html = _read(build, "server/app/index.html")
    assert html.count('data-cf-original="flex items-center gap-2"') == 3
    assert _read(build, "server/app/index.html.classfold.bak") == original
    assert "@layer classfold {" in _read(build, "static/css/app.css")
    assert output.metrics.total_files_modified == 1


def test_manifest_maps_names_back_to_original_classes(tmp_path: Path) -> None:
    build = _cards_build(tmp_path)
    original = _read(build, "server/app/index.html")

    run_optimize(OptimizerConfig(build_dir=build))

    manifest = load_manifest(manifest_path_for(build))
    restored = _read(build, "server/app/index.html")
    for mapping in manifest.mappings:
        restored = restored.replace(
            f'class="{mapping.consolidated}"', f'class="{mapping.original}"'
        )
    assert restored == original
    assert manifest.tool == "classfold"
    assert manifest.config["name_prefix"] == "cf-"


def test_no_manifest_option(tmp_path: Path) -> None:
    build = _cards_build(tmp_path)

    output = run_optimize(OptimizerConfig(build_dir=build, manifest=False))

    assert output.manifest_path is None
    assert not manifest_path_for(build).exists()


def test_invalid_config_fails_before_touching_files(tmp_path: Path) -> None:
    build = _cards_build(tmp_path)
    before = _read(build, "server/app/index.html")

    try:
        run_optimize(OptimizerConfig(build_dir=build, name_length=1))
    except ConfigError as exc:
        assert exc.problems == ["name_length must be at least 3"]
    else:
        raise AssertionError("Expected ConfigError")

    assert _read(build, "server/app/index.html") == before


def test_sequential_naming_gives_shortest_name_to_best_pattern(tmp_path: Path) -> None:
    build = _write_build(
        tmp_path / ".next",
        {
            "server/app/index.html": CARD * 3 + '<p class="grid grid-cols-3 gap-4 p-6"></p>\n' * 5,
            "static/css/app.css": "body{margin:0}\n",
        },
    )

    output = run_optimize(OptimizerConfig(build_dir=build, naming="sequential"))

    assert [(m.normalized_key, m.consolidated) for m in output.mappings] == [
        ("gap-4 grid grid-cols-3 p-6", "cf-a"),
        ("flex gap-2 items-center", "cf-b"),
    ]
