from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from core.css.stylesheet import StylesheetIndex
from core.css.synthesizer import (
    CSS_MARKER,
    find_injection_target,
    inject_consolidated_css,
    render_rules,
    resolve_mapping,
    synthesize_css,
)
from core.manifest.models import ClassMapping, VariantRule
from core.utils.errors import StylesheetNotFoundError


def _mapping(classes: list[str], name: str = "cf-abcde") -> ClassMapping:
    return ClassMapping(
        original=" ".join(classes),
        consolidated=name,
        normalized_key=" ".join(sorted(classes)),
        classes=classes,
        frequency=3,
        bytes_saved=30,
    )


def _index(css: str) -> StylesheetIndex:
    index = StylesheetIndex()
    index.add_stylesheet_text(css)
    return index


def test_interpreter_fills_tokens_missing_from_stylesheets() -> None:
    mapping = _mapping(["flex", "items-center", "gap-2"])

    resolve_mapping(mapping, StylesheetIndex())

    assert mapping.css_declarations == ["display: flex", "align-items: center", "gap: 0.5rem"]
    assert mapping.variants == []
    assert mapping.retained_classes == []


def test_stylesheet_rules_win_and_variants_are_collected() -> None:
    index = _index(
        ".flex{display:grid}"
        ".card-title{font-size:2rem}"
        ".hover\\:underline:hover{text-decoration-line:underline}"
        "@media (min-width: 768px){.md\\:p-8{padding:2rem}}"
    )
    mapping = _mapping(["md:p-8", "flex", "card-title", "hover:underline"])

    resolve_mapping(mapping, index)

    assert mapping.css_declarations == ["display: grid", "font-size: 2rem"]
    assert [(v.pseudo, v.media is None) for v in mapping.variants] == [
        (":hover", True),
        ("", False),
    ]
    assert mapping.variants[0].declarations == ["text-decoration-line: underline"]
    assert mapping.variants[1].declarations == ["padding: 2rem"]


def test_unresolved_tokens_are_retained_not_invented() -> None:
    mapping = _mapping(["flex", "fancy-shadow"])

    resolve_mapping(mapping, StylesheetIndex())

    assert mapping.css_declarations == ["display: flex"]
    assert mapping.retained_classes == ["fancy-shadow"]


def test_declarations_are_deduplicated_in_order() -> None:
    mapping = _mapping(["px-4", "pl-4", "block"])

    resolve_mapping(mapping, StylesheetIndex())

    assert mapping.css_declarations == [
        "padding-left: 1rem",
        "padding-right: 1rem",
        "display: block",
    ]


def test_render_rules_layout() -> None:
    mapping = _mapping(["flex", "gap-2"])
    mapping.css_declarations = ["display: flex", "gap: 0.5rem"]
    mapping.variants = [
        VariantRule(pseudo=":hover", declarations=["opacity: 0.5"]),
        VariantRule(media="(min-width: 768px)", declarations=["gap: 1rem"]),
    ]

    css = render_rules([mapping])

    assert css == (
        f"{CSS_MARKER}\n"
        ".cf-abcde {\n  display: flex;\n  gap: 0.5rem;\n}\n\n"
        ".cf-abcde:hover {\n  opacity: 0.5;\n}\n\n"
        "@media (min-width: 768px) {\n  .cf-abcde {\n    gap: 1rem;\n  }\n}\n"
    )


def test_render_rules_layer_wrapper() -> None:
    mapping = _mapping(["flex", "gap-2"])
    mapping.css_declarations = ["display: flex"]

    css = render_rules([mapping], css_layer="classfold")

    assert css == (
        f"{CSS_MARKER}\n@layer classfold {{\n  .cf-abcde {{\n    display: flex;\n  }}\n}}\n"
    )
    assert render_rules([]) == ""


def test_synthesize_drops_mappings_without_any_declaration(tmp_path: Path) -> None:
    styled = _mapping(["flex", "gap-2"], name="cf-aaaaa")
    unstyled = _mapping(["brand-a", "brand-b"], name="cf-bbbbb")

    result = synthesize_css([styled, unstyled], tmp_path)

    assert [m.consolidated for m in result.mappings] == ["cf-aaaaa"]
    assert [m.consolidated for m in result.dropped] == ["cf-bbbbb"]
    assert result.css_text.startswith(CSS_MARKER)
    assert "cf-bbbbb" not in result.css_text


def test_synthesize_reads_build_stylesheets(tmp_path: Path) -> None:
    (tmp_path / "app.css").write_text(".brand-a{color:#123456}", encoding="utf-8")

    result = synthesize_css([_mapping(["brand-a", "flex"])], tmp_path, css_layer="cf")

    assert result.mappings[0].css_declarations[1] == "display: flex"
    assert result.mappings[0].css_declarations[0].startswith("color: ")
    assert "@layer cf {" in result.css_text


def _write_css(root: Path, relative: str, content: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_injection_targets_largest_stylesheet_once(tmp_path: Path) -> None:
    small = _write_css(tmp_path, "static/css/a.css", ".a{color:red}")
    large = _write_css(tmp_path, "static/css/b.css", ".b{color:red}" * 20)
    css_text = f"{CSS_MARKER}\n.cf-abcde {{\n  display: flex;\n}}\n"

    first = inject_consolidated_css(tmp_path, css_text)
    second = inject_consolidated_css(tmp_path, css_text)

    assert first.target == large and first.injected
    assert second.target == large and not second.injected
    assert large.read_text(encoding="utf-8").count(CSS_MARKER) == 1
    assert CSS_MARKER not in small.read_text(encoding="utf-8")
    assert find_injection_target(tmp_path).injected is False


def test_injection_without_stylesheet_raises(tmp_path: Path) -> None:
    with pytest.raises(StylesheetNotFoundError):
        find_injection_target(tmp_path)


def test_injection_keeps_stylesheet_mode(tmp_path: Path) -> None:
    sheet = _write_css(tmp_path, "static/css/app.css", ".a{color:red}\n")
    os.chmod(sheet, 0o640)

    inject_consolidated_css(tmp_path, f"{CSS_MARKER}\n.cf-abcde {{\n  display: flex;\n}}\n")

    assert stat.S_IMODE(sheet.stat().st_mode) == 0o640
    assert sheet.read_text(encoding="utf-8").startswith(".a{color:red}\n\n")


def test_undecodable_stylesheet_is_skipped_as_target(tmp_path: Path) -> None:
    broken = tmp_path / "static" / "css" / "vendor.css"
    broken.parent.mkdir(parents=True)
    broken.write_bytes(b"\xff\xfe" + b".b{color:red}" * 50)
    readable = _write_css(tmp_path, "static/css/app.css", ".a{color:red}")

    assert find_injection_target(tmp_path).target == readable


def test_only_undecodable_stylesheets_means_no_target(tmp_path: Path) -> None:
    (tmp_path / "vendor.css").write_bytes(b"\xff\xfe.b{color:red}")

    with pytest.raises(StylesheetNotFoundError, match="No readable CSS files"):
        find_injection_target(tmp_path)
