from __future__ import annotations

from pathlib import Path

from core.css.stylesheet import (
    StylesheetIndex,
    build_stylesheet_index,
    find_stylesheets,
    unescape_class_name,
    unwrap_block_at_rules,
)

UTILITIES_CSS = """
.flex{display:flex}
.p-4{padding:1rem}
.hover\\:underline:hover{text-decoration-line:underline}
@media (min-width: 768px){.md\\:flex{display:flex}}
.card .title{color:red}
.btn,.chip{margin:0}
.important{color:red !important}
"""


def _index(css: str) -> StylesheetIndex:
    index = StylesheetIndex()
    index.add_stylesheet_text(css)
    return index


def test_single_class_rules_are_indexed() -> None:
    index = _index(UTILITIES_CSS)

    [flex] = index.lookup("flex")
    assert flex.declarations == ("display: flex",)
    assert flex.is_base
    assert index.lookup("p-4")[0].declarations == ("padding: 1rem",)


def test_pseudo_and_media_variants_are_kept_apart() -> None:
    index = _index(UTILITIES_CSS)

    [hover] = index.lookup("hover:underline")
    assert hover.pseudo == ":hover"
    assert hover.media is None
    assert not hover.is_base

    [responsive] = index.lookup("md:flex")
    assert responsive.pseudo == ""
    assert responsive.media is not None
    assert "768px" in responsive.media


def test_compound_selectors_are_ignored_but_selector_lists_split() -> None:
    index = _index(UTILITIES_CSS)

    assert index.lookup("card") == []
    assert index.lookup("title") == []
    assert index.lookup("btn")[0].declarations == ("margin: 0",)
    assert index.lookup("chip")[0].declarations == ("margin: 0",)


def test_important_priority_is_preserved() -> None:
    assert _index(UTILITIES_CSS).lookup("important")[0].declarations == ("color: red !important",)


def test_layer_blocks_are_unwrapped() -> None:
    css = (
        "@layer base, utilities;\n"
        "@layer utilities{.grid{display:grid}"
        "@media (min-width: 640px){.sm\\:grid{display:grid}}}"
    )

    index = _index(css)

    assert index.lookup("grid")[0].declarations == ("display: grid",)
    assert index.lookup("sm:grid")[0].media is not None


def test_unwrap_block_at_rules_keeps_bodies() -> None:
    unwrapped = unwrap_block_at_rules("@supports (display:grid){.a{b:c}}.d{e:f}")

    assert unwrapped == ".a{b:c}.d{e:f}"


def test_unescape_class_name() -> None:
    assert unescape_class_name("md\\:flex") == "md:flex"
    assert unescape_class_name("w-1\\/2") == "w-1/2"
    assert unescape_class_name("\\32 xl\\:p-4") == "2xl:p-4"


def test_build_index_from_build_dir(tmp_path: Path) -> None:
    css_dir = tmp_path / "static" / "css"
    css_dir.mkdir(parents=True)
    (css_dir / "a.css").write_text(".flex{display:flex}", encoding="utf-8")
    (css_dir / "b.css").write_text(".grid{display:grid}", encoding="utf-8")
    (tmp_path / "static" / "notes.txt").write_text(".x{}", encoding="utf-8")

    index = build_stylesheet_index(tmp_path)

    assert [path.name for path in find_stylesheets(tmp_path)] == ["a.css", "b.css"]
    assert len(index.files) == 2
    assert index.lookup("grid")
    assert index.errors == []


def test_unreadable_stylesheet_becomes_warning(tmp_path: Path) -> None:
    (tmp_path / "broken.css").write_bytes(b"\xff\xfe.flex{display:flex}")

    index = build_stylesheet_index(tmp_path)

    assert index.files == []
    assert len(index.errors) == 1
    assert index.errors[0].startswith("Error parsing stylesheet")
