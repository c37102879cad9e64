from __future__ import annotations

import pytest

from core.scan.patterns import (
    extract_dynamic_base_strings,
    is_dynamic_class_string,
    iter_class_values,
    line_number,
)


def _values(content: str) -> list[tuple[str, str]]:
    return [(match.syntax.name, match.value) for match in iter_class_values(content)]


@pytest.mark.parametrize(
    ("content", "syntax", "value"),
    [
        ('<div className="flex gap-2">', "jsx_double", "flex gap-2"),
        ("<div className='flex gap-2'>", "jsx_single", "flex gap-2"),
        ('e("div",{className:"flex gap-2"})', "object_double", "flex gap-2"),
        ("e('div',{className : 'flex gap-2'})", "object_single", "flex gap-2"),
        ('["div","className","flex gap-2"]', "minified_positional", "flex gap-2"),
        ('<div class="flex gap-2">', "html_double", "flex gap-2"),
        ("<div class='flex gap-2'>", "html_single", "flex gap-2"),
        ("<div class=&quot;flex gap-2&quot;>", "html_entity", "flex gap-2"),
        ("<div class=&#34;flex gap-2&#34;>", "html_numeric_entity", "flex gap-2"),
        ('{\\"className\\":\\"flex gap-2\\"}', "escaped_fragment", "flex gap-2"),
        ("e('div',{className:`flex gap-2`})", "template_static", "flex gap-2"),
    ],
)
def test_each_static_syntax_is_recognised(content: str, syntax: str, value: str) -> None:
    assert _values(content) == [(syntax, value)]


def test_dynamic_template_is_not_a_static_value() -> None:
    content = "e('div',{className:`px-4 py-2 ${active ? 'a' : 'b'}`})"

    assert _values(content) == []
    assert extract_dynamic_base_strings(content) == ["px-4 py-2"]


def test_concat_prefix_is_a_dynamic_base() -> None:
    content = 'e("div",{className:"".concat("px-4 py-2 ", size)})'

    assert _values(content) == []
    assert extract_dynamic_base_strings(content) == ["px-4 py-2"]


def test_jsx_attribute_is_not_read_as_markup_class() -> None:
    content = '<a className="p-4 m-2" class="flex gap-2">'

    assert _values(content) == [("jsx_double", "p-4 m-2"), ("html_double", "flex gap-2")]


@pytest.mark.parametrize(
    ("value", "dynamic"),
    [
        ("flex gap-2", False),
        ("hover:bg-blue-500 md:flex", False),
        ("a ${b}", True),
        ("isOpen ? 'a' : 'b'", True),
        ("cn(base, extra)", True),
        ("styles", True),
        ("flex", True),
    ],
)
def test_is_dynamic_class_string(value: str, dynamic: bool) -> None:
    assert is_dynamic_class_string(value) is dynamic


def test_blank_values_are_skipped() -> None:
    assert _values('<div class="   ">') == []


def test_line_number_is_one_based() -> None:
    content = "a\nb\nc"

    assert line_number(content, 0) == 1
    assert line_number(content, content.index("c")) == 3
