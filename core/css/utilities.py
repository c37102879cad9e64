"""Fallback interpreter for common utility-class naming conventions.

Used only for tokens that have no rule in the build's compiled stylesheets.
Unknown shapes resolve to an empty list; nothing is ever guessed.
"""

from __future__ import annotations

import re

KEYWORD_DECLARATIONS: dict[str, tuple[str, ...]] = {
    # display
    "flex": ("display: flex",),
    "inline-flex": ("display: inline-flex",),
    "grid": ("display: grid",),
    "inline-grid": ("display: inline-grid",),
    "block": ("display: block",),
    "inline": ("display: inline",),
    "inline-block": ("display: inline-block",),
    "contents": ("display: contents",),
    "hidden": ("display: none",),
    # flex direction / wrap / sizing
    "flex-col": ("flex-direction: column",),
    "flex-row": ("flex-direction: row",),
    "flex-col-reverse": ("flex-direction: column-reverse",),
    "flex-row-reverse": ("flex-direction: row-reverse",),
    "flex-wrap": ("flex-wrap: wrap",),
    "flex-nowrap": ("flex-wrap: nowrap",),
    "flex-1": ("flex: 1 1 0%",),
    "flex-auto": ("flex: 1 1 auto",),
    "flex-none": ("flex: none",),
    "grow": ("flex-grow: 1",),
    "shrink-0": ("flex-shrink: 0",),
    # justify / align
    "justify-start": ("justify-content: flex-start",),
    "justify-end": ("justify-content: flex-end",),
    "justify-center": ("justify-content: center",),
    "justify-between": ("justify-content: space-between",),
    "justify-around": ("justify-content: space-around",),
    "justify-evenly": ("justify-content: space-evenly",),
    "items-start": ("align-items: flex-start",),
    "items-end": ("align-items: flex-end",),
    "items-center": ("align-items: center",),
    "items-baseline": ("align-items: baseline",),
    "items-stretch": ("align-items: stretch",),
    "self-start": ("align-self: flex-start",),
    "self-end": ("align-self: flex-end",),
    "self-center": ("align-self: center",),
    # text
    "text-left": ("text-align: left",),
    "text-center": ("text-align: center",),
    "text-right": ("text-align: right",),
    "text-justify": ("text-align: justify",),
    "font-thin": ("font-weight: 100",),
    "font-light": ("font-weight: 300",),
    "font-normal": ("font-weight: 400",),
    "font-medium": ("font-weight: 500",),
    "font-semibold": ("font-weight: 600",),
    "font-bold": ("font-weight: 700",),
    "font-extrabold": ("font-weight: 800",),
    "italic": ("font-style: italic",),
    "not-italic": ("font-style: normal",),
    "underline": ("text-decoration-line: underline",),
    "line-through": ("text-decoration-line: line-through",),
    "no-underline": ("text-decoration-line: none",),
    "uppercase": ("text-transform: uppercase",),
    "lowercase": ("text-transform: lowercase",),
    "capitalize": ("text-transform: capitalize",),
    "normal-case": ("text-transform: none",),
    "whitespace-nowrap": ("white-space: nowrap",),
    "truncate": ("overflow: hidden", "text-overflow: ellipsis", "white-space: nowrap"),
    # colors
    "text-white": ("color: #fff",),
    "text-black": ("color: #000",),
    "text-transparent": ("color: transparent",),
    "text-current": ("color: currentColor",),
    "bg-white": ("background-color: #fff",),
    "bg-black": ("background-color: #000",),
    "bg-transparent": ("background-color: transparent",),
    "bg-current": ("background-color: currentColor",),
    # position
    "static": ("position: static",),
    "relative": ("position: relative",),
    "absolute": ("position: absolute",),
    "fixed": ("position: fixed",),
    "sticky": ("position: sticky",),
    # overflow
    "overflow-hidden": ("overflow: hidden",),
    "overflow-auto": ("overflow: auto",),
    "overflow-scroll": ("overflow: scroll",),
    "overflow-visible": ("overflow: visible",),
    # cursor
    "cursor-pointer": ("cursor: pointer",),
    "cursor-default": ("cursor: default",),
    "cursor-not-allowed": ("cursor: not-allowed",),
    # borders
    "border": ("border-width: 1px",),
    "border-0": ("border-width: 0px",),
    "border-2": ("border-width: 2px",),
    "border-solid": ("border-style: solid",),
    "border-dashed": ("border-style: dashed",),
}

SPACING_SCALE: dict[str, str] = {
    "0": "0px",
    "px": "1px",
    "0.5": "0.125rem",
    "1": "0.25rem",
    "1.5": "0.375rem",
    "2": "0.5rem",
    "2.5": "0.625rem",
    "3": "0.75rem",
    "3.5": "0.875rem",
    "4": "1rem",
    "5": "1.25rem",
    "6": "1.5rem",
    "7": "1.75rem",
    "8": "2rem",
    "9": "2.25rem",
    "10": "2.5rem",
    "11": "2.75rem",
    "12": "3rem",
    "14": "3.5rem",
    "16": "4rem",
    "20": "5rem",
    "24": "6rem",
    "28": "7rem",
    "32": "8rem",
    "36": "9rem",
    "40": "10rem",
    "44": "11rem",
    "48": "12rem",
    "52": "13rem",
    "56": "14rem",
    "60": "15rem",
    "64": "16rem",
    "72": "18rem",
    "80": "20rem",
    "96": "24rem",
}

SPACING_PROPERTIES: dict[str, tuple[str, ...]] = {
    "p": ("padding",),
    "px": ("padding-left", "padding-right"),
    "py": ("padding-top", "padding-bottom"),
    "pt": ("padding-top",),
    "pb": ("padding-bottom",),
    "pl": ("padding-left",),
    "pr": ("padding-right",),
    "m": ("margin",),
    "mx": ("margin-left", "margin-right"),
    "my": ("margin-top", "margin-bottom"),
    "mt": ("margin-top",),
    "mb": ("margin-bottom",),
    "ml": ("margin-left",),
    "mr": ("margin-right",),
    "gap": ("gap",),
    "gap-x": ("column-gap",),
    "gap-y": ("row-gap",),
}

SIZE_KEYWORDS: dict[str, str] = {
    "full": "100%",
    "min": "min-content",
    "max": "max-content",
    "fit": "fit-content",
    "auto": "auto",
}

# Viewport keywords resolve along the axis of the sized property.
VIEWPORT_KEYWORDS: dict[str, dict[str, str]] = {
    "width": {"screen": "100vw", "svw": "100svw", "lvw": "100lvw", "dvw": "100dvw"},
    "height": {"screen": "100vh", "svh": "100svh", "lvh": "100lvh", "dvh": "100dvh"},
}

SIZE_PROPERTIES: dict[str, str] = {
    "w": "width",
    "h": "height",
    "min-w": "min-width",
    "min-h": "min-height",
    "max-w": "max-width",
    "max-h": "max-height",
}

# Prefixes whose bracket value is typed: a colour, or a length where a length property exists.
ARBITRARY_COLOR_PROPERTIES: dict[str, str] = {
    "text": "color",
    "bg": "background-color",
    "border": "border-color",
    "border-t": "border-top-color",
    "border-b": "border-bottom-color",
    "border-l": "border-left-color",
    "border-r": "border-right-color",
    "fill": "fill",
    "stroke": "stroke",
}

ARBITRARY_LENGTH_PROPERTIES: dict[str, str] = {
    "text": "font-size",
    "border": "border-width",
    "border-t": "border-top-width",
    "border-b": "border-bottom-width",
    "border-l": "border-left-width",
    "border-r": "border-right-width",
    "stroke": "stroke-width",
}

ARBITRARY_PROPERTIES: dict[str, str] = {
    "p": "padding",
    "px": "padding-inline",
    "py": "padding-block",
    "pt": "padding-top",
    "pb": "padding-bottom",
    "pl": "padding-left",
    "pr": "padding-right",
    "m": "margin",
    "mx": "margin-inline",
    "my": "margin-block",
    "mt": "margin-top",
    "mb": "margin-bottom",
    "ml": "margin-left",
    "mr": "margin-right",
    "w": "width",
    "h": "height",
    "min-w": "min-width",
    "min-h": "min-height",
    "max-w": "max-width",
    "max-h": "max-height",
    "top": "top",
    "bottom": "bottom",
    "left": "left",
    "right": "right",
    "gap": "gap",
    "gap-x": "column-gap",
    "gap-y": "row-gap",
    "rounded": "border-radius",
    "leading": "line-height",
    "tracking": "letter-spacing",
    "z": "z-index",
}

ROUNDED: dict[str, str] = {
    "rounded": "0.25rem",
    "rounded-none": "0px",
    "rounded-sm": "0.125rem",
    "rounded-md": "0.375rem",
    "rounded-lg": "0.5rem",
    "rounded-xl": "0.75rem",
    "rounded-2xl": "1rem",
    "rounded-3xl": "1.5rem",
    "rounded-full": "9999px",
}

TEXT_SIZES: dict[str, tuple[str, str]] = {
    "xs": ("0.75rem", "1rem"),
    "sm": ("0.875rem", "1.25rem"),
    "base": ("1rem", "1.5rem"),
    "lg": ("1.125rem", "1.75rem"),
    "xl": ("1.25rem", "1.75rem"),
    "2xl": ("1.5rem", "2rem"),
    "3xl": ("1.875rem", "2.25rem"),
    "4xl": ("2.25rem", "2.5rem"),
    "5xl": ("3rem", "1"),
    "6xl": ("3.75rem", "1"),
    "7xl": ("4.5rem", "1"),
    "8xl": ("6rem", "1"),
    "9xl": ("8rem", "1"),
}

_ARBITRARY_RE = re.compile(r"([a-z]+(?:-[a-z]+)?)-\[(.+)\]")
_SPACING_RE = re.compile(
    r"(p|px|py|pt|pb|pl|pr|m|mx|my|mt|mb|ml|mr|gap|gap-x|gap-y)-(px|\d+(?:\.\d+)?)"
)
_SIZE_RE = re.compile(r"(w|h|min-w|min-h|max-w|max-h)-(.+)")
_TEXT_SIZE_RE = re.compile(r"text-(xs|sm|base|lg|xl|[2-9]xl)")
_OPACITY_RE = re.compile(r"opacity-(\d+)")
_Z_RE = re.compile(r"z-(\d+|auto)")
_FRACTION_RE = re.compile(r"(\d+)/(\d+)")
_NUMERIC_RE = re.compile(r"\d+(?:\.\d+)?")
_COLOR_VALUE_RE = re.compile(
    r"#[0-9a-fA-F]{3,8}\b|(?:rgba?|hsla?|hwb|lab|lch|oklab|oklch|color|var)\("
)
_LENGTH_VALUE_RE = re.compile(r"-?\d*\.?\d+(?:px|r?em|%|vh|vw|ch|ex|pt)?")


def parse_utility_class(class_name: str) -> list[str]:
    """Resolve one utility token to `property: value` declarations, or [] if unknown."""

    keyword = KEYWORD_DECLARATIONS.get(class_name)
    if keyword is not None:
        return list(keyword)

    match = _ARBITRARY_RE.fullmatch(class_name)
    if match:
        return _arbitrary(match.group(1), match.group(2))

    match = _SPACING_RE.fullmatch(class_name)
    if match:
        value = SPACING_SCALE.get(match.group(2))
        if value is None:
            return []
        return [f"{prop}: {value}" for prop in SPACING_PROPERTIES[match.group(1)]]

    match = _SIZE_RE.fullmatch(class_name)
    if match:
        prop = SIZE_PROPERTIES[match.group(1)]
        value = _size_value(prop, match.group(2))
        if value is None:
            return []
        return [f"{prop}: {value}"]

    if class_name in ROUNDED:
        return [f"border-radius: {ROUNDED[class_name]}"]

    match = _TEXT_SIZE_RE.fullmatch(class_name)
    if match:
        font_size, line_height = TEXT_SIZES[match.group(1)]
        return [f"font-size: {font_size}", f"line-height: {line_height}"]

    match = _OPACITY_RE.fullmatch(class_name)
    if match:
        return [f"opacity: {_format_number(int(match.group(1)) / 100)}"]

    match = _Z_RE.fullmatch(class_name)
    if match:
        return [f"z-index: {match.group(1)}"]

    return []


def _arbitrary(prefix: str, value: str) -> list[str]:
    # Arbitrary values encode spaces as underscores.
    text = value.replace("_", " ")
    if prefix in ARBITRARY_COLOR_PROPERTIES:
        if _COLOR_VALUE_RE.match(text):
            return [f"{ARBITRARY_COLOR_PROPERTIES[prefix]}: {text}"]
        if prefix in ARBITRARY_LENGTH_PROPERTIES and _LENGTH_VALUE_RE.fullmatch(text):
            return [f"{ARBITRARY_LENGTH_PROPERTIES[prefix]}: {text}"]
        return []
    prop = ARBITRARY_PROPERTIES.get(prefix)
    if prop is None:
        return []
    return [f"{prop}: {text}"]


def _size_value(prop: str, value: str) -> str | None:
    axis = "width" if prop.endswith("width") else "height"
    if value in VIEWPORT_KEYWORDS[axis]:
        return VIEWPORT_KEYWORDS[axis][value]
    if value in SIZE_KEYWORDS:
        return SIZE_KEYWORDS[value]
    if value.startswith("[") and value.endswith("]"):
        return value[1:-1].replace("_", " ")
    if value in SPACING_SCALE:
        return SPACING_SCALE[value]
    fraction = _FRACTION_RE.fullmatch(value)
    if fraction and int(fraction.group(2)) != 0:
        percent = int(fraction.group(1)) / int(fraction.group(2)) * 100
        return f"{_format_number(round(percent, 6))}%"
    if _NUMERIC_RE.fullmatch(value):
        return f"{_format_number(float(value) * 0.25)}rem"
    return None


def _format_number(value: float) -> str:
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return text or "0"
