#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/constants.py
"""Constants shared across the bb2html pipeline.

This module centralizes the tag vocabularies, colour names, accepted image
extensions and option defaults used by the tokenizer, tree builder and
renderer.
"""

from __future__ import annotations

from typing import Final

# Option defaults
DEFAULT_PRESERVE_EMPTY: Final = False
DEFAULT_BLANK_LINE_PARAGRAPHS: Final = False
DEFAULT_AUTOLINK: Final = True
DEFAULT_MAX_NESTING_DEPTH: Final = 100
DEFAULT_VALIDATE_TREE: Final = False
DEFAULT_PARAGRAPHS: Final = True
DEFAULT_PRETTY_PRINT: Final = False
DEFAULT_LINK_REL: Final = "nofollow"
DEFAULT_SMILIES_IN_CODE: Final = False

# Nesting depth bounds. Rendering recurses once per level, so the ceiling
# stays well below the interpreter recursion limit.
MIN_NESTING_DEPTH: Final = 2
MAX_NESTING_DEPTH_LIMIT: Final = 250

# HTML escaping, applied one-for-one while scanning
HTML_ESCAPE_MAP: Final[dict[str, str]] = {
    "<": "&lt;",
    ">": "&gt;",
    "&": "&amp;",
    '"': "&quot;",
    "'": "&#x27;",
}

# Bare URL recognition
AUTOLINK_PREFIXES: Final = ("http://", "https://")
URL_TERMINATORS: Final = frozenset(" \t\n\r\f\v<>,[")
URL_TRAILING_PUNCTUATION: Final = ".,!?:;"

# Characters that reject a scheme-less URL argument
FORBIDDEN_URL_CHARS: Final = frozenset(":;*#{}|^~[]`")

# Raster image formats browsers can display. SVG is excluded because it can carry script.
ACCEPTED_IMAGE_EXTENSIONS: Final = frozenset(
    {
        ".jpg",
        ".jpeg",
        ".pjpeg",
        ".pjp",
        ".jfif",
        ".png",
        ".apng",
        ".gif",
        ".bmp",
        ".webp",
    }
)

# List types
ORDERED_LIST_TYPES: Final = frozenset({"1", "a", "A", "i", "I"})
UNORDERED_LIST_TYPES: Final = frozenset({"circle", "square", "none"})
LIST_TYPES: Final = ORDERED_LIST_TYPES | UNORDERED_LIST_TYPES

INDENT_LEVELS: Final = frozenset({"1", "2", "3", "4"})
FIGURE_ALIGNMENTS: Final = frozenset({"left", "right"})
HEADING_LEVELS: Final = ("1", "2", "3", "4", "5", "6")

# Numeric argument ranges
OPACITY_MIN: Final = 0.0
OPACITY_MAX: Final = 1.0
SIZE_MIN_EM: Final = 0.5
SIZE_MAX_EM: Final = 2.0
PIXELS_PER_EM: Final = 16.0

# Smiley replacements passed through bleach when sanitization is requested
SMILEY_ALLOWED_TAGS: Final = frozenset({"img", "span"})
SMILEY_ALLOWED_ATTRIBUTES: Final[dict[str, list[str]]] = {
    "img": ["src", "alt", "title", "class", "width", "height", "loading"],
    "span": ["class", "title"],
}
SMILEY_ALLOWED_PROTOCOLS: Final = frozenset({"http", "https"})

# CLI exit codes
EXIT_SUCCESS: Final = 0
EXIT_ERROR: Final = 1
EXIT_VALIDATION_ERROR: Final = 2
EXIT_FILE_ERROR: Final = 3

# Named CSS colours accepted by [color=...]
WEB_COLOURS: Final = frozenset(
    {
        "aliceblue",
        "antiquewhite",
        "aqua",
        "aquamarine",
        "azure",
        "beige",
        "bisque",
        "black",
        "blanchedalmond",
        "blue",
        "blueviolet",
        "brown",
        "burlywood",
        "cadetblue",
        "chartreuse",
        "chocolate",
        "coral",
        "cornflowerblue",
        "cornsilk",
        "crimson",
        "cyan",
        "darkblue",
        "darkcyan",
        "darkgoldenrod",
        "darkgray",
        "darkgrey",
        "darkgreen",
        "darkkhaki",
        "darkmagenta",
        "darkolivegreen",
        "darkorange",
        "darkorchid",
        "darkred",
        "darksalmon",
        "darkseagreen",
        "darkslateblue",
        "darkslategray",
        "darkslategrey",
        "darkturquoise",
        "darkviolet",
        "deeppink",
        "deepskyblue",
        "dimgray",
        "dimgrey",
        "dodgerblue",
        "firebrick",
        "floralwhite",
        "forestgreen",
        "fuchsia",
        "gainsboro",
        "ghostwhite",
        "gold",
        "goldenrod",
        "gray",
        "grey",
        "green",
        "greenyellow",
        "honeydew",
        "hotpink",
        "indianred",
        "indigo",
        "ivory",
        "khaki",
        "lavender",
        "lavenderblush",
        "lawngreen",
        "lemonchiffon",
        "lightblue",
        "lightcoral",
        "lightcyan",
        "lightgoldenrodyellow",
        "lightgray",
        "lightgrey",
        "lightgreen",
        "lightpink",
        "lightsalmon",
        "lightseagreen",
        "lightskyblue",
        "lightslategray",
        "lightslategrey",
        "lightsteelblue",
        "lightyellow",
        "lime",
        "limegreen",
        "linen",
        "magenta",
        "maroon",
        "mediumaquamarine",
        "mediumblue",
        "mediumorchid",
        "mediumpurple",
        "mediumseagreen",
        "mediumslateblue",
        "mediumspringgreen",
        "mediumturquoise",
        "mediumvioletred",
        "midnightblue",
        "mintcream",
        "mistyrose",
        "moccasin",
        "navajowhite",
        "navy",
        "oldlace",
        "olive",
        "olivedrab",
        "orange",
        "orangered",
        "orchid",
        "palegoldenrod",
        "palegreen",
        "paleturquoise",
        "palevioletred",
        "papayawhip",
        "peachpuff",
        "peru",
        "pink",
        "plum",
        "powderblue",
        "purple",
        "rebeccapurple",
        "red",
        "rosybrown",
        "royalblue",
        "saddlebrown",
        "salmon",
        "sandybrown",
        "seagreen",
        "seashell",
        "sienna",
        "silver",
        "skyblue",
        "slateblue",
        "slategray",
        "slategrey",
        "snow",
        "springgreen",
        "steelblue",
        "tan",
        "teal",
        "thistle",
        "tomato",
        "transparent",
        "turquoise",
        "violet",
        "wheat",
        "white",
        "whitesmoke",
        "yellow",
        "yellowgreen",
    }
)
