#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/utils/escape.py
"""HTML escaping utilities.

User text is escaped exactly once. The tokenizer escapes characters as it
reads them, and an ``&`` that already starts a valid character reference
is left alone, so ``&lt;`` typed by a user stays ``&lt;`` rather than
becoming ``&amp;lt;``. :func:`escape_unescaped` applies the same rule to
whole strings and is idempotent.

"""

from __future__ import annotations

import re
from html.entities import html5

from bb2html.constants import HTML_ESCAPE_MAP

_ESCAPE_TABLE = str.maketrans(HTML_ESCAPE_MAP)

_CHAR_REFERENCE = re.compile(r"&(?:#[0-9]{1,7};|#[xX][0-9a-fA-F]{1,6};|([A-Za-z][A-Za-z0-9]{1,31});)")


def escape_html(text: str) -> str:
    """Escape every HTML-special character in ``text``.

    Parameters
    ----------
    text : str
        Raw text

    Returns
    -------
    str
        Text with ``< > & " '`` replaced by entities

    """
    return text.translate(_ESCAPE_TABLE)


def char_reference_length(text: str, index: int) -> int:
    """Return the length of a valid character reference at ``text[index]``.

    Parameters
    ----------
    text : str
        Text to inspect
    index : int
        Position of an ``&`` character

    Returns
    -------
    int
        Length of the reference including ``&`` and ``;``, or 0 when the
        ampersand does not start a valid numeric or named HTML5 reference

    """
    match = _CHAR_REFERENCE.match(text, index)
    if match is None:
        return 0
    name = match.group(1)
    if name is not None and f"{name};" not in html5:
        return 0
    return match.end() - index


def escape_char(text: str, index: int) -> tuple[str, int]:
    """Escape the character at ``text[index]``.

    Returns
    -------
    tuple of (str, int)
        The escaped output and the number of input characters consumed. A
        valid character reference is passed through whole.

    """
    char = text[index]
    if char == "&":
        length = char_reference_length(text, index)
        if length:
            return text[index : index + length], length
    return HTML_ESCAPE_MAP.get(char, char), 1


def escape_unescaped(text: str) -> str:
    """Escape HTML-special characters that are not already escaped.

    Parameters
    ----------
    text : str
        Text that may already contain character references

    Returns
    -------
    str
        Escaped text; applying the function again returns the same string

    """
    if not any(char in text for char in HTML_ESCAPE_MAP):
        return text
    parts: list[str] = []
    index = 0
    while index < len(text):
        escaped, consumed = escape_char(text, index)
        parts.append(escaped)
        index += consumed
    return "".join(parts)
