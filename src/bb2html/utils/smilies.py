#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/utils/smilies.py
"""Smiley (emoji shortcode) substitution.

A :class:`SmileyTable` maps shortcodes such as ``:)`` to trusted HTML
replacements. Codes are applied longest first. Each hit is cut out of the
text and recorded as an index into the table, and the replacements are
joined in only at the end. Replacement markup is therefore never scanned
again, and a short code can never match inside a longer one that has
already been substituted.

Substitution runs on text that is already HTML-escaped, so codes are
escaped before matching and a hit never splits a character reference.

"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator, Mapping, Union

from bb2html.utils.escape import escape_html
from bb2html.utils.html_sanitizer import sanitize_trusted_markup

logger = logging.getLogger(__name__)

_CHAR_REFERENCE = r"&(?:#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);"

SmileySource = Union["SmileyTable", Mapping[str, str], Iterable[tuple[str, str]]]

# A piece of text still open for matching, or the index of a smiley hit
_Segment = Union[str, int]


class SmileyTable:
    """Ordered collection of smiley codes and their HTML replacements.

    Parameters
    ----------
    smilies : Mapping[str, str] or iterable of (str, str), optional
        Shortcodes and replacement markup. Empty codes are ignored.
    sanitize : bool, default False
        Pass each replacement through bleach before trusting it.

    Examples
    --------
        >>> table = SmileyTable({":)": '<img class="smiley" src="/s/smile.png" alt=":)" />'})
        >>> table.replace("hi :)")
        'hi <img class="smiley" src="/s/smile.png" alt=":)" />'

    """

    def __init__(self, smilies: Mapping[str, str] | Iterable[tuple[str, str]] = (), sanitize: bool = False):
        """Build the table and order it by code length."""
        pairs = smilies.items() if isinstance(smilies, Mapping) else smilies
        entries: list[tuple[str, str]] = []
        for code, replacement in pairs:
            if not code:
                logger.debug("Skipping smiley with empty code")
                continue
            entries.append((str(code), sanitize_trusted_markup(replacement) if sanitize else str(replacement)))
        # Longest code first; sorted() is stable so equal lengths keep caller order
        self._entries = sorted(entries, key=lambda entry: len(entry[0]), reverse=True)
        self._patterns = [
            re.compile(f"(?P<code>{re.escape(escape_html(code))})|{_CHAR_REFERENCE}") for code, _ in self._entries
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({len(self._entries)} codes)"

    def replace(self, text: str) -> str:
        """Substitute every smiley code in escaped ``text``.

        Parameters
        ----------
        text : str
            HTML-escaped text

        Returns
        -------
        str
            Text with codes replaced by their markup

        """
        if not self._entries or not text:
            return text

        segments: list[_Segment] = [text]
        for index, pattern in enumerate(self._patterns):
            segments = self._split_segments(segments, pattern, index)

        return "".join(segment if isinstance(segment, str) else self._entries[segment][1] for segment in segments)

    @staticmethod
    def _split_segments(segments: list[_Segment], pattern: re.Pattern[str], index: int) -> list[_Segment]:
        result: list[_Segment] = []
        for segment in segments:
            if isinstance(segment, int):
                result.append(segment)
                continue
            start = 0
            for match in pattern.finditer(segment):
                if match.group("code") is None:
                    continue
                if match.start() > start:
                    result.append(segment[start : match.start()])
                result.append(index)
                start = match.end()
            if start < len(segment):
                result.append(segment[start:])
        return result


def as_smiley_table(smilies: SmileySource | None) -> SmileyTable:
    """Coerce a mapping, pair list or table into a :class:`SmileyTable`."""
    if isinstance(smilies, SmileyTable):
        return smilies
    if smilies is None:
        return SmileyTable()
    return SmileyTable(smilies)


def replace_smilies(text: str, smilies: SmileySource | None) -> str:
    """Replace smiley codes in escaped ``text`` using ``smilies``.

    Parameters
    ----------
    text : str
        HTML-escaped text
    smilies : SmileyTable, Mapping or iterable of pairs, optional
        Codes and replacement markup

    Returns
    -------
    str
        Text with smilies substituted

    """
    return as_smiley_table(smilies).replace(text)
