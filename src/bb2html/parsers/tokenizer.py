#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/parsers/tokenizer.py
"""BBCode tokenizer.

Turns raw post text into a flat list of tokens in one forward pass. The
tokenizer never fails: anything that does not form a well-shaped tag
(``[b``, ``[/b x]``, a tag cut by a line break) is demoted to text.

All text is HTML-escaped as it is read, including tag names and arguments.
An ``&`` that already starts a valid character reference is kept as is, so
escaping happens exactly once.

Line endings are tokenized as follows:

- ``\\r`` is dropped.
- Each ``\\n`` produces a :class:`LinebreakToken`.
- A line ending followed by a tab produces a :class:`ParagraphBreakToken`.
- With ``blank_line_paragraphs`` enabled, two or more consecutive line
  endings produce one :class:`ParagraphBreakToken`.

Spaces after a line ending are swallowed into the break token's ``raw``
text, which code-like tags re-emit verbatim.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from bb2html.constants import (
    AUTOLINK_PREFIXES,
    DEFAULT_AUTOLINK,
    DEFAULT_BLANK_LINE_PARAGRAPHS,
    URL_TERMINATORS,
    URL_TRAILING_PUNCTUATION,
)
from bb2html.utils.escape import escape_char, escape_html, escape_unescaped
from bb2html.utils.html_sanitizer import normalize_url


@dataclass(frozen=True)
class Token:
    """Base class for tokens."""

    def to_source(self) -> str:
        """Return the escaped source text this token was read from."""
        raise NotImplementedError


@dataclass(frozen=True)
class TextToken(Token):
    """Run of escaped text."""

    text: str

    def to_source(self) -> str:
        return self.text


@dataclass(frozen=True)
class UrlToken(Token):
    """Bare ``http(s)`` URL found in text."""

    url: str

    def to_source(self) -> str:
        return self.url


@dataclass(frozen=True)
class LinebreakToken(Token):
    """Single line ending plus any indentation that followed it."""

    raw: str = "\n"

    def to_source(self) -> str:
        return self.raw


@dataclass(frozen=True)
class ParagraphBreakToken(Token):
    """Paragraph separator."""

    raw: str = "\n\n"

    def to_source(self) -> str:
        return self.raw


@dataclass(frozen=True)
class TagOpenToken(Token):
    """Opening tag such as ``[b]`` or ``[url=...]``.

    ``raw_argument`` keeps the delimiter that introduced it (``=`` or a
    space) so the tag can be reproduced verbatim.
    """

    name: str
    raw_argument: Optional[str] = None

    def to_source(self) -> str:
        return f"[{self.name}{self.raw_argument or ''}]"


@dataclass(frozen=True)
class TagCloseToken(Token):
    """Closing tag such as ``[/b]``."""

    name: str

    def to_source(self) -> str:
        return f"[/{self.name}]"


class ReadMode(Enum):
    """Tokenizer state."""

    TEXT = "text"
    ESCAPE = "escape"
    TAG = "tag"
    TAG_ARGUMENT = "tag_argument"
    TAG_ARGUMENT_QUOTED = "tag_argument_quoted"
    TAG_CLOSE = "tag_close"
    PARAGRAPH_BREAK = "paragraph_break"


_TAG_ABORT_CHARS = frozenset("[\n\r")


def _is_close_name_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char in "-*")


class Tokenizer:
    """Single-pass BBCode tokenizer.

    Parameters
    ----------
    blank_line_paragraphs : bool, default False
        Emit a paragraph break for two or more consecutive line endings.
    autolink : bool, default True
        Emit :class:`UrlToken` for bare ``http(s)`` URLs.

    Examples
    --------
        >>> Tokenizer().tokenize("[b]hi[/b]")
        [TagOpenToken(name='b', raw_argument=None), TextToken(text='hi'), TagCloseToken(name='b')]

    """

    def __init__(
        self,
        blank_line_paragraphs: bool = DEFAULT_BLANK_LINE_PARAGRAPHS,
        autolink: bool = DEFAULT_AUTOLINK,
    ):
        """Initialize the tokenizer."""
        self.blank_line_paragraphs = blank_line_paragraphs
        self.autolink = autolink
        self._handlers: dict[ReadMode, Callable[[str], None]] = {
            ReadMode.TEXT: self._read_text,
            ReadMode.ESCAPE: self._read_escape,
            ReadMode.TAG: self._read_tag,
            ReadMode.TAG_ARGUMENT: self._read_tag_argument,
            ReadMode.TAG_ARGUMENT_QUOTED: self._read_tag_argument_quoted,
            ReadMode.TAG_CLOSE: self._read_tag_close,
            ReadMode.PARAGRAPH_BREAK: self._read_break,
        }
        self._reset("")

    def _reset(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._mode = ReadMode.TEXT
        self._tokens: list[Token] = []
        self._text: list[str] = []
        self._name: list[str] = []
        self._argument: list[str] = []
        self._breaks: list[str] = []

    def tokenize(self, source: str) -> list[Token]:
        """Split ``source`` into tokens.

        Parameters
        ----------
        source : str
            Raw BBCode text

        Returns
        -------
        list of Token
            Tokens in source order

        """
        self._reset(source)
        length = len(source)
        while self._pos < length:
            self._handlers[self._mode](source[self._pos])
        self._finish()
        tokens = self._tokens
        self._reset("")
        return tokens

    # Output helpers

    def _flush_text(self) -> None:
        if self._text:
            self._tokens.append(TextToken("".join(self._text)))
            self._text = []

    def _emit(self, token: Token) -> None:
        self._flush_text()
        self._tokens.append(token)

    def _append_escaped(self, buffer: list[str]) -> None:
        escaped, consumed = escape_char(self._source, self._pos)
        buffer.append(escaped)
        self._pos += consumed

    def _pending_tag_source(self) -> str:
        slash = "/" if self._mode is ReadMode.TAG_CLOSE else ""
        return f"[{slash}{''.join(self._name)}{''.join(self._argument)}"

    def _abort_tag(self) -> None:
        # The current character is not consumed; it is read again as text.
        self._text.append(self._pending_tag_source())
        self._name = []
        self._argument = []
        self._mode = ReadMode.TEXT

    def _emit_breaks(self, paragraph_last: bool = False) -> None:
        breaks, self._breaks = self._breaks, []
        if paragraph_last:
            for raw in breaks[:-1]:
                self._emit(LinebreakToken(raw))
            self._emit(ParagraphBreakToken(breaks[-1]))
        elif self.blank_line_paragraphs and len(breaks) > 1:
            self._emit(ParagraphBreakToken("".join(breaks)))
        else:
            for raw in breaks:
                self._emit(LinebreakToken(raw))

    def _finish(self) -> None:
        if self._mode in (ReadMode.TAG, ReadMode.TAG_ARGUMENT, ReadMode.TAG_ARGUMENT_QUOTED, ReadMode.TAG_CLOSE):
            self._abort_tag()
        elif self._mode is ReadMode.ESCAPE:
            self._text.append("\\")
        elif self._mode is ReadMode.PARAGRAPH_BREAK:
            self._emit_breaks()
        self._mode = ReadMode.TEXT
        self._flush_text()

    # Mode handlers

    def _read_text(self, char: str) -> None:
        if char == "\\":
            self._mode = ReadMode.ESCAPE
            self._pos += 1
        elif char == "[":
            self._flush_text()
            self._mode = ReadMode.TAG
            self._pos += 1
        elif char == "\r":
            self._pos += 1
        elif char == "\n":
            self._flush_text()
            self._breaks = ["\n"]
            self._mode = ReadMode.PARAGRAPH_BREAK
            self._pos += 1
        elif char in "hH" and self.autolink and self._read_url():
            return
        else:
            self._append_escaped(self._text)

    def _read_url(self) -> bool:
        """Try to read a bare URL at the current position."""
        source, start = self._source, self._pos
        if start > 0 and source[start - 1].isalnum():
            return False
        if not source[start : start + 8].lower().startswith(AUTOLINK_PREFIXES):
            return False

        end = start
        while end < len(source) and source[end] not in URL_TERMINATORS and source[end].isprintable():
            end += 1
        while end > start:
            last = source[end - 1]
            if last in URL_TRAILING_PUNCTUATION:
                end -= 1
            elif last == ")" and source.count("(", start, end) < source.count(")", start, end):
                end -= 1
            else:
                break

        url = normalize_url(source[start:end])
        if url is None:
            return False
        self._emit(UrlToken(escape_unescaped(url)))
        self._pos = end
        return True

    def _read_escape(self, char: str) -> None:
        self._pos += 1
        if char == "\r":
            return
        self._text.append(escape_html(char))
        self._mode = ReadMode.TEXT

    def _read_tag(self, char: str) -> None:
        if char == "]":
            if self._name:
                self._emit(TagOpenToken("".join(self._name)))
            else:
                self._text.append("[]")
            self._name = []
            self._mode = ReadMode.TEXT
            self._pos += 1
        elif char == "/" and not self._name:
            self._mode = ReadMode.TAG_CLOSE
            self._pos += 1
        elif char in " =" and self._name:
            self._argument = [char]
            self._mode = ReadMode.TAG_ARGUMENT
            self._pos += 1
        elif char in _TAG_ABORT_CHARS or char in "/ =":
            self._abort_tag()
        else:
            self._append_escaped(self._name)

    def _read_tag_argument(self, char: str) -> None:
        if char == "]":
            self._emit(TagOpenToken("".join(self._name), "".join(self._argument)))
            self._name = []
            self._argument = []
            self._mode = ReadMode.TEXT
            self._pos += 1
        elif char == '"':
            self._argument.append("&quot;")
            self._mode = ReadMode.TAG_ARGUMENT_QUOTED
            self._pos += 1
        elif char in _TAG_ABORT_CHARS:
            self._abort_tag()
        else:
            self._append_escaped(self._argument)

    def _read_tag_argument_quoted(self, char: str) -> None:
        if char == '"':
            self._argument.append("&quot;")
            self._mode = ReadMode.TAG_ARGUMENT
            self._pos += 1
        elif char in "\n\r":
            self._abort_tag()
        else:
            self._append_escaped(self._argument)

    def _read_tag_close(self, char: str) -> None:
        if char == "]":
            if self._name:
                self._emit(TagCloseToken("".join(self._name)))
            else:
                self._text.append("[/]")
            self._name = []
            self._mode = ReadMode.TEXT
            self._pos += 1
        elif _is_close_name_char(char):
            self._name.append(char)
            self._pos += 1
        else:
            self._abort_tag()

    def _read_break(self, char: str) -> None:
        if char == "\r":
            self._pos += 1
        elif char == "\n":
            self._breaks.append("\n")
            self._pos += 1
        elif char == " ":
            self._breaks[-1] += " "
            self._pos += 1
        elif char == "\t":
            self._breaks[-1] += "\t"
            self._pos += 1
            self._emit_breaks(paragraph_last=True)
            self._mode = ReadMode.TEXT
        else:
            self._emit_breaks()
            self._mode = ReadMode.TEXT


def tokenize(
    source: str,
    *,
    blank_line_paragraphs: bool = DEFAULT_BLANK_LINE_PARAGRAPHS,
    autolink: bool = DEFAULT_AUTOLINK,
) -> list[Token]:
    """Tokenize BBCode ``source``.

    Parameters
    ----------
    source : str
        Raw BBCode text
    blank_line_paragraphs : bool, default False
        Emit a paragraph break for blank lines
    autolink : bool, default True
        Recognise bare http(s) URLs

    Returns
    -------
    list of Token
        Tokens in source order

    """
    return Tokenizer(blank_line_paragraphs=blank_line_paragraphs, autolink=autolink).tokenize(source)
