#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/parsers/tags.py
"""Tag rules and argument validators.

Every supported tag is described by a :class:`TagRule` record. The tree
builder interprets the records generically, so adding a tag means adding a
row to :data:`TAG_RULES` rather than writing new builder code.

Validators take the HTML-escaped argument as the tokenizer produced it and
return the normalised, escaped value to store on the element, or None if
the argument is not acceptable.

"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from html import unescape
from typing import Callable, Mapping, Optional

from bb2html.ast.nodes import GroupKind
from bb2html.constants import (
    FIGURE_ALIGNMENTS,
    HEADING_LEVELS,
    INDENT_LEVELS,
    LIST_TYPES,
    OPACITY_MAX,
    OPACITY_MIN,
    PIXELS_PER_EM,
    SIZE_MAX_EM,
    SIZE_MIN_EM,
    WEB_COLOURS,
)
from bb2html.utils.escape import escape_html
from bb2html.utils.html_sanitizer import is_image_url, normalize_url

Validator = Callable[[str], Optional[str]]

_HEX_COLOUR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")
_EMAIL = re.compile(r"^[^@\s:;<>\"'\[\]]+@[^@\s:;<>\"'\[\]]+\.[^@\s:;<>\"'\[\].]+$")
_MAX_ATTACHMENT_ID = 2**31 - 1


class ArgumentPolicy(Enum):
    """Whether a tag takes an ``=argument``."""

    NONE = "none"  # an argument turns the tag into literal text
    OPTIONAL = "optional"
    REQUIRED = "required"  # the bare form opens a broken element


class OpenAction(Enum):
    """How an opening tag changes the tree."""

    INLINE = "inline"
    BLOCK = "block"
    SPLIT = "split"
    LIST_ITEM = "list_item"
    TABLE_PART = "table_part"


class CloseAction(Enum):
    """How a closing tag changes the tree."""

    INLINE = "inline"
    BLOCK = "block"
    CONSUME = "consume"
    LIST_ITEM = "list_item"


class ArgumentConsumer(Enum):
    """Tags whose argument is taken from the text that follows the bare tag."""

    URL = "url"
    EMAIL = "email"
    IMAGE = "image"
    ATTACHMENT = "attachment"
    EMBED = "embed"


@dataclass(frozen=True)
class TagRule:
    """Behaviour of a single BBCode tag.

    Parameters
    ----------
    name : str
        Canonical lower-case tag name
    kind : GroupKind
        Kind of element the tag produces
    open_action : OpenAction
        What the opening tag does to the tree
    close_action : CloseAction
        What the closing tag does to the tree
    argument : ArgumentPolicy
        Whether an argument is forbidden, optional or required
    validator : callable, optional
        Argument validator; also applied to consumed text
    default_argument : str, optional
        Argument used for the bare form
    consumer : ArgumentConsumer, optional
        Take the argument from the following text when the tag is bare
    inner_paragraph : bool
        Open a paragraph inside the block
    reopen : bool
        Reopen interrupted inline formatting inside the new block
    new_paragraph_after : bool
        Open a paragraph after the block is closed
    parent_kinds : frozenset of GroupKind
        Required parent kinds for table parts

    """

    name: str
    kind: GroupKind
    open_action: OpenAction = OpenAction.INLINE
    close_action: CloseAction = CloseAction.INLINE
    argument: ArgumentPolicy = ArgumentPolicy.NONE
    validator: Optional[Validator] = None
    default_argument: Optional[str] = None
    consumer: Optional[ArgumentConsumer] = None
    inner_paragraph: bool = False
    reopen: bool = True
    new_paragraph_after: bool = True
    parent_kinds: frozenset[GroupKind] = frozenset()


# Validators


def _clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper) + 0.0


def _format_number(value: float) -> str:
    return f"{round(value, 4):g}"


def validate_colour(value: str) -> Optional[str]:
    """Accept ``#RGB``/``#RRGGBB`` or a named CSS colour in lower or Capitalised case."""
    colour = unescape(value).strip()
    if _HEX_COLOUR.match(colour):
        return colour
    if colour in WEB_COLOURS:
        return colour
    if colour[:1].isupper() and colour == colour.capitalize() and colour.lower() in WEB_COLOURS:
        return colour
    return None


def validate_opacity(value: str) -> Optional[str]:
    """Accept a fraction or a percentage, clamped to [0, 1]."""
    text = unescape(value).strip()
    percent = text.endswith("%")
    if percent:
        text = text[:-1].rstrip()
    if not _NUMBER.match(text):
        return None
    number = float(text) / 100 if percent else float(text)
    return _format_number(_clamp(number, OPACITY_MIN, OPACITY_MAX))


def validate_size(value: str) -> Optional[str]:
    """Accept a size in em, or in pixels (16px = 1em), clamped to [0.5, 2.0] em."""
    text = unescape(value).strip().lower()
    in_em = text.endswith("em")
    if in_em:
        text = text[:-2].rstrip()
    elif text.endswith("px"):
        text = text[:-2].rstrip()
    if not _NUMBER.match(text):
        return None
    number = float(text) if in_em else float(text) / PIXELS_PER_EM
    return _format_number(_clamp(number, SIZE_MIN_EM, SIZE_MAX_EM))


def validate_url(value: str) -> Optional[str]:
    """Accept an http(s) URL or a bare domain, which gets ``http://`` prefixed."""
    url = normalize_url(unescape(value))
    return escape_html(url) if url is not None else None


def validate_image_url(value: str) -> Optional[str]:
    """Accept a URL whose path ends in a supported raster image extension."""
    url = normalize_url(unescape(value))
    if url is None or not is_image_url(url):
        return None
    return escape_html(url)


def validate_email(value: str) -> Optional[str]:
    """Accept an email address and return it as a ``mailto:`` URL."""
    address = unescape(value).strip()
    if not _EMAIL.match(address):
        return None
    return f"mailto:{escape_html(address)}"


def validate_attachment_id(value: str) -> Optional[str]:
    """Accept a non-negative decimal attachment id."""
    text = unescape(value).strip()
    if not (text.isascii() and text.isdigit()):
        return None
    number = int(text)
    return str(number) if number <= _MAX_ATTACHMENT_ID else None


def validate_list_type(value: str) -> Optional[str]:
    text = unescape(value).strip()
    return text if text in LIST_TYPES else None


def validate_indent(value: str) -> Optional[str]:
    text = unescape(value).strip()
    return text if text in INDENT_LEVELS else None


def validate_figure(value: str) -> Optional[str]:
    text = unescape(value).strip().lower()
    return text if text in FIGURE_ALIGNMENTS else None


def validate_free_text(value: str) -> Optional[str]:
    """Accept any text. An empty value means the tag was used bare."""
    return value.strip()


# Kinds whose content is not parsed for tags, apart from their own closing tag
IGNORE_TAGS_KINDS = frozenset(
    {GroupKind.CODE, GroupKind.CODE_BLOCK, GroupKind.MATH, GroupKind.MATH_BLOCK, GroupKind.PLAIN}
)

# Kinds inside which line breaks are kept as literal text
IGNORE_FORMATTING_KINDS = IGNORE_TAGS_KINDS | {GroupKind.PRE, GroupKind.PRE_LINE}

# Kinds inside which line breaks carry no meaning
NO_LINEBREAK_KINDS = frozenset({GroupKind.LIST, GroupKind.TABLE})

# Kinds whose text is not scanned for smilies or nested links
LITERAL_TEXT_KINDS = frozenset(
    {
        GroupKind.URL,
        GroupKind.EMAIL,
        GroupKind.CODE,
        GroupKind.CODE_BLOCK,
        GroupKind.PRE,
        GroupKind.MATH,
        GroupKind.MATH_BLOCK,
    }
)

CONSUMER_KINDS = frozenset(
    {GroupKind.URL, GroupKind.EMAIL, GroupKind.IMAGE, GroupKind.ATTACHMENT, GroupKind.EMBED}
)

_TABLE_INTERIOR = frozenset(
    {GroupKind.TABLE_ROW, GroupKind.TABLE_HEADER, GroupKind.TABLE_DATA, GroupKind.TABLE_CAPTION}
)


def _inline(name: str, kind: GroupKind, **kwargs: object) -> TagRule:
    return TagRule(name, kind, **kwargs)  # type: ignore[arg-type]


def _block(name: str, kind: GroupKind, **kwargs: object) -> TagRule:
    kwargs.setdefault("open_action", OpenAction.BLOCK)
    kwargs.setdefault("close_action", CloseAction.BLOCK)
    return TagRule(name, kind, **kwargs)  # type: ignore[arg-type]


def _table_part(name: str, kind: GroupKind, parent: GroupKind, inner_paragraph: bool = False) -> TagRule:
    return TagRule(
        name,
        kind,
        open_action=OpenAction.TABLE_PART,
        close_action=CloseAction.BLOCK,
        inner_paragraph=inner_paragraph,
        new_paragraph_after=False,
        parent_kinds=frozenset({parent}),
    )


_RULES: list[TagRule] = [
    # Inline styles
    _inline("b", GroupKind.BOLD),
    _inline("i", GroupKind.ITALIC),
    _inline("strong", GroupKind.STRONG),
    _inline("em", GroupKind.EMPHASIS),
    _inline("u", GroupKind.UNDERLINE),
    _inline("s", GroupKind.STRIKETHROUGH),
    _inline("smcaps", GroupKind.SMALLCAPS),
    _inline("mono", GroupKind.MONOSPACE),
    _inline("sub", GroupKind.SUBSCRIPT),
    _inline("sup", GroupKind.SUPERSCRIPT),
    _inline("spoiler", GroupKind.SPOILER),
    # Attributed inline
    _inline("color", GroupKind.COLOUR, argument=ArgumentPolicy.REQUIRED, validator=validate_colour),
    _inline("colour", GroupKind.COLOUR, argument=ArgumentPolicy.REQUIRED, validator=validate_colour),
    _inline("opacity", GroupKind.OPACITY, argument=ArgumentPolicy.REQUIRED, validator=validate_opacity),
    _inline("size", GroupKind.SIZE, argument=ArgumentPolicy.REQUIRED, validator=validate_size),
    _inline(
        "url",
        GroupKind.URL,
        argument=ArgumentPolicy.OPTIONAL,
        validator=validate_url,
        consumer=ArgumentConsumer.URL,
    ),
    _inline(
        "email",
        GroupKind.EMAIL,
        argument=ArgumentPolicy.OPTIONAL,
        validator=validate_email,
        consumer=ArgumentConsumer.EMAIL,
    ),
    _inline("footnote", GroupKind.FOOTNOTE, argument=ArgumentPolicy.OPTIONAL, validator=validate_free_text),
    # Media
    _inline("img", GroupKind.IMAGE, validator=validate_image_url, consumer=ArgumentConsumer.IMAGE),
    _inline("attach", GroupKind.ATTACHMENT, validator=validate_attachment_id, consumer=ArgumentConsumer.ATTACHMENT),
    _block(
        "embed",
        GroupKind.EMBED,
        validator=validate_url,
        consumer=ArgumentConsumer.EMBED,
        reopen=False,
    ),
    # Code and verbatim
    _inline("code", GroupKind.CODE),
    _inline("math", GroupKind.MATH),
    _inline("plain", GroupKind.PLAIN),
    _inline("pre-line", GroupKind.PRE_LINE),
    _block(
        "codeblock",
        GroupKind.CODE_BLOCK,
        argument=ArgumentPolicy.OPTIONAL,
        validator=validate_free_text,
        reopen=False,
    ),
    _block("mathblock", GroupKind.MATH_BLOCK, reopen=False),
    _block("pre", GroupKind.PRE),
    # Blocks
    _block("center", GroupKind.CENTER, inner_paragraph=True),
    _block("right", GroupKind.RIGHT, inner_paragraph=True),
    _block(
        "indent",
        GroupKind.INDENT,
        argument=ArgumentPolicy.OPTIONAL,
        validator=validate_indent,
        default_argument="1",
        inner_paragraph=True,
    ),
    _block(
        "quote",
        GroupKind.QUOTE,
        argument=ArgumentPolicy.OPTIONAL,
        validator=validate_free_text,
        inner_paragraph=True,
    ),
    _block(
        "figure",
        GroupKind.FIGURE,
        argument=ArgumentPolicy.REQUIRED,
        validator=validate_figure,
        inner_paragraph=True,
    ),
    TagRule("hr", GroupKind.HORIZONTAL_RULE, open_action=OpenAction.SPLIT, close_action=CloseAction.CONSUME),
    # Lists
    _block(
        "list",
        GroupKind.LIST,
        argument=ArgumentPolicy.OPTIONAL,
        validator=validate_list_type,
        reopen=False,
    ),
    TagRule("*", GroupKind.LIST_ITEM, open_action=OpenAction.LIST_ITEM, close_action=CloseAction.LIST_ITEM),
    # Tables
    _block("table", GroupKind.TABLE, reopen=False),
    _table_part("tr", GroupKind.TABLE_ROW, GroupKind.TABLE),
    _table_part("th", GroupKind.TABLE_HEADER, GroupKind.TABLE_ROW, inner_paragraph=True),
    _table_part("td", GroupKind.TABLE_DATA, GroupKind.TABLE_ROW, inner_paragraph=True),
    _table_part("caption", GroupKind.TABLE_CAPTION, GroupKind.TABLE, inner_paragraph=True),
]

_RULES.extend(_block(f"h{level}", GroupKind.HEADING, default_argument=level) for level in HEADING_LEVELS)

TAG_RULES: Mapping[str, TagRule] = {rule.name: rule for rule in _RULES}


def get_tag_rule(name: str) -> Optional[TagRule]:
    """Look up the rule for a tag name, ignoring case."""
    return TAG_RULES.get(name.lower())


def is_table_interior(kind: GroupKind) -> bool:
    """Whether ``kind`` is a row, cell or caption that a new table part may close implicitly."""
    return kind in _TABLE_INTERIOR
