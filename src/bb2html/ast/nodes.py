#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/ast/nodes.py
"""Element tree node definitions.

The BBCode tree uses a single node class, :class:`Element`, tagged with a
:class:`GroupKind`. A tag whose argument or position was invalid keeps its
kind and carries a :class:`BrokenInfo`, so it can be rendered back as the
literal bracket syntax the user typed.

Trees are built top-down by the tree builder, which tracks the open elements
on an explicit stack. Nodes hold no reference to their parent.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterator, Optional

from bb2html.exceptions import TreeInvariantError

if TYPE_CHECKING:
    from bb2html.ast.visitors import NodeVisitor


class GroupKind(Enum):
    """Kind of an element in the BBCode tree."""

    DOCUMENT = "document"
    PARAGRAPH = "paragraph"
    TEXT = "text"

    BOLD = "bold"
    ITALIC = "italic"
    STRONG = "strong"
    EMPHASIS = "emphasis"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"
    MONOSPACE = "monospace"
    SUBSCRIPT = "subscript"
    SUPERSCRIPT = "superscript"
    SPOILER = "spoiler"
    SMALLCAPS = "smallcaps"

    COLOUR = "colour"
    OPACITY = "opacity"
    SIZE = "size"
    URL = "url"
    EMAIL = "email"
    FOOTNOTE = "footnote"

    QUOTE = "quote"
    CODE = "code"
    CODE_BLOCK = "code_block"
    PRE = "pre"
    PRE_LINE = "pre_line"
    PLAIN = "plain"
    MATH = "math"
    MATH_BLOCK = "math_block"
    CENTER = "center"
    RIGHT = "right"
    INDENT = "indent"
    FIGURE = "figure"
    EMBED = "embed"
    HEADING = "heading"

    LIST = "list"
    LIST_ITEM = "list_item"
    TABLE = "table"
    TABLE_ROW = "table_row"
    TABLE_HEADER = "table_header"
    TABLE_DATA = "table_data"
    TABLE_CAPTION = "table_caption"

    IMAGE = "image"
    ATTACHMENT = "attachment"

    LINEBREAK = "linebreak"
    HORIZONTAL_RULE = "horizontal_rule"

    @property
    def is_inline(self) -> bool:
        """Whether elements of this kind live inside a paragraph."""
        return self in INLINE_KINDS

    @property
    def holds_blocks(self) -> bool:
        """Whether block elements may be opened directly inside this kind."""
        return self in BLOCK_CONTAINER_KINDS

    @property
    def is_structural(self) -> bool:
        """Whether this kind only holds other structure (rows, items), not text."""
        return self in STRUCTURAL_KINDS


INLINE_KINDS = frozenset(
    {
        GroupKind.TEXT,
        GroupKind.BOLD,
        GroupKind.ITALIC,
        GroupKind.STRONG,
        GroupKind.EMPHASIS,
        GroupKind.UNDERLINE,
        GroupKind.STRIKETHROUGH,
        GroupKind.MONOSPACE,
        GroupKind.SUBSCRIPT,
        GroupKind.SUPERSCRIPT,
        GroupKind.SPOILER,
        GroupKind.SMALLCAPS,
        GroupKind.COLOUR,
        GroupKind.OPACITY,
        GroupKind.SIZE,
        GroupKind.URL,
        GroupKind.EMAIL,
        GroupKind.FOOTNOTE,
        GroupKind.CODE,
        GroupKind.PRE_LINE,
        GroupKind.PLAIN,
        GroupKind.MATH,
        GroupKind.IMAGE,
        GroupKind.ATTACHMENT,
        GroupKind.LINEBREAK,
    }
)

BLOCK_CONTAINER_KINDS = frozenset(
    {
        GroupKind.DOCUMENT,
        GroupKind.QUOTE,
        GroupKind.CENTER,
        GroupKind.RIGHT,
        GroupKind.INDENT,
        GroupKind.FIGURE,
        GroupKind.LIST,
        GroupKind.LIST_ITEM,
        GroupKind.TABLE,
        GroupKind.TABLE_ROW,
        GroupKind.TABLE_HEADER,
        GroupKind.TABLE_DATA,
        GroupKind.TABLE_CAPTION,
    }
)

STRUCTURAL_KINDS = frozenset({GroupKind.LIST, GroupKind.TABLE, GroupKind.TABLE_ROW})

# Kinds that may carry an argument
ARGUMENT_KINDS = frozenset(
    {
        GroupKind.COLOUR,
        GroupKind.OPACITY,
        GroupKind.SIZE,
        GroupKind.URL,
        GroupKind.EMAIL,
        GroupKind.FOOTNOTE,
        GroupKind.QUOTE,
        GroupKind.CODE_BLOCK,
        GroupKind.FIGURE,
        GroupKind.LIST,
        GroupKind.INDENT,
        GroupKind.HEADING,
        GroupKind.IMAGE,
        GroupKind.ATTACHMENT,
        GroupKind.EMBED,
    }
)


@dataclass(frozen=True)
class BrokenInfo:
    """Marker for an element whose tag was invalid.

    Parameters
    ----------
    underlying : GroupKind
        Kind the tag would have produced
    original_name : str
        Tag name as written in the source, used to reproduce the brackets

    """

    underlying: GroupKind
    original_name: str


@dataclass(eq=False)
class Element:
    """A node in the BBCode element tree.

    Parameters
    ----------
    kind : GroupKind
        What the element represents
    argument : str or None
        Validated, HTML-escaped tag argument (URL, colour, list type, ...)
    text : str or None
        HTML-escaped content; only set on TEXT leaves
    children : list of Element
        Child elements in document order
    is_void : bool
        Element renders without content or closing tag
    is_explicit : bool
        Element was closed by its own closing tag rather than implicitly
    is_detachable : bool
        Element may be pruned when it ends up empty
    broken : BrokenInfo or None
        Set when the tag was invalid and must render literally

    """

    kind: GroupKind
    argument: Optional[str] = None
    text: Optional[str] = None
    children: list[Element] = field(default_factory=list)
    is_void: bool = False
    is_explicit: bool = False
    is_detachable: bool = True
    broken: Optional[BrokenInfo] = None

    @classmethod
    def text_node(cls, text: str) -> Element:
        """Create a TEXT leaf holding already-escaped text."""
        return cls(GroupKind.TEXT, text=text, is_detachable=False)

    @classmethod
    def void(cls, kind: GroupKind, argument: Optional[str] = None) -> Element:
        """Create a void element such as a line break or rule."""
        return cls(kind, argument=argument, is_void=True)

    @property
    def is_broken(self) -> bool:
        """Whether this element renders as literal bracket syntax."""
        return self.broken is not None

    @property
    def is_text(self) -> bool:
        return self.kind is GroupKind.TEXT

    def append_child(self, child: Element) -> None:
        """Append a child element.

        Raises
        ------
        TreeInvariantError
            If this element is void or a text leaf.

        """
        if self.is_void:
            raise TreeInvariantError(f"cannot add children to void {self.kind.value} element", self.kind.value)
        if self.is_text:
            raise TreeInvariantError("cannot add children to a text element", self.kind.value)
        self.children.append(child)

    def add_text(self, text: str) -> None:
        """Append text to this element, merging with a trailing text leaf.

        Raises
        ------
        TreeInvariantError
            If this element is void.

        """
        if self.is_void:
            raise TreeInvariantError(f"cannot add text to void {self.kind.value} element", self.kind.value)
        if self.is_text:
            self.text = (self.text or "") + text
            return
        if self.children and self.children[-1].is_text:
            last = self.children[-1]
            last.text = (last.text or "") + text
        else:
            self.append_child(Element.text_node(text))

    def mark_broken(self, original_name: str) -> None:
        """Turn this element into a broken element rendered as literal syntax."""
        self.broken = BrokenInfo(self.kind, original_name)

    def plain_text(self) -> str:
        """Concatenate the text of all TEXT leaves below this element."""
        if self.is_text:
            return self.text or ""
        return "".join(child.plain_text() for child in self.children)

    def walk(self) -> Iterator[Element]:
        """Yield this element and all descendants in document order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to the matching visitor method."""
        if self.kind is GroupKind.DOCUMENT:
            return visitor.visit_document(self)
        if self.is_text:
            return visitor.visit_text(self)
        if self.is_broken:
            return visitor.visit_broken(self)
        return visitor.visit_element(self)
