#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/parsers/bbcode.py
"""BBCode to element tree parser.

The :class:`TreeBuilder` turns the token stream into an element tree. It
keeps the open elements on a stack, the rightmost spine of the tree, so
the element receiving new content is always ``stack[-1]``.

The builder is tolerant. Invalid markup never raises, and each kind of
malformed input has a degraded rendering:

- Unknown tags and unmatched closing tags stay literal text.
- Tags with invalid arguments, or in invalid positions, become broken
  elements that render as their original bracket syntax.
- Mis-nested inline formatting is repaired. Closing ``[b]`` in
  ``[b][i]x[/b]y`` closes the italic too, then reopens it so ``y`` stays
  italic.

"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from bb2html.ast.nodes import Element, GroupKind
from bb2html.ast.visitors import validate_tree
from bb2html.exceptions import TreeInvariantError
from bb2html.options.bbcode import BBCodeParserOptions
from bb2html.parsers.base import BaseParser, ParserInput
from bb2html.parsers.tags import (
    CONSUMER_KINDS,
    IGNORE_FORMATTING_KINDS,
    IGNORE_TAGS_KINDS,
    NO_LINEBREAK_KINDS,
    ArgumentConsumer,
    ArgumentPolicy,
    CloseAction,
    OpenAction,
    TagRule,
    get_tag_rule,
    is_table_interior,
)
from bb2html.parsers.tokenizer import (
    LinebreakToken,
    ParagraphBreakToken,
    TagCloseToken,
    TagOpenToken,
    TextToken,
    Token,
    Tokenizer,
    UrlToken,
)

logger = logging.getLogger(__name__)

_VOID_ON_FILL = frozenset({ArgumentConsumer.IMAGE, ArgumentConsumer.ATTACHMENT, ArgumentConsumer.EMBED})
_NO_AUTOLINK_KINDS = frozenset({GroupKind.URL, GroupKind.EMAIL, GroupKind.IMAGE})


def _clean_argument(raw: Optional[str]) -> Optional[str]:
    """Strip the delimiter, surrounding whitespace and enclosing quotes from a raw argument.

    Returns None for a bare tag or a space-delimited empty argument; ``[tag=]``
    yields an empty string.
    """
    if raw is None:
        return None
    value = raw.strip()
    had_equals = value.startswith("=")
    if had_equals:
        value = value[1:].strip()
    if len(value) >= 12 and value.startswith("&quot;") and value.endswith("&quot;"):
        value = value[6:-6].strip()
    if not value and not had_equals:
        return None
    return value


class _Consumer:
    """Element waiting for the text that supplies its argument."""

    __slots__ = ("element", "rule", "name", "parts")

    def __init__(self, element: Element, rule: TagRule, name: str):
        self.element = element
        self.rule = rule
        self.name = name
        self.parts: list[str] = []


class TreeBuilder:
    """Build an element tree from BBCode tokens.

    Parameters
    ----------
    options : BBCodeParserOptions, optional
        Parsing options

    Attributes
    ----------
    attachments : list of int
        Attachment ids referenced by the last built tree, in order of appearance

    """

    def __init__(self, options: BBCodeParserOptions | None = None):
        """Initialize the builder."""
        self.options = options or BBCodeParserOptions()
        self._reset()

    def _reset(self) -> None:
        self.root = Element(GroupKind.DOCUMENT, is_detachable=False)
        self._stack: list[Element] = [self.root]
        self._names: dict[int, str] = {}
        self._consumer: Optional[_Consumer] = None
        self._pending_close: Optional[GroupKind] = None
        self.attachments: list[int] = []
        self._open(GroupKind.PARAGRAPH)

    def build(self, tokens: Iterable[Token]) -> Element:
        """Build a tree from ``tokens``.

        Parameters
        ----------
        tokens : iterable of Token
            Tokens produced by the tokenizer

        Returns
        -------
        Element
            DOCUMENT root of the finished tree

        Raises
        ------
        TreeInvariantError
            If the builder produced an invalid tree. This indicates a bug,
            not bad input.

        """
        self._reset()
        for token in tokens:
            self._process(token)
        self._finish_consumer()
        while len(self._stack) > 1:
            self._pop()

        root = self.root
        if self.options.validate_tree:
            validate_tree(root)
        return root

    # Derived state

    @property
    def _cursor(self) -> Element:
        return self._stack[-1]

    def _ignoring_kind(self) -> Optional[GroupKind]:
        for node in reversed(self._stack):
            if node.kind in IGNORE_TAGS_KINDS and not node.is_broken:
                return node.kind
        return None

    def _ignore_formatting(self) -> bool:
        return any(node.kind in IGNORE_FORMATTING_KINDS and not node.is_broken for node in self._stack)

    def _linebreaks_allowed(self) -> bool:
        return not any(node.kind in NO_LINEBREAK_KINDS and not node.is_broken for node in self._stack)

    def _at_depth_limit(self) -> bool:
        return len(self._stack) >= self.options.max_nesting_depth

    @staticmethod
    def _is_inline_node(node: Element) -> bool:
        # Broken elements are always opened inline, whatever their kind
        return node.is_broken or node.kind.is_inline

    def _at_block_start(self) -> bool:
        """Whether nothing has been written since the innermost block began."""
        stack = self._stack
        for index in range(len(stack) - 1, -1, -1):
            node = stack[index]
            above = stack[index + 1] if index + 1 < len(stack) else None
            if node.children and not (len(node.children) == 1 and node.children[0] is above):
                return False
            if not self._is_inline_node(node):
                return True
        return True

    # Stack operations

    def _open(self, kind: GroupKind, argument: Optional[str] = None, name: Optional[str] = None) -> Element:
        node = Element(kind, argument=argument)
        self._cursor.append_child(node)
        self._stack.append(node)
        if name is not None:
            self._names[id(node)] = name
        return node

    def _pop(self, explicit: bool = False) -> Element:
        node = self._stack.pop()
        if explicit:
            node.is_explicit = True

        while node.children and node.children[-1].kind is GroupKind.LINEBREAK:
            node.children.pop()

        if node.kind in CONSUMER_KINDS and node.argument is None and not node.is_broken:
            node.mark_broken(self._names.get(id(node), node.kind.value))
            node.is_detachable = False

        if self._is_prunable(node):
            parent = self._cursor
            if not parent.children or parent.children[-1] is not node:
                raise TreeInvariantError("closed element is not the last child of its parent", node.kind.value)
            parent.children.pop()
        return node

    def _is_prunable(self, node: Element) -> bool:
        if node.is_void or node.is_broken or not node.is_detachable:
            return False
        if node.kind is GroupKind.PARAGRAPH:
            return all(child.is_text and not (child.text or "").strip() for child in node.children)
        if self.options.preserve_empty:
            return False
        return not node.children

    def _close_above(self, index: int) -> list[Element]:
        """Close every element above ``stack[index]`` and return the inline ones to reopen."""
        collected: list[Element] = []
        while len(self._stack) - 1 > index:
            node = self._pop()
            if self._is_reopenable(node):
                collected.append(node)
        collected.reverse()
        return collected

    @staticmethod
    def _is_reopenable(node: Element) -> bool:
        if node.is_broken or not node.kind.is_inline:
            return False
        return not (node.kind in CONSUMER_KINDS and node.argument is None)

    def _reopen(self, templates: list[Element]) -> None:
        for template in templates:
            if self._at_depth_limit():
                break
            self._open(template.kind, argument=template.argument, name=self._names.get(id(template)))

    def _ensure_inline_context(self) -> None:
        cursor = self._cursor
        if cursor.kind.holds_blocks and not cursor.kind.is_structural and not cursor.is_broken:
            self._open(GroupKind.PARAGRAPH)

    def _break_to_block_level(self) -> list[Element]:
        collected: list[Element] = []
        while not self._cursor.kind.holds_blocks or self._cursor.is_broken:
            node = self._pop()
            if self._is_reopenable(node):
                collected.append(node)
        collected.reverse()
        return collected

    def _find_paragraph(self) -> Optional[int]:
        """Index of the paragraph reachable through inline elements only."""
        for index in range(len(self._stack) - 1, 0, -1):
            node = self._stack[index]
            if node.kind is GroupKind.PARAGRAPH:
                return index
            if not self._is_inline_node(node):
                return None
        return None

    def _find_list_item(self) -> Optional[int]:
        for index in range(len(self._stack) - 1, 0, -1):
            node = self._stack[index]
            if node.kind is GroupKind.LIST_ITEM and not node.is_broken:
                return index
            if not (self._is_inline_node(node) or node.kind is GroupKind.PARAGRAPH):
                return None
        return None

    def _find_table_parent(self, rule: TagRule) -> Optional[int]:
        for index in range(len(self._stack) - 1, 0, -1):
            node = self._stack[index]
            if node.kind in rule.parent_kinds and not node.is_broken:
                return index
            if not (self._is_inline_node(node) or node.kind is GroupKind.PARAGRAPH or is_table_interior(node.kind)):
                return None
        return None

    def _find_open(self, rule: TagRule) -> Optional[int]:
        inline_only = rule.close_action is CloseAction.INLINE
        for index in range(len(self._stack) - 1, 0, -1):
            node = self._stack[index]
            if node.kind is rule.kind and (node.kind is not GroupKind.HEADING or node.argument == rule.default_argument):
                return index
            if inline_only and not self._is_inline_node(node):
                return None
        return None

    # Token dispatch

    def _process(self, token: Token) -> None:
        if self._consumer is not None:
            if isinstance(token, (TextToken, UrlToken)):
                self._consumer.parts.append(token.to_source())
                return
            self._finish_consumer()

        pending_close, self._pending_close = self._pending_close, None
        if pending_close is not None:
            if isinstance(token, TagCloseToken):
                rule = get_tag_rule(token.name)
                if rule is not None and rule.kind is pending_close:
                    return
            elif isinstance(token, TextToken) and not token.text.strip():
                self._pending_close = pending_close

        if isinstance(token, TextToken):
            self._add_text(token.text)
        elif isinstance(token, UrlToken):
            self._add_url(token.url)
        elif isinstance(token, LinebreakToken):
            self._add_linebreak(token.raw)
        elif isinstance(token, ParagraphBreakToken):
            self._add_paragraph_break(token.raw)
        elif isinstance(token, TagOpenToken):
            self._open_tag(token)
        elif isinstance(token, TagCloseToken):
            self._close_tag(token)
        else:
            raise TreeInvariantError(f"unknown token type {type(token).__name__}")

    def _add_text(self, text: str) -> None:
        if self._cursor.kind.is_structural and not text.strip():
            return
        self._ensure_inline_context()
        self._cursor.add_text(text)

    def _add_literal(self, token: Token) -> None:
        self._add_text(token.to_source())

    def _add_url(self, url: str) -> None:
        if (
            self._ignore_formatting()
            or self._at_depth_limit()
            or any(node.kind in _NO_AUTOLINK_KINDS for node in self._stack)
        ):
            self._add_text(url)
            return
        self._ensure_inline_context()
        link = self._open(GroupKind.URL, argument=url, name="url")
        link.add_text(url)
        self._pop(explicit=True)

    def _add_linebreak(self, raw: str) -> None:
        if self._ignore_formatting():
            self._cursor.add_text(raw)
            return
        if self._at_block_start():
            return
        if not self._linebreaks_allowed():
            if not self._cursor.kind.is_structural:
                self._cursor.add_text(" ")
            return
        self._ensure_inline_context()
        self._cursor.append_child(Element.void(GroupKind.LINEBREAK))

    def _add_paragraph_break(self, raw: str) -> None:
        if self._ignore_formatting() or not self._linebreaks_allowed():
            self._add_linebreak(raw)
            return
        index = self._find_paragraph()
        if index is None:
            self._add_linebreak(raw)
            return
        collected = self._close_above(index)
        self._pop()
        self._open(GroupKind.PARAGRAPH)
        self._reopen(collected)

    # Argument consumers

    def _finish_consumer(self) -> None:
        consumer, self._consumer = self._consumer, None
        if consumer is None or not consumer.parts:
            return

        element, rule = consumer.element, consumer.rule
        text = "".join(consumer.parts)
        value = rule.validator(text) if rule.validator is not None else None
        if value is None:
            logger.debug("Invalid [%s] content %r; keeping it literal", consumer.name, text)
            element.mark_broken(consumer.name)
            element.add_text(text)
            return

        element.argument = value
        if rule.consumer in _VOID_ON_FILL:
            if element is not self._cursor:
                raise TreeInvariantError("filled element is not the open element", element.kind.value)
            element.is_void = True
            self._pop()
            self._pending_close = element.kind
            if rule.consumer is ArgumentConsumer.ATTACHMENT:
                self.attachments.append(int(value))
            if rule.open_action is OpenAction.BLOCK:
                self._open(GroupKind.PARAGRAPH)
        else:
            element.add_text(text)

    # Tags

    def _open_tag(self, token: TagOpenToken) -> None:
        rule = get_tag_rule(token.name)
        if rule is None or self._ignoring_kind() is not None:
            self._add_literal(token)
            return
        if self._at_depth_limit():
            logger.debug("Nesting depth limit reached; keeping [%s] literal", token.name)
            self._add_literal(token)
            return

        argument = _clean_argument(token.raw_argument)
        if argument is not None and rule.argument is ArgumentPolicy.NONE:
            self._add_literal(token)
            return
        if argument is None:
            if rule.argument is ArgumentPolicy.REQUIRED:
                self._open_broken(rule, token.name, None)
                return
            argument = rule.default_argument
        elif rule.validator is not None:
            validated = rule.validator(argument)
            if validated is None:
                logger.debug("Invalid argument %r for [%s]", argument, token.name)
                self._open_broken(rule, token.name, argument)
                return
            argument = validated or rule.default_argument

        if rule.open_action is OpenAction.INLINE:
            self._open_inline(rule, token.name, argument)
        elif rule.open_action is OpenAction.BLOCK:
            self._open_block(rule, token.name, argument)
        elif rule.open_action is OpenAction.SPLIT:
            self._split_paragraph(rule)
        elif rule.open_action is OpenAction.LIST_ITEM:
            self._open_list_item(rule, token.name)
        else:
            self._open_table_part(rule, token.name)

    def _open_broken(self, rule: TagRule, name: str, argument: Optional[str]) -> None:
        self._ensure_inline_context()
        node = self._open(rule.kind, argument=argument, name=name)
        node.mark_broken(name)

    def _start_consumer(self, node: Element, rule: TagRule, name: str) -> None:
        if rule.consumer is not None and node.argument is None:
            self._consumer = _Consumer(node, rule, name)

    def _open_inline(self, rule: TagRule, name: str, argument: Optional[str]) -> None:
        self._ensure_inline_context()
        node = self._open(rule.kind, argument=argument, name=name)
        self._start_consumer(node, rule, name)

    def _open_block(self, rule: TagRule, name: str, argument: Optional[str]) -> None:
        collected = self._break_to_block_level()
        node = self._open(rule.kind, argument=argument, name=name)
        self._start_consumer(node, rule, name)
        if rule.inner_paragraph:
            self._open(GroupKind.PARAGRAPH)
        if rule.reopen:
            self._reopen(collected)

    def _split_paragraph(self, rule: TagRule) -> None:
        index = self._find_paragraph()
        if index is None:
            self._cursor.append_child(Element.void(rule.kind))
            return
        collected = self._close_above(index)
        self._pop()
        self._cursor.append_child(Element.void(rule.kind))
        self._open(GroupKind.PARAGRAPH)
        self._reopen(collected)

    def _open_list_item(self, rule: TagRule, name: str) -> None:
        cursor = self._cursor
        if cursor.kind is not GroupKind.LIST or cursor.is_broken:
            index = self._find_list_item()
            if index is None:
                logger.debug("[%s] outside of a list", name)
                self._ensure_inline_context()
                stray = Element.void(rule.kind)
                stray.mark_broken(name)
                self._cursor.append_child(stray)
                return
            while len(self._stack) > index:
                self._pop()
        self._open(rule.kind, name=name)
        self._open(GroupKind.PARAGRAPH)

    def _open_table_part(self, rule: TagRule, name: str) -> None:
        index = self._find_table_parent(rule)
        if index is None:
            logger.debug("[%s] outside of its table context", name)
            self._open_broken(rule, name, None)
            return
        while len(self._stack) - 1 > index:
            self._pop()
        self._open(rule.kind, name=name)
        if rule.inner_paragraph:
            self._open(GroupKind.PARAGRAPH)

    def _close_tag(self, token: TagCloseToken) -> None:
        rule = get_tag_rule(token.name)
        ignoring = self._ignoring_kind()
        if rule is None or (ignoring is not None and rule.kind is not ignoring):
            self._add_literal(token)
            return

        if rule.close_action is CloseAction.CONSUME:
            return
        if rule.close_action is CloseAction.LIST_ITEM:
            if self._find_list_item() is None:
                self._add_literal(token)
            return

        index = self._find_open(rule)
        if index is None:
            logger.debug("Unmatched closing tag [/%s]", token.name)
            self._add_literal(token)
            return

        node = self._stack[index]
        collected = self._close_above(index)
        self._pop(explicit=True)
        if node.is_broken or rule.close_action is CloseAction.INLINE:
            self._reopen(collected)
        elif rule.new_paragraph_after and not self._cursor.kind.is_structural:
            self._open(GroupKind.PARAGRAPH)
            self._reopen(collected)


class BBCodeParser(BaseParser):
    """Parse BBCode into an element tree.

    Parameters
    ----------
    options : BBCodeParserOptions or None, default = None
        Parsing options

    Attributes
    ----------
    attachments : list of int
        Attachment ids referenced by the most recently parsed input

    Examples
    --------
        >>> tree = BBCodeParser().parse("[b]Hello[/b]")
        >>> tree.children[0].children[0].kind
        <GroupKind.BOLD: 'bold'>

    """

    def __init__(self, options: BBCodeParserOptions | None = None):
        """Initialize the parser."""
        BaseParser._validate_options_type(options, BBCodeParserOptions, "bbcode")
        options = options or BBCodeParserOptions()
        super().__init__(options)
        self.options: BBCodeParserOptions = options
        self._tokenizer = Tokenizer(
            blank_line_paragraphs=options.blank_line_paragraphs,
            autolink=options.autolink,
        )
        self._builder = TreeBuilder(options)
        self.attachments: list[int] = []

    def tokenize(self, input_data: ParserInput) -> list[Token]:
        """Tokenize input without building a tree."""
        return self._tokenizer.tokenize(self._load_text_content(input_data))

    def parse(self, input_data: ParserInput) -> Element:
        """Parse BBCode into an element tree.

        Parameters
        ----------
        input_data : str, bytes, Path or file-like object
            BBCode markup. A str is always treated as markup.

        Returns
        -------
        Element
            DOCUMENT root of the tree

        """
        tree = self._builder.build(self.tokenize(input_data))
        self.attachments = list(self._builder.attachments)
        logger.debug("Parsed BBCode into %d top-level elements", len(tree.children))
        return tree
