#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/renderers/html.py
"""HTML rendering from the element tree.

The renderer walks the tree depth-first and appends markup to an output
list. Every kind maps to a fixed opening and closing string; kinds with an
argument interpolate the pre-validated value. Text leaves are checked with
:func:`escape_unescaped` and then get smiley substitution.

Attachment and embed elements only carry a reference. Their markup comes
from data the caller supplies: :class:`AttachmentView` records and trusted
embed fragments.

"""

from __future__ import annotations

import logging
from html import unescape
from typing import Any, Iterable, Mapping, Optional, Union

from bb2html.ast.nodes import Element, GroupKind
from bb2html.ast.visitors import NodeVisitor
from bb2html.constants import ORDERED_LIST_TYPES, UNORDERED_LIST_TYPES
from bb2html.exceptions import RenderingError
from bb2html.options.html import HtmlRendererOptions
from bb2html.parsers.tags import LITERAL_TEXT_KINDS
from bb2html.renderers.base import BaseRenderer
from bb2html.utils.attachments import AttachmentView, load_attachment_views
from bb2html.utils.escape import escape_unescaped
from bb2html.utils.smilies import SmileySource, as_smiley_table

logger = logging.getLogger(__name__)

AttachmentSource = Union[Mapping[int, AttachmentView], Iterable[Union[AttachmentView, Mapping[str, Any]]]]

_SIMPLE_MARKUP: dict[GroupKind, tuple[str, str]] = {
    GroupKind.BOLD: ("<b>", "</b>"),
    GroupKind.STRONG: ("<strong>", "</strong>"),
    GroupKind.ITALIC: ("<i>", "</i>"),
    GroupKind.EMPHASIS: ("<em>", "</em>"),
    GroupKind.UNDERLINE: ('<span class="underline">', "</span>"),
    GroupKind.STRIKETHROUGH: ("<s>", "</s>"),
    GroupKind.SMALLCAPS: ('<span class="smallcaps">', "</span>"),
    GroupKind.MONOSPACE: ('<span class="monospace">', "</span>"),
    GroupKind.SUBSCRIPT: ("<sub>", "</sub>"),
    GroupKind.SUPERSCRIPT: ("<sup>", "</sup>"),
    GroupKind.SPOILER: ('<span class="spoiler">', "</span>"),
    GroupKind.CENTER: ('<div class="center">', "</div>"),
    GroupKind.RIGHT: ('<div class="right">', "</div>"),
    GroupKind.PRE: ("<pre>", "</pre>"),
    GroupKind.PRE_LINE: ('<span class="pre-line">', "</span>"),
    GroupKind.CODE: ("<code>", "</code>"),
    GroupKind.MATH: ('<span class="math_container">', "</span>"),
    GroupKind.MATH_BLOCK: ('<div class="math_container">', "</div>"),
    GroupKind.LIST_ITEM: ("<li>", "</li>"),
    GroupKind.TABLE: ("<table>", "</table>"),
    GroupKind.TABLE_ROW: ("<tr>", "</tr>"),
    GroupKind.TABLE_HEADER: ("<th>", "</th>"),
    GroupKind.TABLE_DATA: ("<td>", "</td>"),
    GroupKind.TABLE_CAPTION: ("<caption>", "</caption>"),
    GroupKind.PLAIN: ("", ""),
}

# Markup for kinds that interpolate their argument
_ARGUMENT_MARKUP: dict[GroupKind, tuple[str, str]] = {
    GroupKind.COLOUR: ('<span style="color:{arg}">', "</span>"),
    GroupKind.OPACITY: ('<span style="opacity:{arg}">', "</span>"),
    GroupKind.SIZE: ('<span style="font-size:{arg}rem">', "</span>"),
    GroupKind.EMAIL: ('<a href="{arg}">', "</a>"),
    GroupKind.FIGURE: ('<figure class="figure-{arg}">', "</figure>"),
    GroupKind.INDENT: ('<div class="indent-{arg}">', "</div>"),
    GroupKind.HEADING: ("<h{arg}>", "</h{arg}>"),
}

# Markup for kinds whose argument is optional: (with argument, without argument, closing)
_OPTIONAL_ARGUMENT_MARKUP: dict[GroupKind, tuple[str, str, str]] = {
    GroupKind.QUOTE: ('<blockquote data-author="{arg}">', "<blockquote>", "</blockquote>"),
    GroupKind.FOOTNOTE: ('<span class="footnote" data-symbol="{arg}">', '<span class="footnote">', "</span>"),
    GroupKind.CODE_BLOCK: ('<pre data-language="{arg}">', "<pre>", "</pre>"),
}


class HtmlRenderer(NodeVisitor, BaseRenderer):
    """Render an element tree to an HTML fragment.

    Parameters
    ----------
    options : HtmlRendererOptions or None, default = None
        Rendering options
    smilies : SmileyTable, Mapping or iterable of (code, markup) pairs, optional
        Smiley codes and their trusted replacement markup
    attachments : Mapping[int, AttachmentView] or iterable of records, optional
        Attachment data for ``[attach]`` elements
    embeds : Mapping[str, str], optional
        Trusted markup for ``[embed]`` elements, keyed by URL

    Examples
    --------
        >>> from bb2html.parsers.bbcode import BBCodeParser
        >>> tree = BBCodeParser().parse("[b]Hi[/b] :)")
        >>> HtmlRenderer(smilies={":)": "&#x1F642;"}).render_to_string(tree)
        '<p><b>Hi</b> &#x1F642;</p>'

    """

    def __init__(
        self,
        options: HtmlRendererOptions | None = None,
        smilies: SmileySource | None = None,
        attachments: AttachmentSource | None = None,
        embeds: Mapping[str, str] | None = None,
    ):
        """Initialize the HTML renderer."""
        BaseRenderer._validate_options_type(options, HtmlRendererOptions, "html")
        options = options or HtmlRendererOptions()
        BaseRenderer.__init__(self, options)
        self.options: HtmlRendererOptions = options
        self.smilies = as_smiley_table(smilies)
        if attachments is None:
            self.attachments: dict[int, AttachmentView] = {}
        elif isinstance(attachments, Mapping):
            self.attachments = {int(key): value for key, value in attachments.items()}
        else:
            self.attachments = load_attachment_views(attachments)
        self.embeds: dict[str, str] = dict(embeds or {})
        self._output: list[str] = []
        self._literal_depth = 0

    def render_to_string(self, document: Element) -> str:
        """Render the tree to an HTML string.

        Parameters
        ----------
        document : Element
            DOCUMENT root to render

        Returns
        -------
        str
            HTML fragment

        Raises
        ------
        RenderingError
            If ``fail_on_resource_errors`` is set and attachment data is missing

        """
        self._output = []
        self._literal_depth = 0
        document.accept(self)
        return "".join(self._output)

    # Visitor methods

    def visit_document(self, node: Element) -> None:
        """Render the root's children."""
        self.generic_visit(node)

    def visit_text(self, node: Element) -> None:
        """Render escaped text with smilies substituted."""
        text = escape_unescaped(node.text or "")
        if self._literal_depth == 0 or self.options.smilies_in_code:
            text = self.smilies.replace(text)
        self._output.append(text)

    def visit_broken(self, node: Element) -> None:
        """Render a broken element as its literal bracket syntax around its content."""
        show_syntax = not self.options.pretty_print
        name = node.broken.original_name if node.broken is not None else node.kind.value
        if show_syntax:
            if node.argument is not None:
                self._output.append(f"[{name}={escape_unescaped(node.argument)}]")
            else:
                self._output.append(f"[{name}]")
        self.generic_visit(node)
        if show_syntax and node.is_explicit and not node.is_void:
            self._output.append(f"[/{name}]")

    def visit_element(self, node: Element) -> None:
        """Render a regular element."""
        kind = node.kind
        if kind is GroupKind.LINEBREAK:
            self._output.append("<br />")
        elif kind is GroupKind.HORIZONTAL_RULE:
            self._output.append("<hr />")
        elif kind is GroupKind.IMAGE:
            self._output.append(f'<img src="{self._argument(node)}" />')
        elif kind is GroupKind.ATTACHMENT:
            self._render_attachment(node)
        elif kind is GroupKind.EMBED:
            self._render_embed(node)
        else:
            opening, closing = self._markup_for(node)
            self._output.append(opening)
            literal = kind in LITERAL_TEXT_KINDS
            if literal:
                self._literal_depth += 1
            try:
                self.generic_visit(node)
            finally:
                if literal:
                    self._literal_depth -= 1
            self._output.append(closing)

    # Helpers

    @staticmethod
    def _argument(node: Element) -> str:
        return escape_unescaped(node.argument or "")

    def _markup_for(self, node: Element) -> tuple[str, str]:
        kind = node.kind
        if kind is GroupKind.PARAGRAPH:
            return ("<p>", "</p>") if self.options.paragraphs else ("", "")
        if kind in _SIMPLE_MARKUP:
            return _SIMPLE_MARKUP[kind]

        arg = self._argument(node)
        if kind is GroupKind.URL:
            rel = self.options.link_rel
            return (f'<a href="{arg}" rel="{rel}">' if rel else f'<a href="{arg}">'), "</a>"
        if kind is GroupKind.LIST:
            if arg in ORDERED_LIST_TYPES:
                return f'<ol type="{arg}">', "</ol>"
            if arg in UNORDERED_LIST_TYPES:
                return f'<ul style="list-style-type:{arg}">', "</ul>"
            return "<ul>", "</ul>"
        if kind in _ARGUMENT_MARKUP:
            opening, closing = _ARGUMENT_MARKUP[kind]
            return opening.format(arg=arg), closing.format(arg=arg)
        if kind in _OPTIONAL_ARGUMENT_MARKUP:
            with_arg, without_arg, closing = _OPTIONAL_ARGUMENT_MARKUP[kind]
            return (with_arg.format(arg=arg) if arg else without_arg), closing

        logger.warning("No HTML markup for element kind %s; rendering content only", kind.value)
        return "", ""

    def _missing_resource(self, message: str, stage: str) -> None:
        if self.options.fail_on_resource_errors:
            raise RenderingError(message, rendering_stage=stage)
        logger.warning(message)

    def _render_attachment(self, node: Element) -> None:
        attachment_id = int(node.argument or 0)
        view = self.attachments.get(attachment_id)
        if view is None:
            self._missing_resource(f"No attachment data for id {attachment_id}; omitting it", "attachment")
            return
        self._output.append(view.to_html())

    def _render_embed(self, node: Element) -> None:
        arg = self._argument(node)
        content: Optional[str] = self.embeds.get(unescape(arg))
        self._output.append(f'<div class="embed" data-content="{arg}">')
        if content is not None:
            self._output.append(content)
        self._output.append("</div>")
