#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/api.py
"""The major exported API functions for BBCode conversion."""

from __future__ import annotations

import logging
from dataclasses import fields
from typing import Any, Mapping, Optional

from bb2html.ast.nodes import Element
from bb2html.options.bbcode import BBCodeParserOptions
from bb2html.options.html import HtmlRendererOptions
from bb2html.parsers.base import ParserInput
from bb2html.parsers.bbcode import BBCodeParser
from bb2html.parsers.tokenizer import tokenize
from bb2html.renderers.html import AttachmentSource, HtmlRenderer
from bb2html.utils.attachments import collect_attachment_ids
from bb2html.utils.smilies import SmileySource

logger = logging.getLogger(__name__)

__all__ = [
    "bbcode_to_html",
    "parse_bbcode",
    "render_html",
    "tokenize",
    "collect_attachment_ids",
]


def _split_kwargs_for_parser_and_renderer(kwargs: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split keyword overrides between parser and renderer options by field name.

    Raises
    ------
    TypeError
        If a keyword matches neither options class.

    """
    parser_fields = {f.name for f in fields(BBCodeParserOptions)}
    renderer_fields = {f.name for f in fields(HtmlRendererOptions)}

    parser_kwargs: dict[str, Any] = {}
    renderer_kwargs: dict[str, Any] = {}
    unmatched: list[str] = []
    for key, value in kwargs.items():
        if key in parser_fields:
            parser_kwargs[key] = value
        elif key in renderer_fields:
            renderer_kwargs[key] = value
        else:
            unmatched.append(key)

    if unmatched:
        raise TypeError(f"Unknown option(s): {', '.join(sorted(unmatched))}")
    return parser_kwargs, renderer_kwargs


def _merge_options(options: Any, options_class: type, overrides: dict[str, Any]) -> Any:
    if not overrides:
        return options
    if options is None:
        return options_class(**overrides)
    return options.create_updated(**overrides)


def parse_bbcode(
    source: ParserInput,
    options: Optional[BBCodeParserOptions] = None,
    **kwargs: Any,
) -> Element:
    """Parse BBCode into an element tree.

    Parameters
    ----------
    source : str, bytes, Path or file-like object
        BBCode markup. A str is always treated as markup, never as a path.
    options : BBCodeParserOptions, optional
        Pre-configured parser options
    kwargs : Any
        Individual parser options that override settings in ``options``

    Returns
    -------
    Element
        DOCUMENT root of the tree

    Examples
    --------
        >>> tree = parse_bbcode("[quote=Bob]Hi[/quote]")
        >>> tree.children[0].kind, tree.children[0].argument
        (<GroupKind.QUOTE: 'quote'>, 'Bob')

    """
    options = _merge_options(options, BBCodeParserOptions, kwargs)
    return BBCodeParser(options).parse(source)


def render_html(
    tree: Element,
    *,
    smilies: SmileySource | None = None,
    attachments: AttachmentSource | None = None,
    embeds: Mapping[str, str] | None = None,
    options: Optional[HtmlRendererOptions] = None,
    **kwargs: Any,
) -> str:
    """Render an element tree to HTML.

    Parameters
    ----------
    tree : Element
        DOCUMENT root produced by :func:`parse_bbcode`
    smilies : SmileyTable, Mapping or iterable of (code, markup) pairs, optional
        Smiley codes and their trusted replacement markup
    attachments : Mapping[int, AttachmentView] or iterable of records, optional
        Attachment data for the ids returned by :func:`collect_attachment_ids`
    embeds : Mapping[str, str], optional
        Trusted markup for ``[embed]`` elements, keyed by URL
    options : HtmlRendererOptions, optional
        Pre-configured renderer options
    kwargs : Any
        Individual renderer options that override settings in ``options``

    Returns
    -------
    str
        HTML fragment

    Raises
    ------
    RenderingError
        If ``fail_on_resource_errors`` is set and attachment data is missing

    """
    options = _merge_options(options, HtmlRendererOptions, kwargs)
    renderer = HtmlRenderer(options, smilies=smilies, attachments=attachments, embeds=embeds)
    return renderer.render_to_string(tree)


def bbcode_to_html(
    source: ParserInput,
    *,
    parser_options: Optional[BBCodeParserOptions] = None,
    renderer_options: Optional[HtmlRendererOptions] = None,
    smilies: SmileySource | None = None,
    attachments: AttachmentSource | None = None,
    embeds: Mapping[str, str] | None = None,
    **kwargs: Any,
) -> str:
    """Convert BBCode to an HTML fragment.

    Malformed markup never raises. Unknown tags, unmatched closers and tags
    with invalid arguments are rendered as escaped literal text.

    Parameters
    ----------
    source : str, bytes, Path or file-like object
        BBCode markup. A str is always treated as markup, never as a path.
    parser_options : BBCodeParserOptions, optional
        Pre-configured parser options
    renderer_options : HtmlRendererOptions, optional
        Pre-configured renderer options
    smilies : SmileyTable, Mapping or iterable of (code, markup) pairs, optional
        Smiley codes and their trusted replacement markup
    attachments : Mapping[int, AttachmentView] or iterable of records, optional
        Attachment data keyed by id
    embeds : Mapping[str, str], optional
        Trusted markup for ``[embed]`` elements, keyed by URL
    kwargs : Any
        Individual parser or renderer options, routed by field name

    Returns
    -------
    str
        HTML fragment

    Raises
    ------
    TypeError
        If a keyword option matches no parser or renderer field
    RenderingError
        If ``fail_on_resource_errors`` is set and attachment data is missing

    Examples
    --------
        >>> bbcode_to_html("[b]Hello[/b] [i]world[/i]")
        '<p><b>Hello</b> <i>world</i></p>'
        >>> bbcode_to_html("[b]Hello[/b]", paragraphs=False)
        '<b>Hello</b>'

    """
    parser_kwargs, renderer_kwargs = _split_kwargs_for_parser_and_renderer(kwargs)
    tree = parse_bbcode(source, parser_options, **parser_kwargs)
    if logger.isEnabledFor(logging.DEBUG) and attachments is None:
        referenced = collect_attachment_ids(tree)
        if referenced:
            logger.debug("Tree references attachments %s but no attachment data was given", referenced)
    return render_html(
        tree,
        smilies=smilies,
        attachments=attachments,
        embeds=embeds,
        options=renderer_options,
        **renderer_kwargs,
    )
