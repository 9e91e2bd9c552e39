#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/options/__init__.py
"""Option dataclasses for the BBCode parser and HTML renderer."""

from bb2html.options.base import BaseParserOptions, BaseRendererOptions, CloneFrozenMixin
from bb2html.options.bbcode import BBCodeParserOptions
from bb2html.options.html import HtmlRendererOptions

__all__ = [
    "CloneFrozenMixin",
    "BaseParserOptions",
    "BaseRendererOptions",
    "BBCodeParserOptions",
    "HtmlRendererOptions",
]
