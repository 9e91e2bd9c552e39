#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/parsers/__init__.py
"""Tokenizer, tag rules and tree builder for BBCode."""

from bb2html.parsers.base import BaseParser
from bb2html.parsers.bbcode import BBCodeParser, TreeBuilder
from bb2html.parsers.tags import TAG_RULES, TagRule
from bb2html.parsers.tokenizer import (
    LinebreakToken,
    ParagraphBreakToken,
    TagCloseToken,
    TagOpenToken,
    TextToken,
    Token,
    Tokenizer,
    UrlToken,
    tokenize,
)

__all__ = [
    "BaseParser",
    "BBCodeParser",
    "TreeBuilder",
    "TAG_RULES",
    "TagRule",
    "Token",
    "TextToken",
    "UrlToken",
    "LinebreakToken",
    "ParagraphBreakToken",
    "TagOpenToken",
    "TagCloseToken",
    "Tokenizer",
    "tokenize",
]
