#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/options/bbcode.py
"""Configuration options for BBCode parsing."""

from __future__ import annotations

from dataclasses import dataclass, field

from bb2html.constants import (
    DEFAULT_AUTOLINK,
    DEFAULT_BLANK_LINE_PARAGRAPHS,
    DEFAULT_MAX_NESTING_DEPTH,
    DEFAULT_PRESERVE_EMPTY,
    DEFAULT_VALIDATE_TREE,
    MAX_NESTING_DEPTH_LIMIT,
    MIN_NESTING_DEPTH,
)
from bb2html.options.base import BaseParserOptions


@dataclass(frozen=True)
class BBCodeParserOptions(BaseParserOptions):
    """Configuration options for BBCode-to-tree parsing.

    Parameters
    ----------
    preserve_empty : bool, default False
        Keep elements that end up with no content (``[b][/b]``). Empty
        paragraphs are removed regardless.
    blank_line_paragraphs : bool, default False
        Treat two or more consecutive line endings as a paragraph break.
        When False, every line ending is a line break and only a line ending
        followed by a tab starts a new paragraph.
    autolink : bool, default True
        Turn bare ``http://`` and ``https://`` URLs in text into links.
    max_nesting_depth : int, default 100
        Maximum depth of open elements. Opening tags past this depth are
        kept as literal text.
    validate_tree : bool, default False
        Run the tree validator over every finished tree. Violations raise
        TreeInvariantError.

    """

    preserve_empty: bool = field(
        default=DEFAULT_PRESERVE_EMPTY,
        metadata={"help": "Keep elements that have no content", "importance": "advanced"},
    )
    blank_line_paragraphs: bool = field(
        default=DEFAULT_BLANK_LINE_PARAGRAPHS,
        metadata={"help": "Start a new paragraph at blank lines", "importance": "core"},
    )
    autolink: bool = field(
        default=DEFAULT_AUTOLINK,
        metadata={"help": "Link bare http(s) URLs found in text", "importance": "core"},
    )
    max_nesting_depth: int = field(
        default=DEFAULT_MAX_NESTING_DEPTH,
        metadata={"help": "Maximum element nesting depth", "type": int, "importance": "security"},
    )
    validate_tree: bool = field(
        default=DEFAULT_VALIDATE_TREE,
        metadata={"help": "Check tree invariants after building", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate numeric ranges.

        Raises
        ------
        ValueError
            If max_nesting_depth is outside the supported range.

        """
        super().__post_init__()
        if not MIN_NESTING_DEPTH <= self.max_nesting_depth <= MAX_NESTING_DEPTH_LIMIT:
            raise ValueError(
                f"max_nesting_depth must be between {MIN_NESTING_DEPTH} and {MAX_NESTING_DEPTH_LIMIT}, "
                f"got {self.max_nesting_depth}"
            )
