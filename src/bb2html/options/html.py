#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/options/html.py
"""Configuration options for HTML rendering."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from bb2html.constants import DEFAULT_LINK_REL, DEFAULT_PARAGRAPHS, DEFAULT_PRETTY_PRINT, DEFAULT_SMILIES_IN_CODE
from bb2html.options.base import BaseRendererOptions

_LINK_REL_PATTERN = re.compile(r"^[a-z]+(?: [a-z]+)*$")


@dataclass(frozen=True)
class HtmlRendererOptions(BaseRendererOptions):
    """Configuration options for tree-to-HTML rendering.

    Parameters
    ----------
    paragraphs : bool, default True
        Wrap paragraph elements in ``<p>`` tags. When False, paragraph
        content is emitted bare.
    pretty_print : bool, default False
        Hide the literal bracket syntax of broken tags and keep only their
        content.
    link_rel : str, default "nofollow"
        Value of the ``rel`` attribute on ``[url]`` links. An empty string
        omits the attribute.
    smilies_in_code : bool, default False
        Also substitute smilies inside code, math, pre and link text.

    """

    paragraphs: bool = field(
        default=DEFAULT_PARAGRAPHS,
        metadata={"help": "Wrap paragraphs in <p> tags", "importance": "core"},
    )
    pretty_print: bool = field(
        default=DEFAULT_PRETTY_PRINT,
        metadata={"help": "Hide the bracket syntax of broken tags", "importance": "core"},
    )
    link_rel: str = field(
        default=DEFAULT_LINK_REL,
        metadata={"help": "rel attribute for [url] links (empty to omit)", "importance": "advanced"},
    )
    smilies_in_code: bool = field(
        default=DEFAULT_SMILIES_IN_CODE,
        metadata={"help": "Substitute smilies inside code and link text", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate the rel value.

        Raises
        ------
        ValueError
            If link_rel contains anything other than space-separated lowercase keywords.

        """
        super().__post_init__()
        if self.link_rel and not _LINK_REL_PATTERN.match(self.link_rel):
            raise ValueError(f"link_rel must be space-separated lowercase keywords, got {self.link_rel!r}")
