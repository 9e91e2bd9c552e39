"""bb2html - a tolerant BBCode to HTML converter.

bb2html turns forum-style BBCode into safe HTML fragments. Conversion runs
in three stages:

1. The tokenizer splits the source into text, URL, break and tag tokens,
   escaping all text exactly once.
2. The tree builder assembles an element tree, repairing mis-nested
   formatting and demoting invalid tags to literal text.
3. The HTML renderer walks the tree and substitutes smilies and
   caller-supplied attachment data.

Malformed input never raises. Anything that cannot be converted is shown
as escaped literal text.

Examples
--------
Basic usage:

    >>> from bb2html import bbcode_to_html
    >>> bbcode_to_html("[b]Bold[/b] and [color=red]red[/color]")
    '<p><b>Bold</b> and <span style="color:red">red</span></p>'

Working with the tree directly:

    >>> from bb2html import parse_bbcode, render_html, collect_attachment_ids
    >>> tree = parse_bbcode("[attach]42[/attach]")
    >>> collect_attachment_ids(tree)
    [42]
    >>> html = render_html(tree, attachments=[{"id": 42, "download_url": "/a/42"}])

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "bb2html requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "0.1.0"

from bb2html.api import bbcode_to_html, collect_attachment_ids, parse_bbcode, render_html, tokenize  # noqa: E402
from bb2html.ast.nodes import Element, GroupKind  # noqa: E402
from bb2html.exceptions import (  # noqa: E402
    Bb2HtmlError,
    InvalidOptionsError,
    RenderingError,
    TreeInvariantError,
    ValidationError,
)
from bb2html.options import BBCodeParserOptions, HtmlRendererOptions  # noqa: E402
from bb2html.utils.attachments import AttachmentView  # noqa: E402
from bb2html.utils.smilies import SmileyTable  # noqa: E402

__all__ = [
    "__version__",
    "bbcode_to_html",
    "parse_bbcode",
    "render_html",
    "tokenize",
    "collect_attachment_ids",
    "Element",
    "GroupKind",
    "BBCodeParserOptions",
    "HtmlRendererOptions",
    "AttachmentView",
    "SmileyTable",
    "Bb2HtmlError",
    "ValidationError",
    "InvalidOptionsError",
    "RenderingError",
    "TreeInvariantError",
]
