#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/cli/output.py
"""Utility functions for CLI output."""

from __future__ import annotations

import argparse
import io
import sys
from typing import IO, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text
from rich.tree import Tree

from bb2html.ast.nodes import Element

_TEXT_PREVIEW_LENGTH = 60


def should_use_rich_output(args: argparse.Namespace, stream: Optional[IO[str]] = None) -> bool:
    """Determine if Rich output should be used based on TTY and args.

    Rich output is used when the ``--rich`` flag is set and the target
    stream is a terminal.
    """
    if not args.rich:
        return False

    target = stream or sys.stdout
    isatty = getattr(target, "isatty", None)
    if callable(isatty):
        try:
            return bool(isatty())
        except ValueError:
            # Closed stream
            return False
    return False


def _node_label(node: Element) -> Text:
    if node.is_text:
        text = node.text or ""
        if len(text) > _TEXT_PREVIEW_LENGTH:
            text = text[: _TEXT_PREVIEW_LENGTH - 3] + "..."
        return Text(repr(text), style="green")

    label = Text(node.kind.value, style="bold cyan")
    if node.argument is not None:
        label.append(f" = {node.argument!r}", style="yellow")
    if node.broken is not None:
        label.append(f" (broken [{node.broken.original_name}])", style="red")
    if node.is_void:
        label.append(" (void)", style="dim")
    return label


def build_rich_tree(root: Element) -> Tree:
    """Build a :class:`rich.tree.Tree` mirroring the element tree."""
    tree = Tree(_node_label(root))
    pending: list[tuple[Element, Tree]] = [(root, tree)]
    while pending:
        node, branch = pending.pop()
        for child in node.children:
            pending.append((child, branch.add(_node_label(child))))
    return tree


def format_tree_text(root: Element, width: int = 100) -> str:
    """Render the rich tree view to plain text, for writing to a file."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=width, color_system=None, force_terminal=False)
    console.print(build_rich_tree(root))
    return buffer.getvalue()


def print_tree(root: Element, console: Optional[Console] = None) -> None:
    """Print the tree view to the console."""
    (console or Console()).print(build_rich_tree(root))


def print_highlighted(content: str, lexer: str, console: Optional[Console] = None) -> None:
    """Print syntax-highlighted HTML or JSON."""
    (console or Console()).print(Syntax(content, lexer, word_wrap=True))
