#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/renderers/__init__.py
"""Renderers that turn element trees into output markup."""

from bb2html.renderers.base import BaseRenderer
from bb2html.renderers.html import HtmlRenderer

__all__ = ["BaseRenderer", "HtmlRenderer"]
