"""Pytest configuration and shared fixtures for the bb2html test suite.

This module provides shared fixtures, test configuration, and utilities
that are used across the entire test suite.
"""

import os
from typing import Callable

import pytest
from hypothesis import HealthCheck, Phase, Verbosity, settings

from bb2html.options import HtmlRendererOptions
from bb2html.parsers.bbcode import BBCodeParser
from bb2html.renderers.html import HtmlRenderer
from bb2html.utils.attachments import AttachmentView
from bb2html.utils.smilies import SmileyTable

# Register custom Hypothesis profiles
settings.register_profile(
    "ci", max_examples=300, verbosity=Verbosity.verbose, suppress_health_check=[HealthCheck.too_slow]
)
settings.register_profile("dev", max_examples=50)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - full pipeline tests")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")
    config.addinivalue_line("markers", "fuzzing: Property-based tests driven by hypothesis")
    config.addinivalue_line("markers", "security: Tests for escaping and injection resistance")


@pytest.fixture
def smiley_table() -> SmileyTable:
    """Provide a small smiley table with overlapping codes.

    Returns
    -------
    SmileyTable
        ``:c``, ``cookie`` and ``ookie`` mapped to emoji

    """
    return SmileyTable([(":c", "\u2639\ufe0f"), ("cookie", "\U0001f36a"), ("ookie", "\U0001f922")])


@pytest.fixture
def attachment_views() -> dict[int, AttachmentView]:
    """Provide one image attachment and one plain file attachment."""
    return {
        7: AttachmentView(
            id=7, download_url="/attachments/7/cat.png", filename="cat.png", mime="image/png", dimensions=(640, 480)
        ),
        8: AttachmentView(id=8, download_url="/attachments/8/notes.txt", filename="notes.txt", mime="text/plain"),
    }


@pytest.fixture
def render() -> Callable[..., str]:
    """Provide a parse-and-render helper.

    The helper takes BBCode plus keyword options and returns the HTML.
    Options are routed to the renderer, except ``parser_options``.

    """

    def _render(source: str, *, parser_options=None, smilies=None, attachments=None, embeds=None, **options) -> str:
        tree = BBCodeParser(parser_options).parse(source)
        renderer = HtmlRenderer(
            HtmlRendererOptions(**options),
            smilies=smilies,
            attachments=attachments,
            embeds=embeds,
        )
        return renderer.render_to_string(tree)

    return _render


@pytest.fixture
def render_bare(render) -> Callable[..., str]:
    """Like ``render`` but without paragraph wrapping."""

    def _render(source: str, **kwargs) -> str:
        kwargs.setdefault("paragraphs", False)
        return render(source, **kwargs)

    return _render
