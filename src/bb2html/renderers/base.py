#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/renderers/base.py
"""Base class for element tree renderers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Union

from bb2html.ast.nodes import Element
from bb2html.exceptions import InvalidOptionsError
from bb2html.options.base import BaseRendererOptions

RenderOutput = Union[str, Path, IO[str], IO[bytes]]


class BaseRenderer(ABC):
    """Abstract base class for renderers.

    Parameters
    ----------
    options : BaseRendererOptions or None, default = None
        Format-specific rendering options

    """

    def __init__(self, options: BaseRendererOptions | None = None):
        """Initialize the renderer with optional configuration."""
        self.options = options

    @staticmethod
    def _validate_options_type(options: BaseRendererOptions | None, expected_type: type, renderer_name: str) -> None:
        """Validate that options are of the correct type for this renderer.

        Raises
        ------
        InvalidOptionsError
            If options are not None and not an instance of expected_type

        """
        if options is not None and not isinstance(options, expected_type):
            raise InvalidOptionsError(
                component_name=renderer_name,
                expected_type=expected_type,
                received_type=type(options),
            )

    @abstractmethod
    def render_to_string(self, document: Element) -> str:
        """Render the tree to a string.

        Parameters
        ----------
        document : Element
            DOCUMENT root to render

        Returns
        -------
        str
            Rendered output

        """
        raise NotImplementedError

    def render(self, document: Element, output: RenderOutput) -> None:
        """Render the tree and write it to a path or file-like object.

        Parameters
        ----------
        document : Element
            DOCUMENT root to render
        output : str, Path or file-like object
            Destination path, or an open text or binary stream

        """
        content = self.render_to_string(document)
        if isinstance(output, (str, Path)):
            Path(output).write_text(content, encoding="utf-8")
        elif hasattr(output, "mode") and "b" in output.mode:
            output.write(content.encode("utf-8"))  # type: ignore[arg-type]
        else:
            try:
                output.write(content)  # type: ignore[arg-type]
            except TypeError:
                output.write(content.encode("utf-8"))  # type: ignore[arg-type]
