#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/parsers/base.py
"""Base class for markup parsers.

A parser turns source text into an element tree rooted at a DOCUMENT
element.

"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Union

from bb2html.ast.nodes import Element
from bb2html.exceptions import InvalidOptionsError, ValidationError
from bb2html.options.base import BaseParserOptions

logger = logging.getLogger(__name__)

ParserInput = Union[str, bytes, Path, IO[str], IO[bytes]]


class BaseParser(ABC):
    """Abstract base class for parsers.

    Parameters
    ----------
    options : BaseParserOptions or None, default = None
        Format-specific parsing options

    Notes
    -----
    A ``str`` input is always treated as markup, never as a file path, since
    parsers receive untrusted user text. Pass a :class:`~pathlib.Path` to
    read a file.

    """

    def __init__(self, options: BaseParserOptions | None = None):
        """Initialize the parser with optional configuration."""
        self.options: BaseParserOptions | None = options

    @staticmethod
    def _validate_options_type(options: BaseParserOptions | None, expected_type: type, parser_name: str) -> None:
        """Validate that options are of the correct type for this parser.

        Raises
        ------
        InvalidOptionsError
            If options are not None and not an instance of expected_type

        """
        if options is not None and not isinstance(options, expected_type):
            raise InvalidOptionsError(
                component_name=parser_name,
                expected_type=expected_type,
                received_type=type(options),
            )

    @abstractmethod
    def parse(self, input_data: ParserInput) -> Element:
        """Parse the input into an element tree.

        Parameters
        ----------
        input_data : str, bytes, Path or file-like object
            Markup text, UTF-8 bytes, a path to read, or an open file

        Returns
        -------
        Element
            DOCUMENT root of the parsed tree

        """
        raise NotImplementedError

    @staticmethod
    def _load_text_content(input_data: ParserInput) -> str:
        """Load markup text from the supported input types.

        Bytes are decoded as UTF-8; undecodable bytes are replaced rather
        than rejected.

        Raises
        ------
        ValidationError
            If the input type is not supported

        """
        if isinstance(input_data, str):
            return input_data
        if isinstance(input_data, bytes):
            return input_data.decode("utf-8", errors="replace")
        if isinstance(input_data, Path):
            return input_data.read_bytes().decode("utf-8", errors="replace")
        if hasattr(input_data, "read"):
            content = input_data.read()
            if isinstance(content, bytes):
                return content.decode("utf-8", errors="replace")
            return str(content)
        raise ValidationError(
            f"Unsupported input type: {type(input_data).__name__}",
            parameter_name="input_data",
            parameter_value=input_data,
        )
