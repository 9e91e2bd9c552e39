#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/exceptions.py
"""Custom exceptions for the bb2html library.

Malformed BBCode never raises: the pipeline degrades bad markup into literal
text or broken-tag nodes instead. The exceptions below cover the remaining
failure modes, which are caller mistakes (wrong options, missing
collaborator data) and internal invariant violations.

Exception Hierarchy
-------------------
- Bb2HtmlError (base exception)

  - ValidationError (parameter/option validation)
    - InvalidOptionsError (wrong options class for parser or renderer)

  - RenderingError (output generation failures)

  - TreeInvariantError (element tree invariant violated; a bug, never swallowed)

"""

from __future__ import annotations

from typing import Any


class Bb2HtmlError(Exception):
    """Base exception class for all bb2html-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(Bb2HtmlError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class InvalidOptionsError(ValidationError):
    """Exception raised when an incorrect options class is provided.

    Parameters
    ----------
    component_name : str
        Name of the parser or renderer that received invalid options
    expected_type : type
        The expected options class type
    received_type : type
        The actual options class type that was received
    message : str, optional
        Custom error message. If not provided, generates a helpful message
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        component_name: str,
        expected_type: type,
        received_type: type,
        message: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the invalid options error."""
        if message is None:
            message = (
                f"{component_name} expected options of type '{expected_type.__name__}' "
                f"but received '{received_type.__name__}'."
            )
        super().__init__(
            message, parameter_name="options", parameter_value=received_type, original_error=original_error
        )
        self.component_name = component_name
        self.expected_type = expected_type
        self.received_type = received_type


class RenderingError(Bb2HtmlError):
    """Exception raised when caller-supplied render data cannot be used.

    Only raised when ``fail_on_resource_errors`` is enabled; by default the
    renderer logs a warning and omits the element.

    Parameters
    ----------
    message : str
        Description of the rendering error
    rendering_stage : str, optional
        Stage where rendering failed (e.g. "attachment", "embed")
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, rendering_stage: str | None = None, original_error: Exception | None = None):
        """Initialize the rendering error."""
        super().__init__(message, original_error=original_error)
        self.rendering_stage = rendering_stage


class TreeInvariantError(Bb2HtmlError, AssertionError):
    """Exception raised when an element tree invariant would be violated.

    This signals a programming error in the tree builder or in code that
    mutates element trees directly. It is never raised for malformed user
    input and the pipeline never catches it.

    Parameters
    ----------
    message : str
        Description of the violated invariant
    node_kind : str, optional
        Kind of the element involved

    """

    def __init__(self, message: str, node_kind: str | None = None):
        """Initialize the invariant error."""
        super().__init__(message)
        self.node_kind = node_kind


__all__ = [
    "Bb2HtmlError",
    "ValidationError",
    "InvalidOptionsError",
    "RenderingError",
    "TreeInvariantError",
]
