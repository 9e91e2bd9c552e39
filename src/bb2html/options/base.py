#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/options/base.py
"""Base classes for parser and renderer options.

Options are immutable dataclasses. Use ``create_updated`` to derive a
modified copy instead of mutating an instance.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        """Build an options instance from a plain mapping.

        Parameters
        ----------
        data : Mapping[str, Any]
            Field names and values, typically loaded from a configuration file.
            Dashes in keys are accepted in place of underscores.

        Returns
        -------
        Self
            New options instance

        Raises
        ------
        ValueError
            If the mapping contains keys that are not fields of this class.

        """
        known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        normalized = {str(key).replace("-", "_"): value for key, value in data.items()}
        unknown = sorted(set(normalized) - known)
        if unknown:
            raise ValueError(f"Unknown {cls.__name__} field(s): {', '.join(unknown)}")
        return cls(**normalized)


@dataclass(frozen=True)
class BaseParserOptions(CloneFrozenMixin):
    """Base class for all parser options.

    Notes
    -----
    Subclasses define format-specific parsing options as frozen dataclass fields.

    """

    def __post_init__(self) -> None:
        """Validate field values. The base class has nothing to check."""
        pass


@dataclass(frozen=True)
class BaseRendererOptions(CloneFrozenMixin):
    """Base class for all renderer options.

    Parameters
    ----------
    fail_on_resource_errors : bool, default=False
        Whether to raise RenderingError when caller-supplied data for an
        attachment or embed is missing. If False (default), a warning is
        logged and the element is omitted.

    """

    fail_on_resource_errors: bool = field(
        default=False,
        metadata={
            "help": "Raise RenderingError on unresolved attachments instead of logging warnings",
            "importance": "advanced",
        },
    )

    def __post_init__(self) -> None:
        """Validate field values. The base class has nothing to check."""
        pass
