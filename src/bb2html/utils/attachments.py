#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/utils/attachments.py
"""Attachment records supplied by the caller.

``[attach]12[/attach]`` only references an uploaded file by id. The caller
resolves ids to :class:`AttachmentView` records, usually with one query for
all ids returned by :func:`collect_attachment_ids`, and hands the mapping to
the renderer.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from bb2html.ast.nodes import Element, GroupKind
from bb2html.utils.escape import escape_unescaped

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttachmentView:
    """Display data for one attachment.

    Parameters
    ----------
    id : int
        Identifier referenced from ``[attach]`` tags
    download_url : str
        URL the file is served from
    filename : str
        Original file name
    mime : str
        MIME type of the file
    dimensions : tuple of (int, int), optional
        Pixel width and height for images; None for other files

    """

    id: int
    download_url: str
    filename: str = ""
    mime: str = "application/octet-stream"
    dimensions: Optional[tuple[int, int]] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AttachmentView:
        """Build a view from a mapping such as a database row or JSON object.

        Accepts either a ``dimensions`` pair or separate ``width`` and
        ``height`` keys.

        Raises
        ------
        ValueError
            If ``id`` or ``download_url`` is missing or malformed.

        """
        if "id" not in data or "download_url" not in data:
            raise ValueError("Attachment records need 'id' and 'download_url'")

        dimensions: Optional[tuple[int, int]] = None
        raw_dimensions = data.get("dimensions")
        if raw_dimensions is not None:
            width, height = raw_dimensions
            dimensions = (int(width), int(height))
        elif data.get("width") is not None and data.get("height") is not None:
            dimensions = (int(data["width"]), int(data["height"]))

        return cls(
            id=int(data["id"]),
            download_url=str(data["download_url"]),
            filename=str(data.get("filename", "")),
            mime=str(data.get("mime", "application/octet-stream")),
            dimensions=dimensions,
        )

    def to_html(self) -> str:
        """Render the attachment as an inline image or a download link."""
        url = escape_unescaped(self.download_url)
        if self.dimensions is not None:
            width, height = self.dimensions
            return f'<img class="bbcode attachment" src="{url}" width="{width}px" height="{height}px" />'
        return f'<a class="bbcode attachment" href="{url}">View attachment {self.id}</a>'


def load_attachment_views(records: Iterable[Mapping[str, Any] | AttachmentView]) -> dict[int, AttachmentView]:
    """Index attachment records by id.

    Parameters
    ----------
    records : iterable
        AttachmentView instances or mappings accepted by
        :meth:`AttachmentView.from_mapping`

    Returns
    -------
    dict[int, AttachmentView]
        Views keyed by id

    """
    views: dict[int, AttachmentView] = {}
    for record in records:
        view = record if isinstance(record, AttachmentView) else AttachmentView.from_mapping(record)
        views[view.id] = view
    return views


def collect_attachment_ids(tree: Element) -> list[int]:
    """Return the attachment ids referenced in ``tree``, in document order, without duplicates."""
    seen: dict[int, None] = {}
    for node in tree.walk():
        if node.kind is GroupKind.ATTACHMENT and not node.is_broken and node.argument is not None:
            seen.setdefault(int(node.argument), None)
    return list(seen)
