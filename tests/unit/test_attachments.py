#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for attachment records."""

import pytest

from bb2html.parsers.bbcode import BBCodeParser
from bb2html.utils.attachments import AttachmentView, collect_attachment_ids, load_attachment_views


@pytest.mark.unit
class TestAttachmentView:
    """Test building and rendering attachment views."""

    def test_from_mapping_with_width_and_height(self) -> None:
        """Test separate width and height keys."""
        view = AttachmentView.from_mapping(
            {"id": "5", "download_url": "/a/5", "filename": "x.png", "mime": "image/png", "width": 10, "height": "20"}
        )
        assert view == AttachmentView(5, "/a/5", "x.png", "image/png", (10, 20))

    def test_from_mapping_with_dimensions(self) -> None:
        """Test a dimensions pair."""
        view = AttachmentView.from_mapping({"id": 1, "download_url": "/a/1", "dimensions": [3, 4]})
        assert view.dimensions == (3, 4)
        assert view.mime == "application/octet-stream"

    def test_from_mapping_requires_id_and_url(self) -> None:
        """Test that incomplete records are rejected."""
        with pytest.raises(ValueError, match="download_url"):
            AttachmentView.from_mapping({"id": 1})

    def test_image_html(self) -> None:
        """Test that views with dimensions render as images."""
        view = AttachmentView(1, "/a/1.png", dimensions=(2, 3))
        assert view.to_html() == '<img class="bbcode attachment" src="/a/1.png" width="2px" height="3px" />'

    def test_link_html_is_escaped(self) -> None:
        """Test that the download URL is escaped."""
        view = AttachmentView(2, '/a?x=1&y="2"')
        assert view.to_html() == '<a class="bbcode attachment" href="/a?x=1&amp;y=&quot;2&quot;">View attachment 2</a>'


@pytest.mark.unit
class TestLoadingAndCollecting:
    """Test indexing records and collecting ids."""

    def test_load_mixed_records(self) -> None:
        """Test views and mappings together."""
        views = load_attachment_views([AttachmentView(1, "/a/1"), {"id": 2, "download_url": "/a/2"}])
        assert sorted(views) == [1, 2]
        assert views[2].download_url == "/a/2"

    def test_collect_skips_broken(self) -> None:
        """Test that invalid attachment ids are not collected."""
        tree = BBCodeParser().parse("[attach]abc[/attach][attach]4[/attach]")
        assert collect_attachment_ids(tree) == [4]
