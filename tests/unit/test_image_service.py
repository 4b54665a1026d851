"""
Unit tests for product photo handling.
"""

import pytest

from services.image_service import (
    build_image_reference,
    ingest_images,
    image_url,
    release_images,
)

from tests.conftest import make_image_bytes
from tests.factories import ImageFactory


class TestImageUrl:

    def test_url(self):
        assert image_url("JK100") == "/api/images/JK100"

    def test_quotes_identifier(self):
        assert image_url("JK 1/2") == "/api/images/JK%201%2F2"


class TestBuildImageReference:
    """Tests for build_image_reference()"""

    def test_reference_from_filename(self):
        ref = build_image_reference("JK100_front.png", b"data", "image/png")

        assert ref.product_id == "JK100"
        assert ref.url == "/api/images/JK100"
        assert ref.size == 4

    def test_guesses_content_type(self):
        """Missing or generic content types are guessed from the extension."""
        ref = build_image_reference("JK100_front.jpg", b"data", "application/octet-stream")

        assert ref.content_type == "image/jpeg"

    def test_no_identifier(self):
        assert build_image_reference("_front.png", b"data") is None


class TestIngestImages:
    """Tests for ingest_images()"""

    def test_accepts_images(self):
        files = [
            ("JK100_front.png", make_image_bytes(), "image/png"),
            ("JK200_a.png", make_image_bytes(), "image/png"),
        ]

        result = ingest_images(files)

        assert sorted(result.images) == ["JK100", "JK200"]
        assert result.skipped == []

    def test_later_file_wins_in_batch(self):
        """Two photos for one identifier: the later is kept."""
        files = [
            ("JK100_front.png", b"first", "image/png"),
            ("JK100_back.png", b"second", "image/png"),
        ]

        result = ingest_images(files)

        assert result.images["JK100"].filename == "JK100_back.png"

    @pytest.mark.parametrize("filename,data,content_type,reason", [
        ("JK1_a.png", b"", "image/png", "File is empty"),
        ("_a.png", b"x", "image/png", "Could not derive product ID from filename"),
        ("JK1_notes.txt", b"x", "text/plain", "File is not an image"),
    ])
    def test_skips(self, filename, data, content_type, reason):
        result = ingest_images([(filename, data, content_type)])

        assert result.images == {}
        assert result.skipped == [(filename, reason)]


class TestReleaseImages:

    def test_counts_released(self):
        refs = [ImageFactory.create("JK1"), ImageFactory.create("JK2")]

        assert release_images(refs) == 2

    def test_nothing_to_release(self):
        assert release_images([]) == 0
