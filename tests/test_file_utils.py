"""Tests for file utilities module."""

import base64

from shared.file_utils import (
    build_document_context,
    decode_document_text,
    sanitize_filename,
    to_data_uri,
)


class TestFileUtils:
    """Test file utility functions."""

    def test_sanitize_filename_basic(self) -> None:
        """Test basic filename sanitization."""
        assert sanitize_filename("My Document.txt") == "My Document.txt"

    def test_sanitize_filename_invalid_chars(self) -> None:
        """Test sanitizing filename with invalid characters."""
        result = sanitize_filename('bad/file\\name:with*invalid"chars<>|?.txt')

        for char in '<>:"/\\|?*':
            assert char not in result
        assert result.endswith(".txt")

    def test_decode_document_text_replaces_invalid_bytes(self) -> None:
        assert decode_document_text("héllo".encode()) == "héllo"
        assert decode_document_text(b"ok \xff") == "ok �"

    def test_build_document_context_adds_filename_headers(self) -> None:
        context = build_document_context([("a.txt", "first"), ("b.md", "second")])

        assert context == (
            "\n\nDocument: a.txt\nContent: first\n"
            "\n\nDocument: b.md\nContent: second\n"
        )
        assert build_document_context([]) == ""

    def test_to_data_uri(self) -> None:
        uri = to_data_uri(b"\x89PNG", "image/png")

        prefix, encoded = uri.split(",", 1)
        assert prefix == "data:image/png;base64"
        assert base64.b64decode(encoded) == b"\x89PNG"
        assert to_data_uri(b"x").startswith("data:application/octet-stream;base64,")
