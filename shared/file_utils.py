"""
File and text processing utilities for uploaded documents and slide images.
"""

import base64
from collections.abc import Iterable

DEFAULT_IMAGE_MIME_TYPE = "application/octet-stream"


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage."""
    invalid_chars = '<>:"/\\|?*'
    for char in invalid_chars:
        filename = filename.replace(char, "_")
    return filename


def decode_document_text(data: bytes, encoding: str = "utf-8") -> str:
    """Decode uploaded document bytes as text, replacing undecodable sequences."""
    return data.decode(encoding, errors="replace")


def build_document_context(documents: Iterable[tuple[str, str]]) -> str:
    """Concatenate (filename, text) pairs into a single context block with filename headers."""
    parts: list[str] = []
    for filename, text in documents:
        parts.append(f"\n\nDocument: {filename}\nContent: {text}\n")
    return "".join(parts)


def to_data_uri(data: bytes, mime_type: str | None = None) -> str:
    """Encode raw bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or DEFAULT_IMAGE_MIME_TYPE};base64,{encoded}"
