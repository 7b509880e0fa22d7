"""
Enums and constants used across the application.
"""

from enum import Enum


class SlideLayout(str, Enum):
    """Available slide layouts."""

    TITLE_BULLETS = "title-bullets"
    IMAGE_TEXT = "image-text"
    FULL_IMAGE = "full-image"


class AspectRatio(str, Enum):
    """Supported slide aspect ratios."""

    WIDESCREEN = "16:9"
    STANDARD = "4:3"
    SQUARE = "1:1"


class FontSize(str, Enum):
    """Presentation font sizes, declared smallest to largest."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    def step(self, direction: str) -> "FontSize":
        """Return the neighbouring size, clamped at both ends."""
        sizes = list(FontSize)
        index = sizes.index(self)
        if direction == "up":
            index += 1
        elif direction == "down":
            index -= 1
        else:
            raise ValueError(f"Unknown font size direction: {direction}")
        return sizes[max(0, min(len(sizes) - 1, index))]


class ExportFormat(str, Enum):
    """Available export formats for presentations."""

    PDF = "pdf"
    PPTX = "pptx"


class StoreBackend(str, Enum):
    """Presentation store implementations."""

    MEMORY = "memory"
    SQL = "sql"
