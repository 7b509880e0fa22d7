"""Built-in presentation themes.

The store accepts any theme string; this catalog only backs the theme picker.
"""

from shared.models import ThemeInfo

THEMES: list[ThemeInfo] = [
    ThemeInfo(id="professional", name="Professional", description="Clean & Corporate"),
    ThemeInfo(id="modern", name="Modern", description="Vibrant & Creative"),
    ThemeInfo(id="minimal", name="Minimal", description="Simple & Elegant"),
    ThemeInfo(id="academic", name="Academic", description="Research & Educational"),
]
