"""
Canonical rendering policy for carousel slides.

Every tunable of the slide layout lives in one frozen ``SlideLayout``.
Text styles are explicit ``TextStyle`` values handed to each draw call,
so nothing depends on the order drawing state was configured in.
"""

import logging
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from typing import Optional

from PIL import ImageFont

from slide_renderer.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Image dimensions (portrait carousel)
WIDTH = 1080
HEIGHT = 1350

# Colors
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
LIGHT_GRAY = (229, 231, 235)  # #e5e7eb
DARK_BG = (26, 26, 26)  # #1a1a1a


@dataclass(frozen=True)
class ShadowStyle:
    """Drop shadow drawn as stacked offset copies of the text."""
    offset: int = 3
    color: tuple = BLACK
    layers: int = 2


@dataclass(frozen=True)
class TextStyle:
    weight: str
    size: int
    fill: tuple
    line_height: float
    shadow: Optional[ShadowStyle] = None


@dataclass(frozen=True)
class SlideLayout:
    width: int = WIDTH
    height: int = HEIGHT
    padding: int = 120
    title_top: int = 120
    title_style: TextStyle = field(
        default_factory=lambda: TextStyle("bold", 72, WHITE, 90, ShadowStyle())
    )
    title_body_gap: int = 40
    body_style: TextStyle = field(
        default_factory=lambda: TextStyle("regular", 44, LIGHT_GRAY, 44 * 1.3)
    )
    overlay_opacity: float = 0.45
    fallback_color: tuple = DARK_BG
    bottom_margin: int = 100
    truncate_body: bool = True

    @property
    def max_text_width(self) -> int:
        return self.width - 2 * self.padding

    @property
    def body_limit_y(self) -> Optional[float]:
        """Lowest y a body line may reach, or None when overflow is drawn."""
        if not self.truncate_body:
            return None
        return self.height - self.bottom_margin

    @classmethod
    def from_settings(cls, settings: Settings) -> "SlideLayout":
        return replace(DEFAULT_LAYOUT, truncate_body=settings.truncate_body_overflow)


DEFAULT_LAYOUT = SlideLayout()


# ============================================
# FONTS
# ============================================
FONT_FILES = {
    "regular": ("Montserrat-Regular.ttf", "DejaVuSans.ttf"),
    "bold": ("Montserrat-Bold.ttf", "DejaVuSans-Bold.ttf"),
}


def _font_candidates(weight: str) -> list:
    """Montserrat from the asset directory first, then system DejaVu Sans."""
    montserrat, system = FONT_FILES.get(weight, FONT_FILES["regular"])
    font_dir = Path(get_settings().font_dir)
    return [
        str(font_dir / "Montserrat" / montserrat),
        str(font_dir / montserrat),
        system,
        f"/usr/share/fonts/truetype/dejavu/{system}",
    ]


@lru_cache(maxsize=32)
def get_font(weight: str, size: int) -> ImageFont.FreeTypeFont:
    """Get font with specified weight and size."""
    for candidate in _font_candidates(weight):
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.warning(f"No TrueType font found for weight '{weight}', using Pillow default")
    return ImageFont.load_default(size=size)
