"""
Slide compositor.

Pipeline for one slide:
- Background photo scaled to cover the canvas (or a flat dark fill)
- Translucent black overlay for legibility
- Wrapped title, then wrapped body text, left aligned
- PNG encode, returned as a base64 data URL
"""

import base64
import logging
import re
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Tuple

import httpx
from fastapi.concurrency import run_in_threadpool
from PIL import Image, ImageDraw, ImageFont

from slide_renderer.config import get_settings
from slide_renderer.errors import RenderError, SlideValidationError
from slide_renderer.slide_design import BLACK, SlideLayout, TextStyle, get_font
from slide_renderer.services.image_fetcher import load_background
from slide_renderer.services.text_wrap import LineBlock, place_lines, wrap_text

logger = logging.getLogger(__name__)

# Newlines, tabs and other non-space whitespace
CONTROL_WHITESPACE = re.compile(r"[^\S ]")


@dataclass
class SlideRequest:
    title: Optional[str]
    text: Optional[str]
    background_url: Optional[str] = None


@dataclass
class RenderResult:
    png: bytes
    dropped_body_lines: int = 0

    @property
    def data_url(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.png).decode("ascii")


def validate_request(request: SlideRequest):
    """Raise SlideValidationError naming every missing or empty field."""
    missing = [
        name
        for name, value in (("title", request.title), ("text", request.text))
        if not value
    ]
    if missing:
        raise SlideValidationError(missing)


def flatten_whitespace(text: str) -> str:
    """Turn line breaks and tabs into spaces; every drawn line is a single line."""
    return CONTROL_WHITESPACE.sub(" ", text)


def fit_cover(img: Image.Image, width: int, height: int) -> Image.Image:
    """Resize + crop image to fully cover a width x height rectangle."""
    src_w, src_h = img.size
    scale = max(width / src_w, height / src_h)
    new_w = max(width, round(src_w * scale))
    new_h = max(height, round(src_h * scale))
    resized = img.convert("RGBA").resize((new_w, new_h), Image.Resampling.LANCZOS)

    # Centered: the draw offset (width - new_w) / 2 is never positive
    left = (new_w - width) // 2
    top = (new_h - height) // 2
    return resized.crop((left, top, left + width, top + height))


def draw_text(
    draw: ImageDraw.ImageDraw,
    text: str,
    position: tuple,
    font: ImageFont.FreeTypeFont,
    style: TextStyle,
):
    """Draw text in the given style, shadow first if it has one."""
    x, y = position

    if style.shadow:
        for i in range(style.shadow.layers):
            offset = style.shadow.offset + i
            draw.text((x + offset, y + offset), text, font=font, fill=style.shadow.color)

    draw.text(position, text, font=font, fill=style.fill)


def _layout_block(
    draw: ImageDraw.ImageDraw,
    text: str,
    style: TextStyle,
    layout: SlideLayout,
    start_y: float,
    limit_y: Optional[float] = None,
) -> LineBlock:
    font = get_font(style.weight, style.size)
    measure = lambda s: draw.textlength(s, font=font)
    lines = wrap_text(flatten_whitespace(text), layout.max_text_width, measure)
    block = place_lines(lines, start_y, style.line_height, limit_y)

    for line in block.lines:
        draw_text(draw, line.text, (layout.padding, round(line.y)), font, style)

    return block


def compose_slide(
    background: Optional[Image.Image],
    title: str,
    text: str,
    layout: SlideLayout,
) -> Tuple[Image.Image, int]:
    """Composite one slide. Returns the image and the number of dropped body lines."""
    size = (layout.width, layout.height)

    if background is not None:
        img = Image.new("RGBA", size, (0, 0, 0, 0))
        img.alpha_composite(fit_cover(background, *size))
    else:
        img = Image.new("RGBA", size, (*layout.fallback_color, 255))

    overlay = Image.new("RGBA", size, (*BLACK, round(255 * layout.overlay_opacity)))
    img = Image.alpha_composite(img, overlay)
    draw = ImageDraw.Draw(img)

    # Title is never truncated
    title_block = _layout_block(draw, title, layout.title_style, layout, layout.title_top)

    body_block = _layout_block(
        draw,
        text,
        layout.body_style,
        layout,
        title_block.next_y + layout.title_body_gap,
        layout.body_limit_y,
    )

    return img, body_block.dropped


def encode_png(img: Image.Image) -> bytes:
    if img.mode == "RGBA":
        rgb = Image.new("RGB", img.size, BLACK)
        rgb.paste(img, mask=img.split()[-1])
        img = rgb

    buffer = BytesIO()
    img.save(buffer, "PNG")
    return buffer.getvalue()


def _render(
    background: Optional[Image.Image],
    title: str,
    text: str,
    layout: SlideLayout,
) -> RenderResult:
    img, dropped = compose_slide(background, title, text, layout)
    return RenderResult(png=encode_png(img), dropped_body_lines=dropped)


async def render_slide(
    request: SlideRequest,
    layout: Optional[SlideLayout] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> RenderResult:
    """
    Render a slide for the request.

    A missing or broken background never fails the render; the flat
    fallback fill is used instead. Compositing and encoding run in the
    worker thread pool.
    """
    validate_request(request)

    if layout is None:
        layout = SlideLayout.from_settings(get_settings())

    background = None
    if request.background_url:
        background = await load_background(request.background_url, client=client)

    try:
        result = await run_in_threadpool(_render, background, request.title, request.text, layout)
    except Exception as e:
        raise RenderError("Failed to render slide") from e

    if result.dropped_body_lines:
        logger.info(f"Dropped {result.dropped_body_lines} body line(s) past the bottom margin")
    logger.info(f"Rendered slide ({len(result.png)} bytes)")
    return result
