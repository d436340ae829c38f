"""
API routes for the slide renderer.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from slide_renderer.errors import RenderError, SlideValidationError
from slide_renderer.services.compositor import SlideRequest, render_slide

logger = logging.getLogger(__name__)

router = APIRouter()

RENDER_ERROR_MESSAGE = "Internal server error while rendering slide"


# Request/Response Models

class RenderSlideRequest(BaseModel):
    backgroundUrl: Optional[str] = None
    title: Optional[str] = None  # Required, checked by the compositor
    text: Optional[str] = None  # Required, checked by the compositor


class RenderSlideResponse(BaseModel):
    imageBase64: str  # data:image/png;base64,...


class ErrorResponse(BaseModel):
    error: str


# Routes

@router.post(
    "/render-slide",
    response_model=RenderSlideResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def render_slide_route(request: RenderSlideRequest, response: Response):
    """
    Render a carousel slide.

    - Downloads the background image if given (falls back to a dark fill)
    - Draws the wrapped title and body text
    - Returns the PNG as a base64 data URL
    """
    try:
        result = await render_slide(
            SlideRequest(
                title=request.title,
                text=request.text,
                background_url=request.backgroundUrl,
            )
        )
    except SlideValidationError as e:
        return JSONResponse({"error": str(e)}, 400)
    except RenderError:
        logger.exception("Error rendering slide")
        return JSONResponse({"error": RENDER_ERROR_MESSAGE}, 500)

    if result.dropped_body_lines:
        response.headers["X-Slide-Dropped-Lines"] = str(result.dropped_body_lines)

    return RenderSlideResponse(imageBase64=result.data_url)
