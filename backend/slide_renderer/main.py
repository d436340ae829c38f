"""FastAPI app for the slide renderer"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slide_renderer import __version__
from slide_renderer.config import get_settings
from slide_renderer.routes import RENDER_ERROR_MESSAGE, router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Slide Renderer", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors, reported in the same shape as missing fields."""
    fields = sorted({".".join(str(part) for part in err["loc"][1:]) or "body" for err in exc.errors()})
    return JSONResponse({"error": f"Invalid request body: {', '.join(fields)}"}, 400)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse({"error": RENDER_ERROR_MESSAGE}, 500)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(router)
