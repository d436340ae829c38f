"""
Background image download and decoding.
"""

import logging
from io import BytesIO
from typing import Optional

import httpx
from fastapi.concurrency import run_in_threadpool
from PIL import Image

from slide_renderer.config import get_settings
from slide_renderer.errors import DecodeError, DownloadError

logger = logging.getLogger(__name__)


async def fetch_image(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = None,
    max_bytes: Optional[int] = None,
) -> bytes:
    """Download url and return the full response body.

    Raises DownloadError on a non-200 status, a transport error or timeout,
    an unsupported scheme, or a body larger than max_bytes. No retries.
    """
    settings = get_settings()
    if timeout is None:
        timeout = settings.fetch_timeout_seconds
    if max_bytes is None:
        max_bytes = settings.max_background_bytes

    if not url.startswith(("http://", "https://")):
        raise DownloadError(f"Unsupported URL scheme: {url[:40]}")

    if client is None:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as own_client:
            return await _download(own_client, url, max_bytes)
    return await _download(client, url, max_bytes)


async def _download(client: httpx.AsyncClient, url: str, max_bytes: int) -> bytes:
    try:
        async with client.stream("GET", url) as response:
            if response.status_code != 200:
                raise DownloadError(f"Failed to download image: {response.status_code}")

            chunks = []
            received = 0
            async for chunk in response.aiter_bytes():
                received += len(chunk)
                if received > max_bytes:
                    raise DownloadError(f"Image exceeds {max_bytes} bytes")
                chunks.append(chunk)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise DownloadError(f"Failed to download image: {e!r}") from e

    return b"".join(chunks)


def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes into an RGBA image."""
    try:
        img = Image.open(BytesIO(data))
        img.load()
        img = img.convert("RGBA")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Could not decode image: {e}") from e
    return img


async def load_background(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[Image.Image]:
    """Fetch and decode a background image, or None if either step fails."""
    try:
        data = await fetch_image(url, client=client)
        return await run_in_threadpool(decode_image, data)
    except (DownloadError, DecodeError) as e:
        logger.warning(f"Failed to load background image: {e}")
        return None
