"""
Integration Tests for the HTTP API
==================================

Request/response contracts of /render-slide and /health.
"""

import base64
from io import BytesIO
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status
from PIL import Image

from slide_renderer.errors import DownloadError
from slide_renderer.services import compositor

FETCH_IMAGE = "slide_renderer.services.image_fetcher.fetch_image"


def decode_data_url(data_url: str) -> Image.Image:
    prefix, data = data_url.split(",", 1)
    assert prefix == "data:image/png;base64"
    img = Image.open(BytesIO(base64.b64decode(data)))
    assert img.format == "PNG"
    return img


class TestHealth:

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "ok"}

    def test_health_after_render_failure(self, client):
        with patch.object(compositor, "compose_slide", side_effect=RuntimeError("boom")):
            assert client.post("/render-slide", json={"title": "A", "text": "B"}).status_code == 500

        response = client.get("/health")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "ok"}


class TestRenderSlideValidation:

    @pytest.mark.parametrize(
        "body,missing",
        [
            ({"text": "B"}, ["title"]),
            ({"title": "", "text": "B"}, ["title"]),
            ({"title": "A"}, ["text"]),
            ({"title": "A", "text": ""}, ["text"]),
            ({}, ["title", "text"]),
            ({"backgroundUrl": "https://x/y.png", "title": "", "text": ""}, ["title", "text"]),
        ],
    )
    def test_missing_fields(self, client, body, missing):
        response = client.post("/render-slide", json=body)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        error = response.json()["error"]
        for name in missing:
            assert f'"{name}"' in error

    def test_malformed_json(self, client):
        response = client.post(
            "/render-slide",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "error" in response.json()

    def test_wrong_field_type(self, client):
        response = client.post("/render-slide", json={"title": 42, "text": "B"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "title" in response.json()["error"]


class TestRenderSlide:

    def test_minimal_slide(self, client):
        response = client.post("/render-slide", json={"title": "A", "text": "B"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert set(data) == {"imageBase64"}
        assert data["imageBase64"].startswith("data:image/png;base64,")
        img = decode_data_url(data["imageBase64"])
        assert img.size == (1080, 1350)
        # Fallback #1a1a1a under the overlay
        r, g, b = img.convert("RGB").getpixel((5, 5))
        assert r == g == b
        assert 12 <= r <= 16

    @pytest.mark.parametrize(
        "body",
        [
            {"title": "Hello\nWorld", "text": "B"},
            {"title": "A", "text": "line one\nline two"},
            {"title": "Line\r\nbreaks", "text": "tab\tseparated\nbody"},
        ],
    )
    def test_multiline_text(self, client, body):
        response = client.post("/render-slide", json=body)

        assert response.status_code == status.HTTP_200_OK
        assert decode_data_url(response.json()["imageBase64"]).size == (1080, 1350)

    @pytest.mark.parametrize("body", [{"title": " ", "text": "B"}, {"title": "A", "text": "   "}])
    def test_whitespace_only_fields_render(self, client, body):
        response = client.post("/render-slide", json=body)
        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.parametrize(
        "error",
        [
            DownloadError("Failed to download image: 404"),
            DownloadError("Failed to download image: ConnectError('refused')"),
        ],
    )
    def test_background_download_failure_still_renders(self, client, error):
        with patch(FETCH_IMAGE, new=AsyncMock(side_effect=error)):
            response = client.post(
                "/render-slide",
                json={"backgroundUrl": "https://images.example.com/missing.png", "title": "A", "text": "B"},
            )

        assert response.status_code == status.HTTP_200_OK
        assert decode_data_url(response.json()["imageBase64"]).size == (1080, 1350)

    def test_unsupported_background_scheme_still_renders(self, client):
        response = client.post(
            "/render-slide",
            json={"backgroundUrl": "ftp://images.example.com/a.png", "title": "A", "text": "B"},
        )
        assert response.status_code == status.HTTP_200_OK

    def test_undecodable_background_still_renders(self, client):
        with patch(FETCH_IMAGE, new=AsyncMock(return_value=b"<html>not an image</html>")):
            response = client.post(
                "/render-slide",
                json={"backgroundUrl": "https://images.example.com/page", "title": "A", "text": "B"},
            )
        assert response.status_code == status.HTTP_200_OK

    def test_background_image_used(self, client, red_png):
        with patch(FETCH_IMAGE, new=AsyncMock(return_value=red_png)):
            response = client.post(
                "/render-slide",
                json={"backgroundUrl": "https://images.example.com/red.png", "title": "A", "text": "B"},
            )

        assert response.status_code == status.HTTP_200_OK
        r, g, b = decode_data_url(response.json()["imageBase64"]).convert("RGB").getpixel((5, 5))
        assert 138 <= r <= 142
        assert (g, b) == (0, 0)

    def test_render_failure_is_generic_500(self, client):
        with patch.object(compositor, "compose_slide", side_effect=RuntimeError("secret detail")):
            response = client.post("/render-slide", json={"title": "A", "text": "B"})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"error": "Internal server error while rendering slide"}

    def test_dropped_lines_header(self, client):
        long_text = " ".join(["overflow"] * 400)
        response = client.post("/render-slide", json={"title": "Title", "text": long_text})

        assert response.status_code == status.HTTP_200_OK
        assert int(response.headers["X-Slide-Dropped-Lines"]) > 0

    def test_no_dropped_lines_header_for_short_text(self, client):
        response = client.post("/render-slide", json={"title": "A", "text": "B"})
        assert "X-Slide-Dropped-Lines" not in response.headers
