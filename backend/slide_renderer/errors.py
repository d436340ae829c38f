"""
Exceptions raised by the slide rendering pipeline.

Only ``SlideValidationError`` and ``RenderError`` ever reach the HTTP layer.
``DownloadError`` and ``DecodeError`` are recovered inside the compositor by
falling back to the flat background.
"""


class SlideError(Exception):
    """Base class for slide rendering errors."""


class SlideValidationError(SlideError):
    """Required request fields are missing or empty."""

    def __init__(self, missing_fields: list):
        self.missing_fields = list(missing_fields)
        names = ", ".join(f'"{name}"' for name in self.missing_fields)
        super().__init__(
            f"Missing required fields: {names}. Both \"title\" and \"text\" are required."
        )


class DownloadError(SlideError):
    """Background image could not be downloaded."""


class DecodeError(SlideError):
    """Downloaded bytes are not a readable image."""


class RenderError(SlideError):
    """Compositing or encoding the slide failed."""
