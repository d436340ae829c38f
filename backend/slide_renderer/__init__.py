"""Slide renderer service: composites carousel slides into PNG images."""

__version__ = "1.0.0"
