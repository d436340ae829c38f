#!/usr/bin/env python3
"""
Start the slide renderer server.

Host, port and the body truncation policy default to the environment
settings (HOST, PORT, TRUNCATE_BODY_OVERFLOW) and can be overridden here.
"""

import argparse
import os

import uvicorn
from slide_renderer.config import get_settings
from slide_renderer.slide_design import HEIGHT, WIDTH


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Render carousel slides over HTTP"
    )
    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"Interface to bind (default: {settings.host})"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=settings.port,
        help=f"Port to listen on (default: {settings.port})"
    )
    parser.add_argument(
        "--draw-overflow",
        action="store_true",
        help="Draw every body line instead of dropping lines past the bottom margin"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes (development)"
    )

    args = parser.parse_args()

    if args.draw_overflow:
        # Read by Settings in the server process
        os.environ["TRUNCATE_BODY_OVERFLOW"] = "false"
        get_settings.cache_clear()
        settings = get_settings()

    print(f"Slide renderer on http://{args.host}:{args.port}")
    print(f"  POST /render-slide  ({WIDTH}x{HEIGHT} PNG)")
    print(f"  Background fetch timeout: {settings.fetch_timeout_seconds}s")
    print(f"  Body overflow: {'dropped' if settings.truncate_body_overflow else 'drawn'}")

    uvicorn.run(
        "slide_renderer.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
