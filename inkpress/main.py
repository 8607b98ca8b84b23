"""
Inkpress - main entry point.

Runs the API with uvicorn:

    inkpress --host 0.0.0.0 --port 5000
"""

from __future__ import annotations

import argparse

import uvicorn

from inkpress.config import get_settings


def main():
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Run the Inkpress API")
    parser.add_argument("--host", default=settings.api_host)
    parser.add_argument("--port", type=int, default=settings.api_port)
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run(
        "inkpress.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
