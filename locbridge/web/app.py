"""FastAPI application exposing the conversion engine over HTTP."""

import uvicorn
from pathlib import Path
from typing import Optional
from fastapi import FastAPI

from .. import __version__
from ..config import config
from ..errors import LocalizationError
from ..logging_config import setup_logging
from .routes import api
from .services.project_storage import ProjectStorage


def create_app(storage_dir: Optional[Path] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="locbridge",
        description="Convert between .strings, .xcstrings and Android strings.xml",
        version=__version__,
    )

    # Store services in app state
    app.state.project_storage = ProjectStorage(storage_dir)

    app.add_exception_handler(LocalizationError, api.localization_error_handler)
    app.include_router(api.router, prefix="/api")

    return app


def main():
    """Entry point for the locbridge-web command."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the locbridge HTTP API")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    setup_logging(config.log_level)
    print(f"Starting locbridge at http://{args.host}:{args.port}")
    uvicorn.run(
        "locbridge.web.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
