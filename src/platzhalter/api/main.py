"""Platzhalter — FastAPI Application.

This module defines the FastAPI ``app`` instance, the placeholder route, and
the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Validation** happens in :func:`platzhalter.core.request_spec.build_request_spec`;
  its :class:`~platzhalter.core.errors.RequestError` subclasses become 400
  responses.
- **Caching and rendering** are delegated to
  :class:`~platzhalter.api.handler.PlaceholderService`, which is created once
  per application in the lifespan handler and stored on ``app.state``.
- **Store and renderer failures** (:class:`~platzhalter.core.errors.ServiceError`)
  become 500 responses.  Nothing is retried.

Endpoints
---------
========  ======================  ========================================
Method    Path                    Purpose
========  ======================  ========================================
GET       ``/favicon.ico``        Always 404
GET       ``/{dimensions}``       PNG placeholder, e.g. ``/400x300?bg=222``
========  ======================  ========================================

Query parameters of ``/{dimensions}``:

- ``bg`` — background hex color (3 or 6 digits, no ``#``)
- ``br`` — border hex color
- ``br_s`` — border size, 0-255

Usage
-----
CLI (installed entry point)::

    platzhalter

Direct invocation::

    python -m platzhalter.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from platzhalter import __version__
from platzhalter.api.handler import PlaceholderService
from platzhalter.core.config import PlatzhalterConfig, config
from platzhalter.core.errors import RequestError, ServiceError
from platzhalter.core.image_cache import ImageCache
from platzhalter.core.request_spec import build_request_spec

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_app(settings: PlatzhalterConfig = config) -> FastAPI:
    """Build the FastAPI application for ``settings``.

    Args:
        settings: Configuration to use.  Defaults to the global instance.

    Returns:
        A ready-to-serve application.  The image store is opened when the
        application starts up.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the image store and build the placeholder service.

        Args:
            app: The FastAPI application instance.

        Yields:
            Control back to the application for the duration of its lifetime.
        """
        cache = ImageCache(settings.db_path)
        app.state.service = PlaceholderService.from_config(cache, settings)
        logger.info(f"Platzhalter {__version__} serving images from {settings.db_path}")

        yield

        logger.info("Platzhalter shutting down.")

    app = FastAPI(
        title="Platzhalter",
        description="Placeholder image service.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        max_age=settings.cors_max_age,
    )

    # -----------------------------------------------------------------------
    # Error mapping.
    # -----------------------------------------------------------------------

    @app.exception_handler(RequestError)
    async def request_error_handler(request: Request, exc: RequestError) -> JSONResponse:
        logger.info(f"Rejected {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Only the query string can fail here, e.g. br_s=300 or br_s=abc.
        messages = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(status_code=400, content={"detail": messages})

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        logger.error(f"Failed to serve {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    # -----------------------------------------------------------------------
    # Routes.  The favicon route must be registered before the catch-all.
    # -----------------------------------------------------------------------

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon() -> Response:
        return Response(status_code=404)

    @app.get(
        "/{dimensions}",
        response_class=Response,
        responses={200: {"content": {"image/png": {}}}},
    )
    async def placeholder(
        request: Request,
        dimensions: str,
        bg: str | None = Query(default=None, description="Background hex color"),
        br: str | None = Query(default=None, description="Border hex color"),
        br_s: int | None = Query(default=None, ge=0, le=255, description="Border size"),
    ) -> Response:
        """Return a PNG placeholder of the requested size.

        Args:
            dimensions: ``WIDTHxHEIGHT``, each side 10 to ``max_dimension``.
            bg: Optional background color.  Malformed values are ignored.
            br: Optional border color.  Malformed values are ignored.
            br_s: Optional border size.  No border is drawn without it.

        Returns:
            The encoded image with an ``image/png`` content type.

        Raises:
            InvalidDimensionFormat: 400 for malformed dimensions.
            DimensionTooLarge: 400 when a side exceeds ``max_dimension``.
            ServiceError: 500 when the store or the renderer fails.
        """
        spec = build_request_spec(
            dimensions,
            bg=bg,
            br=br,
            br_s=br_s,
            max_dimension=settings.max_dimension,
        )
        service: PlaceholderService = request.app.state.service
        data = await service.serve_async(spec)
        return Response(content=data, media_type="image/png")

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port, and log level from :data:`~platzhalter.core.config.config`
    (``PLATZHALTER_SERVER_HOST``, ``PLATZHALTER_SERVER_PORT``,
    ``PLATZHALTER_LOG_LEVEL``).  Defaults to ``127.0.0.1:8080``.

    This function is registered as the ``platzhalter`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    logger.info(f"Starting platzhalter on {config.server_host}:{config.server_port}")
    uvicorn.run(
        "platzhalter.api.main:app",
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
