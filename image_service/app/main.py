"""
Application principale FastAPI du service d'images.

Responsabilités du module:
- Initialiser le logging structuré
- Construire l'application FastAPI avec son titre/debug
- Ajouter les middlewares (request id, timing, métriques)
- Monter les routers (santé, administration, images, redirections héritées)
"""

from __future__ import annotations

from fastapi import FastAPI

from image_service.api.errors import APIError, handle_api_error
from image_service.api.routes_health import router as health_router
from image_service.api.routes_images import legacy_router
from image_service.api.routes_images import router as images_router
from image_service.api.routes_manage import router as manage_router
from image_service.app.metrics import PrometheusMiddleware, metrics_router
from image_service.core.container import container
from image_service.core.logging import setup_logging
from image_service.middlewares.request_id import RequestIDMiddleware
from image_service.middlewares.timing import TimingMiddleware


def create_app() -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Les routes d'administration sont montées avant les routes d'images pour que
    `/manage/...` ne soit jamais pris pour une clé métier.
    """
    setup_logging()
    settings = container.settings
    prefix = settings.route_prefix
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG)
    app.add_exception_handler(APIError, handle_api_error)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(legacy_router)
    app.include_router(manage_router, prefix=f"{prefix}/manage")
    app.include_router(images_router, prefix=prefix)
    return app


app = create_app()


def run() -> None:
    """Point d'entrée console: lance uvicorn avec les paramètres de l'application."""
    import uvicorn  # noqa: PLC0415

    uvicorn.run(
        "image_service.app.main:app",
        host=container.settings.APP_HOST,
        port=container.settings.APP_PORT,
    )
