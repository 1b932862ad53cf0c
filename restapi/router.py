"""Application configuration and router setup."""

import fastapi
from fastapi.middleware import cors
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from components.core import init_db
from components.core.config import get_settings
from components.core.exceptions import AppError
from components.core.logging import setup_logging
from restapi.endpoints import credits, health_check, letters, payments

TITLE = "Credit Ledger"
DESCRIPTION = "Credit portfolio, payment ledger and outgoing letter numbering"


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = fastapi.FastAPI(
        title=TITLE,
        description=DESCRIPTION,
        version=settings.API_VERSION,
        debug=settings.DEBUG,
        lifespan=init_db.lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: fastapi.Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    # Include routers
    app.include_router(health_check.router)
    app.include_router(credits.router)
    app.include_router(payments.router)
    app.include_router(letters.router)

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title=TITLE,
            version=settings.API_VERSION,
            description=DESCRIPTION,
            routes=app.routes,
        )
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app
