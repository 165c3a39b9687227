import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from salesup.core.config import settings
from salesup.core.log_config import configure_logging
import salesup.models  # noqa: F401  # force model registration

from salesup.api.v1.auth import router as auth_router
from salesup.api.v1.daily_entries import router as daily_entries_router
from salesup.api.v1.performance import router as performance_router
from salesup.api.v1.analysis import router as analysis_router
from salesup.api.v1.invitations import router as invitations_router
from salesup.api.v1.dashboard import router as dashboard_router

logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="SalesUp API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/")
    def root():
        return {"status": "ok", "service": "salesup"}

    # Routers
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(daily_entries_router, prefix="/api/v1")
    app.include_router(performance_router, prefix="/api/v1")
    app.include_router(analysis_router, prefix="/api/v1")
    app.include_router(invitations_router, prefix="/api/v1")
    app.include_router(dashboard_router, prefix="/api/v1")

    return app


app = create_application()
