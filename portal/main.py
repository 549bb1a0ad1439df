# Hippies Portal - Main Application
# FastAPI application factory and startup

from contextlib import asynccontextmanager
from pathlib import Path
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError

from portal.config import get_settings
from portal.database import SessionLocal, check_connection
from portal.dependencies import PageRedirect
from portal.logging_config import configure_logging
from portal.services.auth import AuthenticationError, AuthorizationError
from portal.services.errors import NotFoundError
from portal.services.mail import BrevoMailer, MailService
from portal.services.realtime import ConnectionManager


settings = get_settings()
logger = logging.getLogger(__name__)

# Paths
APP_DIR = Path(__file__).parent
TEMPLATES_DIR = APP_DIR / "templates"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events.

    Runs on startup and shutdown.
    """
    configure_logging(settings.log_level)
    logger.info("Starting %s...", settings.app_name)

    # Verify database connection
    try:
        check_connection()
        logger.info("Database connection: OK")
    except SQLAlchemyError as e:
        logger.error("Database connection: FAILED - %s", e)
        if not settings.debug:
            raise

    yield

    logger.info("Shutting down %s...", settings.app_name)


def register_exception_handlers(app: FastAPI) -> None:
    """Map service exceptions to HTTP responses."""

    @app.exception_handler(PageRedirect)
    async def page_redirect_handler(request: Request, exc: PageRedirect):
        return RedirectResponse(url=exc.url, status_code=status.HTTP_302_FOUND)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_404_NOT_FOUND)

    @app.exception_handler(AuthenticationError)
    async def authentication_handler(request: Request, exc: AuthenticationError):
        return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_401_UNAUTHORIZED)

    @app.exception_handler(AuthorizationError)
    async def authorization_handler(request: Request, exc: AuthorizationError):
        return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_403_FORBIDDEN)


def create_app(mail: MailService = None) -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application. Tests pass their
    own MailService; otherwise mail goes through Brevo.
    """
    app = FastAPI(
        title=settings.app_name,
        description="Employee portal for Hippies Heaven",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Shared services available to routes via app.state
    app.state.templates = Jinja2Templates(directory=TEMPLATES_DIR)
    app.state.mail = mail or MailService(BrevoMailer.from_settings())
    app.state.notifier = ConnectionManager()
    app.state.session_factory = SessionLocal

    register_exception_handlers(app)

    # Include routers
    from portal.routes import (
        agreements,
        announcements,
        audit,
        auth,
        employees,
        hiring,
        mail as mail_routes,
        messages,
        pages,
        payroll,
        realtime,
        schedules,
        security,
        shifts,
        tasks,
        time_off,
        trainings,
    )
    app.include_router(pages.router)
    app.include_router(auth.router)
    app.include_router(employees.router)
    app.include_router(schedules.router)
    app.include_router(shifts.router)
    app.include_router(time_off.router)
    app.include_router(payroll.router)
    app.include_router(tasks.router)
    app.include_router(security.router)
    app.include_router(trainings.router)
    app.include_router(agreements.router)
    app.include_router(hiring.router)
    app.include_router(announcements.router)
    app.include_router(messages.router)
    app.include_router(mail_routes.router)
    app.include_router(audit.router)
    app.include_router(realtime.router)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        """Health check endpoint for monitoring."""
        try:
            check_connection()
            db_status = "healthy"
        except SQLAlchemyError as e:
            db_status = f"unhealthy: {e}"

        return {
            "status": "ok",
            "app": settings.app_name,
            "database": db_status,
        }

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "portal.main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.debug,
    )
