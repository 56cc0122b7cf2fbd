"""
ForkYes Web - FastAPI application.

JSON API under /api, page redirects at / and /dashboard.
Every error leaves as {"error": "<message>"}.
"""

import contextlib
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from forkyes import __version__
from forkyes.ai.prompt_logger import enable_prompt_logging
from forkyes.config import get_settings
from forkyes.errors import ForkYesError
from forkyes.logging_setup import setup_logging
from forkyes.web.chat_routes import router as chat_router
from forkyes.web.family_routes import router as family_router
from forkyes.web.meal_routes import router as meal_router
from forkyes.web.onboarding_routes import router as onboarding_router
from forkyes.web.pages import router as pages_router
from forkyes.web.shopping_routes import router as shopping_router

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)
    if settings.forkyes_log_prompts:
        enable_prompt_logging(True)
    logger.info(f"ForkYes {__version__} starting up ({settings.forkyes_env})")
    logger.info(f"  Prompt file logging: {settings.forkyes_log_prompts}")
    yield


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def register_error_handlers(app: FastAPI) -> None:
    """Map every failure onto the {"error": ...} body."""

    @app.exception_handler(ForkYesError)
    async def forkyes_error_handler(request: Request, exc: ForkYesError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
        return _error(exc.message, exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(str(exc.detail), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        return _error(f"{location}: {message}" if location else message, 400)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"{request.method} {request.url.path} crashed")
        return _error("Server error", 500)


def create_app() -> FastAPI:
    app = FastAPI(title="ForkYes", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(onboarding_router, prefix="/api")
    app.include_router(family_router, prefix="/api")
    app.include_router(meal_router, prefix="/api")
    app.include_router(shopping_router, prefix="/api")
    app.include_router(chat_router, prefix="/api")
    app.include_router(pages_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()
