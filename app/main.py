from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Optional, Sequence

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.core.context import AppContext, build_context
from app.core.errors import (
    CallableError,
    callable_error_handler,
    unhandled_error_handler,
    validation_error_handler,
)
from app.core.logging_config import setup_logging
from app.routes.assistant_routes import router as assistant_router
from app.routes.auth_routes import router as auth_router
from app.routes.invite_routes import router as invite_router
from app.routes.project_routes import router as project_router
from app.services.sources import SourceConnector

VERSION = "0.1.0"


def create_app(
    context: Optional[AppContext] = None,
    connectors: Optional[Sequence[SourceConnector]] = None,
) -> FastAPI:
    """
    Build the API. With no context, Firebase is initialized on startup from
    settings; passing a ready context skips that (tests, scripts).

    connectors are the assistant's data sources (mail, files, calendar).
    They are appended to the context's own list, whichever way it was built.
    """
    settings = context.settings if context else get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(json_output=settings.LOG_JSON, level=settings.LOG_LEVEL)
        if getattr(app.state, "context", None) is None:
            app.state.context = build_context(settings, connectors)
        yield

    app = FastAPI(
        title="CollabFlow API",
        description="Projects, invites and an AI assistant for CollabFlow workspaces.",
        version=VERSION,
        lifespan=lifespan,
    )
    if context is not None and connectors:
        context = replace(context, connectors=[*context.connectors, *connectors])
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(CallableError, callable_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/", tags=["health"])
    def healthcheck():
        return {"status": "ok", "service": "collabflow", "version": VERSION}

    app.include_router(auth_router)
    app.include_router(invite_router)
    app.include_router(project_router)
    app.include_router(assistant_router)
    return app


app = create_app()
