# -*- coding: utf-8 -*-
"""
Main FastAPI application file for the campus events backend.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from campus_events import config
from campus_events.database import create_tables
from campus_events.exceptions import CampusEventsError, PersistenceError

# Every model module must be imported so its table is registered on Base.metadata
from campus_events.models import budget, event, proposal, registration, user  # noqa: F401

from campus_events.routes import admin_fastapi, events_fastapi, proposals_fastapi, registrations_fastapi

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=config.LOG_FILE,
)
logger = logging.getLogger("campus_events")


@asynccontextmanager
async def lifespan(app: FastAPI):
    config.check_production_settings()
    # Creates the tables in the database
    await create_tables()
    logger.info("Database tables ready (%s)", config.ENVIRONMENT)
    yield


def _error_body(message: str, error: str = None) -> dict:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body


async def campus_events_error_handler(request: Request, exc: CampusEventsError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    message = exc.message
    if isinstance(exc, PersistenceError) and config.IS_PRODUCTION:
        message = PersistenceError.default_message
    return JSONResponse(status_code=exc.status_code, content=_error_body(message, exc.code))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content=_error_body("Invalid request", details))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code, content=_error_body(str(exc.detail)), headers=getattr(exc, "headers", None)
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = "Server Error" if config.IS_PRODUCTION else str(exc)
    return JSONResponse(status_code=500, content=_error_body(message))


def create_app() -> FastAPI:
    docs_url = "/docs" if not config.IS_PRODUCTION else None
    redoc_url = "/redoc" if not config.IS_PRODUCTION else None

    app = FastAPI(
        title="Campus Events API",
        description="Society proposals, admin approval, events and student registrations",
        version="1.0.0",
        docs_url=docs_url,  # None in production (disables /docs)
        redoc_url=redoc_url,
        openapi_url="/openapi.json" if not config.IS_PRODUCTION else None,
        lifespan=lifespan,
    )

    origins = [
        config.FRONTEND_URL,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CampusEventsError, campus_events_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Routers
    app.include_router(proposals_fastapi.router, prefix="/api/proposals")
    app.include_router(events_fastapi.router, prefix="/api/events")
    app.include_router(registrations_fastapi.router, prefix="/api/registrations")
    app.include_router(admin_fastapi.router, prefix="/api/admin")

    @app.get("/health", tags=["Root"])
    async def health():
        return {"success": True, "message": "Campus Events API is running"}

    return app


app = create_app()
