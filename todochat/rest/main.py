"""
FastAPI application for the todochat API.

Wires the routers, CORS, request logging and the error envelope together.
Run with:

    python -m todochat.rest.main
    uvicorn todochat.rest.main:app --port 3000
"""

from dotenv import load_dotenv

# Before any todochat import: the database engine and JWT key are read from the environment at import time
load_dotenv()

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from todochat.config.configuration_manager import ConfigurationManager
from todochat.rest.db.database import init_db
from todochat.rest.dependencies.config import close_intent_client
from todochat.rest.exceptions import TodoChatError, TodoNotFoundError, InvalidActionError
from todochat.rest.routers import auth, todos, chat, health
from todochat.utils.logging_setup import configure_logging

logger = logging.getLogger( __name__ )

SECURITY_HEADERS = {
    "X-Content-Type-Options"       : "nosniff",
    "X-Frame-Options"              : "SAMEORIGIN",
    "Cross-Origin-Resource-Policy" : "cross-origin",
    "Referrer-Policy"              : "no-referrer",
}


def _error_response( status_code: int, error: str, headers=None, **extra ) -> JSONResponse:
    content = { "success": False, "error": error }
    content.update( extra )
    return JSONResponse( status_code=status_code, content=content, headers=headers )


def _validation_details( errors ) -> list:
    """Flatten pydantic errors to {field, message} pairs (ctx may hold non-JSON objects)."""
    details = []
    for error in errors:
        loc = [ str( part ) for part in error.get( "loc", () ) if part not in ( "body", "query", "path" ) ]
        details.append( { "field": ".".join( loc ), "message": error.get( "msg", "Invalid value" ) } )
    return details


def _register_exception_handlers( app: FastAPI ) -> None:
    """Render every error as {"success": false, "error": "..."}."""

    @app.exception_handler( StarletteHTTPException )
    async def http_exception_handler( request: Request, exc: StarletteHTTPException ):
        # Unknown paths and unsupported methods on a known path both answer 404
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED or ( exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found" ):
            return _error_response( status.HTTP_404_NOT_FOUND, "Route not found" )
        return _error_response( exc.status_code, str( exc.detail ), headers=getattr( exc, "headers", None ) )

    @app.exception_handler( RequestValidationError )
    async def validation_exception_handler( request: Request, exc: RequestValidationError ):
        return _error_response( status.HTTP_400_BAD_REQUEST, "Validation failed", details=_validation_details( exc.errors() ) )

    @app.exception_handler( TodoNotFoundError )
    async def todo_not_found_handler( request: Request, exc: TodoNotFoundError ):
        return _error_response( status.HTTP_404_NOT_FOUND, exc.message )

    @app.exception_handler( InvalidActionError )
    async def invalid_action_handler( request: Request, exc: InvalidActionError ):
        return _error_response( status.HTTP_400_BAD_REQUEST, exc.message )

    @app.exception_handler( TodoChatError )
    async def todochat_error_handler( request: Request, exc: TodoChatError ):
        logger.error( f"Application error on {request.url.path}: {exc}" )
        return _error_response( status.HTTP_400_BAD_REQUEST, exc.message )

    @app.exception_handler( Exception )
    async def unhandled_exception_handler( request: Request, exc: Exception ):
        logger.exception( f"Unhandled error on {request.method} {request.url.path}: {exc}" )
        return _error_response( status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error" )


def create_app( config_mgr: ConfigurationManager = None ) -> FastAPI:
    """
    Create the FastAPI application.

    Ensures:
        - auth, todos, chat and health routers mounted under /api
        - CORS limited to "cors allowed origins"
        - Every request logged with method, path, status and duration
        - Every response carries the SECURITY_HEADERS
        - Startup configures logging and, if "database create tables" is set, creates tables
        - Shutdown closes the intent client if one was built

    Returns:
        Configured FastAPI application.
    """
    config_mgr = config_mgr or ConfigurationManager()

    app_name    = config_mgr.get( "app name", default="Todo Chatbot API" )
    app_version = config_mgr.get( "app version", default="1.0.0" )

    @asynccontextmanager
    async def lifespan( app: FastAPI ):
        configure_logging()
        if config_mgr.get( "database create tables", default=True, return_type="boolean" ):
            init_db()
        logger.info( f"{app_name} {app_version} started" )
        yield
        logger.info( f"{app_name} shutting down" )
        await close_intent_client()

    app = FastAPI(
        title       = app_name,
        description = "Todo list with a natural-language chat front-end",
        version     = app_version,
        lifespan    = lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins     = config_mgr.get( "cors allowed origins", default=[], return_type="list-string" ),
        allow_credentials = True,
        allow_methods     = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers     = ["Content-Type", "Authorization"]
    )

    @app.middleware( "http" )
    async def log_requests( request: Request, call_next ):
        start_time = time.perf_counter()
        response = await call_next( request )
        duration_ms = ( time.perf_counter() - start_time ) * 1000
        logger.info( f"HTTP {request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f} ms)" )
        return response

    @app.middleware( "http" )
    async def add_security_headers( request: Request, call_next ):
        response = await call_next( request )
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault( name, value )
        return response

    _register_exception_handlers( app )

    app.include_router( auth.router )
    app.include_router( todos.router )
    app.include_router( chat.router )
    app.include_router( health.router )

    @app.get( "/" )
    async def root():
        return {
            "name"    : app_name,
            "version" : app_version,
            "status"  : "running"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    config_mgr = ConfigurationManager()
    uvicorn.run(
        "todochat.rest.main:app",
        host = config_mgr.get( "app host", default="0.0.0.0" ),
        port = config_mgr.get( "app port", default=3000, return_type="int" )
    )
