"""
Supabase Bridge - Main FastAPI Application

This FastAPI application gives callers write access to Supabase tables without
handing out the service role key. Each request is authenticated with a shared
API key, translated into one request against the Supabase REST API, and the
result is relayed back.

Endpoints:
- GET /health - Health check (no auth)
- POST /api/{table} - Insert row(s)
- PATCH /api/{table} - Update rows matching a filter
- DELETE /api/{table} - Delete rows matching a filter
- GET /api/{table} - Select rows
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import BridgeSettings, get_settings
from .handlers import require_api_key
from .models import (
    DeleteRequest,
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
    SuccessResponse,
    UpdateRequest,
)
from .services import BackendRejected, SupabaseRestClient, TransportFailure

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

ENDPOINTS = [
    "GET    /health",
    "POST   /api/{table}",
    "PATCH  /api/{table}",
    "DELETE /api/{table}",
    "GET    /api/{table}",
]

logger = logging.getLogger(__name__)


def configure_logging(settings: BridgeSettings) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2024-01-01T00:00:00.000Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def get_rest_client(request: Request) -> SupabaseRestClient:
    """FastAPI dependency returning the app's Supabase client."""
    return request.app.state.rest_client


def create_app(settings: Optional[BridgeSettings] = None) -> FastAPI:
    """
    Build the bridge application.

    Args:
        settings: Bridge settings; loaded from the environment when omitted

    Returns:
        FastAPI: Configured application with settings and client on app.state
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Supabase Bridge API",
        description="Authenticated proxy providing write access to Supabase tables",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.state.settings = settings
    app.state.rest_client = SupabaseRestClient.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        """Log the startup banner."""
        logger.info(f"Supabase Bridge API running on port {settings.port}")
        if settings.uses_default_api_key():
            logger.warning("API key configured: NO - USING DEFAULT!")
        else:
            logger.info("API key configured: YES")
        logger.info("Endpoints:\n  " + "\n  ".join(ENDPOINTS))

    @app.get("/health", response_model=HealthResponse)
    def health_check():
        """
        Health check endpoint.

        Returns:
            HealthResponse: Fixed status, service name and current timestamp
        """
        return HealthResponse(timestamp=utc_timestamp())

    @app.post(
        "/api/{table}",
        dependencies=[Depends(require_api_key)],
        status_code=status.HTTP_201_CREATED,
        response_model=SuccessResponse,
    )
    def insert_rows(
        table: str,
        payload: Any = Body(None),
        client: SupabaseRestClient = Depends(get_rest_client),
    ):
        """
        Insert row(s) into a table.

        A JSON object or array body is forwarded unchanged and Supabase is
        asked to return the created representation. A missing or non-JSON
        body is sent as an empty object.

        Args:
            table: Table name
            payload: Row object or list of rows

        Returns:
            SuccessResponse: Created rows under `data`
        """
        logger.info(f"Inserting into table: {table}")
        if not isinstance(payload, (dict, list)):
            payload = {}
        data = client.insert(table, payload)
        return SuccessResponse(data=data)

    @app.patch(
        "/api/{table}",
        dependencies=[Depends(require_api_key)],
        response_model=SuccessResponse,
    )
    def update_rows(
        table: str,
        update: UpdateRequest,
        client: SupabaseRestClient = Depends(get_rest_client),
    ):
        """
        Update the rows matching `update.filter` with `update.data`.

        Returns:
            SuccessResponse: Updated rows under `data`
        """
        logger.info(f"Updating table: {table}, filter columns: {list(update.filter)}")
        data = client.update(table, update.filter, update.data)
        return SuccessResponse(data=data)

    @app.delete(
        "/api/{table}",
        dependencies=[Depends(require_api_key)],
        response_model=DeleteResponse,
    )
    def delete_rows(
        table: str,
        deletion: DeleteRequest,
        client: SupabaseRestClient = Depends(get_rest_client),
    ):
        """
        Delete the rows matching `deletion.filter`.

        Supabase's response body is not relayed; a fixed confirmation is
        returned instead.
        """
        logger.info(f"Deleting from table: {table}, filter columns: {list(deletion.filter)}")
        client.delete(table, deletion.filter)
        return DeleteResponse()

    @app.get(
        "/api/{table}",
        dependencies=[Depends(require_api_key)],
        response_model=SuccessResponse,
    )
    def select_rows(
        table: str,
        request: Request,
        client: SupabaseRestClient = Depends(get_rest_client),
    ):
        """
        Select rows from a table.

        Query parameters `select` (default "*") and `limit` (default 100)
        are passed through; every other parameter is an equality filter.

        Returns:
            SuccessResponse: Matching rows under `data`
        """
        params = dict(request.query_params)
        logger.info(f"Selecting from table: {table}, params: {list(params)}")
        data = client.select(table, params)
        return SuccessResponse(data=data)

    # Exception handlers
    @app.exception_handler(BackendRejected)
    async def backend_rejected_handler(request, exc):
        """Relay a Supabase error with its own status code and body."""
        logger.warning(
            f"Supabase rejected {request.method} {request.url.path}: status {exc.status_code}"
        )
        return JSONResponse(
            content=ErrorResponse(error=exc.payload).model_dump(),
            status_code=exc.status_code,
        )

    @app.exception_handler(TransportFailure)
    async def transport_failure_handler(request, exc):
        """Report a failed Supabase round trip as 500 with its message."""
        return JSONResponse(
            content=ErrorResponse(error=exc.message).model_dump(),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc):
        """Convert HTTPExceptions to the bridge error format."""
        return JSONResponse(
            content=ErrorResponse(error=exc.detail).model_dump(),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        """Convert request validation errors to the bridge error format."""
        return JSONResponse(
            content=ErrorResponse(error=jsonable_encoder(exc.errors())).model_dump(),
            status_code=422,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        """Convert unhandled exceptions to the bridge error format."""
        logger.error(f"Unhandled exception: {exc}")
        return JSONResponse(
            content=ErrorResponse(error="Internal server error").model_dump(),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return app


def main() -> None:
    """Run the bridge with uvicorn using settings from the environment."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
