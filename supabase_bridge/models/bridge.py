"""
Bridge Request and Response Models

Pydantic models for the envelopes exchanged with callers of the bridge.
Table payloads are passed through untouched; only the envelope is modelled.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


SERVICE_NAME = "supabase-bridge-api"
DELETED_MESSAGE = "Deleted successfully"


class UpdateRequest(BaseModel):
    """
    PATCH /api/{table} body

    `filter` selects the rows by column equality, `data` holds the new values.
    """
    filter: Dict[str, Any]  # Column name -> equality value
    data: Any = None  # Columns to update

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "filter": {"id": 5},
                "data": {"status": "done"}
            }
        }
    )


class DeleteRequest(BaseModel):
    """DELETE /api/{table} body"""
    filter: Dict[str, Any]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "filter": {"id": 5}
            }
        }
    )


class SuccessResponse(BaseModel):
    """Successful insert, update or select with the backend payload under `data`."""
    success: bool = True
    data: Any = None


class DeleteResponse(BaseModel):
    """Successful delete; the backend body is not relayed."""
    success: bool = True
    message: str = DELETED_MESSAGE


class ErrorResponse(BaseModel):
    """
    Error Response

    `error` is either a message string or the backend's parsed error body.
    """
    error: Any

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Unauthorized: Invalid API key"
            }
        }
    )


class HealthResponse(BaseModel):
    """Health check payload"""
    status: str = "ok"
    service: str = SERVICE_NAME
    timestamp: str  # ISO-8601 UTC, e.g. 2024-01-01T00:00:00.000Z
