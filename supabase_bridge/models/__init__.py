"""
Supabase Bridge Models Package

Pydantic models for bridge request and response envelopes.
"""

from .bridge import (
    UpdateRequest,
    DeleteRequest,
    SuccessResponse,
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
    SERVICE_NAME,
    DELETED_MESSAGE,
)

__all__ = [
    "UpdateRequest",
    "DeleteRequest",
    "SuccessResponse",
    "DeleteResponse",
    "ErrorResponse",
    "HealthResponse",
    "SERVICE_NAME",
    "DELETED_MESSAGE",
]
