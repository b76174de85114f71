"""
API key authentication handler for Supabase Bridge.

This module provides the FastAPI dependency that authenticates callers of the
table endpoints using the static shared secret sent in the x-api-key header.
"""

import secrets
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

API_KEY_HEADER = "x-api-key"

# API key security scheme; a missing header is reported by require_api_key
security = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


def require_api_key(
    request: Request,
    api_key: Annotated[Optional[str], Depends(security)],
) -> str:
    """
    Verify the caller's x-api-key header against the configured shared secret.

    This function is used as a FastAPI dependency in front of every table
    route, so a rejected request never reaches the Supabase REST API. The
    expected secret comes from the settings the app was created with.

    Args:
        request: Incoming request, used to reach the app settings
        api_key: Value of the x-api-key header, None if absent

    Returns:
        str: The verified API key

    Raises:
        HTTPException: 401 Unauthorized if the key is missing or doesn't match

    Example:
        @app.post("/api/{table}", dependencies=[Depends(require_api_key)])
        def insert_rows(table: str):
            # Key is already verified by dependency
            pass
    """
    expected_key = request.app.state.settings.api_key

    # compare_digest only accepts ASCII str, so compare the encoded bytes
    if api_key is None or not secrets.compare_digest(
        expected_key.encode("utf-8"), api_key.encode("utf-8")
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: Invalid API key",
        )

    return api_key
