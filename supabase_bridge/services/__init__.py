"""
Supabase Bridge Services

Client for forwarding bridge operations to the Supabase REST API.
"""

from .rest_client import (
    BackendRejected,
    SupabaseRestClient,
    TransportFailure,
    build_filter_query,
    build_select_query,
)

__all__ = [
    "BackendRejected",
    "SupabaseRestClient",
    "TransportFailure",
    "build_filter_query",
    "build_select_query",
]
