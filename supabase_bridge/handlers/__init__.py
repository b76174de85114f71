"""
Authentication handlers for Supabase Bridge.
"""

from .auth import API_KEY_HEADER, require_api_key

__all__ = ["API_KEY_HEADER", "require_api_key"]
