"""
Supabase Bridge

Authenticated proxy that forwards table operations to the Supabase REST API
using a service role key callers never see.
"""

__version__ = "1.0.0"
