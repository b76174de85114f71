"""
Supabase REST Client Service

Translates bridge operations into single requests against the Supabase REST
API (PostgREST under /rest/v1) using the service role key, and reports
backend rejections and transport failures as exceptions.
"""

import json
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

REST_PATH = "/rest/v1"
DEFAULT_SELECT = "*"
DEFAULT_LIMIT = "100"


class BackendRejected(Exception):
    """The Supabase REST API answered with a non-2xx status."""

    def __init__(self, status_code: int, payload: Any):
        super().__init__(f"Supabase responded with status {status_code}")
        self.status_code = status_code
        self.payload = payload


class TransportFailure(Exception):
    """The request never produced a usable response (network error, bad JSON)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def render_value(value: Any) -> str:
    """
    Render a filter value the way it appears as JSON text.

    Strings are used verbatim; booleans and null use their JSON literals and
    integral floats drop the decimal part. Lists and objects are written as
    compact JSON.
    """
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_filter_query(filters: Iterable[Tuple[str, Any]]) -> str:
    """
    Build a PostgREST equality filter query string.

    Args:
        filters: (column, value) pairs, rendered in the given order

    Returns:
        str: e.g. "id=eq.5&status=eq.active"; values are not escaped
    """
    return "&".join(f"{key}=eq.{render_value(value)}" for key, value in filters)


def build_select_query(params: Mapping[str, Any]) -> str:
    """
    Build the query string for a read.

    `select` and `limit` are taken out of params (defaulting to "*" and 100)
    and every remaining parameter becomes an equality filter.

    Args:
        params: Caller query parameters

    Returns:
        str: e.g. "select=name&limit=10&status=eq.done"
    """
    filters = dict(params)
    select = filters.pop("select", DEFAULT_SELECT)
    limit = filters.pop("limit", DEFAULT_LIMIT)

    query = f"select={render_value(select)}&limit={render_value(limit)}"
    if filters:
        query += "&" + build_filter_query(filters.items())
    return query


class SupabaseRestClient:
    """
    Client for the Supabase REST API.

    Every request carries the service role key in both the `apikey` and
    `Authorization` headers. Each operation issues exactly one HTTP request;
    there are no retries.

    Example usage:
        client = SupabaseRestClient("https://xyz.supabase.co", service_key)

        # Insert rows and get the created representation back
        rows = client.insert("todos", {"title": "write tests"})

        # Update rows matching a filter
        rows = client.update("todos", {"id": 5}, {"status": "done"})

        # Read with projection, limit and equality filters
        rows = client.select("todos", {"select": "title", "status": "done"})
    """

    def __init__(self, base_url: str, service_key: str, timeout: Optional[float] = None):
        """
        Initialize the client.

        Args:
            base_url: Supabase project URL (e.g. 'https://xyz.supabase.co')
            service_key: Service role key used for every request
            timeout: Seconds to wait for Supabase, None waits indefinitely
        """
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "SupabaseRestClient":
        """Create a client from BridgeSettings."""
        return cls(
            base_url=settings.supabase_url,
            service_key=settings.supabase_service_role_key,
            timeout=settings.backend_timeout,
        )

    def table_url(self, table: str, query: str = "") -> str:
        """Return the REST endpoint for a table, with an optional query string."""
        url = f"{self.base_url}{REST_PATH}/{table}"
        if query:
            url += f"?{query}"
        return url

    def _headers(self, mutation: bool = False) -> Dict[str, str]:
        headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
        }
        if mutation:
            headers["Content-Type"] = "application/json"
            headers["Prefer"] = "return=representation"
        return headers

    def _request(
        self,
        method: str,
        url: str,
        mutation: bool = False,
        body: Any = None,
        parse_success: bool = True,
    ) -> Any:
        """
        Send one request and return the parsed JSON payload.

        Raises:
            BackendRejected: If Supabase responds with a non-2xx status
            TransportFailure: If the request fails or the body is not JSON
        """
        try:
            response = requests.request(
                method,
                url,
                headers=self._headers(mutation),
                json=body,
                timeout=self.timeout,
            )

            if not response.ok:
                raise BackendRejected(response.status_code, response.json())

            if not parse_success:
                return None
            return response.json()

        except (requests.RequestException, ValueError) as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportFailure(str(e)) from e

    def insert(self, table: str, payload: Any) -> Any:
        """
        Insert row(s) into a table.

        Args:
            table: Table name
            payload: Row object or list of rows, forwarded as-is

        Returns:
            The rows Supabase created
        """
        return self._request("POST", self.table_url(table), mutation=True, body=payload)

    def update(self, table: str, filters: Mapping[str, Any], payload: Any) -> Any:
        """
        Update the rows matching `filters`.

        Returns:
            The updated rows
        """
        url = self.table_url(table, build_filter_query(filters.items()))
        return self._request("PATCH", url, mutation=True, body=payload)

    def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        """Delete the rows matching `filters`. The success body is ignored."""
        url = self.table_url(table, build_filter_query(filters.items()))
        self._request("DELETE", url, parse_success=False)

    def select(self, table: str, params: Mapping[str, Any]) -> Any:
        """
        Read rows from a table.

        Args:
            table: Table name
            params: `select`, `limit` and equality filters

        Returns:
            The matching rows
        """
        return self._request("GET", self.table_url(table, build_select_query(params)))
