"""
Tests for the bridge HTTP endpoints

Exercises each table route end to end through the FastAPI app with the
outbound Supabase call mocked:
- Authentication via x-api-key
- Success response shaping per verb
- Relay of backend errors and transport failures
"""

import pytest
import requests
from fastapi.testclient import TestClient

from supabase_bridge.config import BridgeSettings
from supabase_bridge.main import create_app

from conftest import SERVICE_KEY, SUPABASE_URL, make_response

TABLE_URL = f"{SUPABASE_URL}/rest/v1/todos"

# (method, path, request kwargs) for every authenticated table operation
TABLE_OPERATIONS = [
    ("POST", "/api/todos", {"json": {"title": "x"}}),
    ("PATCH", "/api/todos", {"json": {"filter": {"id": 5}, "data": {"title": "y"}}}),
    ("DELETE", "/api/todos", {"json": {"filter": {"id": 5}}}),
    ("GET", "/api/todos", {}),
]


class TestHealth:

    def test_health_without_auth(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["service"] == "supabase-bridge-api"
        assert body["timestamp"].endswith("Z")

    def test_health_ignores_bad_key(self, client):
        response = client.get("/health", headers={"x-api-key": "wrong"})

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestAuthentication:

    @pytest.mark.parametrize("method,path,kwargs", TABLE_OPERATIONS)
    def test_missing_key_is_rejected(self, client, mock_request, method, path, kwargs):
        response = client.request(method, path, **kwargs)

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized: Invalid API key"}
        mock_request.assert_not_called()

    @pytest.mark.parametrize("method,path,kwargs", TABLE_OPERATIONS)
    def test_wrong_key_is_rejected(self, client, mock_request, method, path, kwargs):
        response = client.request(method, path, headers={"x-api-key": "wrong"}, **kwargs)

        assert response.status_code == 401
        assert "error" in response.json()
        mock_request.assert_not_called()

    def test_key_comparison_is_exact(self, client, mock_request, auth_headers):
        extended = {"x-api-key": auth_headers["x-api-key"] + "x"}

        response = client.get("/api/todos", headers=extended)

        assert response.status_code == 401
        mock_request.assert_not_called()

    def test_rejected_before_body_validation(self, client, mock_request):
        response = client.request("DELETE", "/api/todos", json={})

        assert response.status_code == 401

    def test_caller_credentials_are_not_forwarded(self, client, mock_request, auth_headers):
        mock_request.return_value = make_response(200, [])
        headers = {
            **auth_headers,
            "apikey": "caller-key",
            "Authorization": "Bearer caller-token",
        }

        client.get("/api/todos", headers=headers)

        sent_headers = mock_request.call_args.kwargs["headers"]
        assert sent_headers["apikey"] == SERVICE_KEY
        assert sent_headers["Authorization"] == f"Bearer {SERVICE_KEY}"


class TestCreate:

    def test_create_returns_201_with_backend_payload(self, client, mock_request, auth_headers):
        created = [{"id": 1, "title": "x"}]
        mock_request.return_value = make_response(201, created)

        response = client.post("/api/todos", json={"title": "x"}, headers=auth_headers)

        assert response.status_code == 201
        assert response.json() == {"success": True, "data": created}
        args, kwargs = mock_request.call_args
        assert args == ("POST", TABLE_URL)
        assert kwargs["json"] == {"title": "x"}

    def test_create_forwards_list_body(self, client, mock_request, auth_headers):
        rows = [{"title": "a"}, {"title": "b"}]
        mock_request.return_value = make_response(201, rows)

        response = client.post("/api/todos", json=rows, headers=auth_headers)

        assert response.status_code == 201
        assert mock_request.call_args.kwargs["json"] == rows

    def test_create_without_body_forwards_empty_object(self, client, mock_request, auth_headers):
        mock_request.return_value = make_response(201, [{"id": 1}])

        response = client.post("/api/todos", headers=auth_headers)

        assert response.status_code == 201
        assert mock_request.call_args.kwargs["json"] == {}

    def test_create_with_non_json_content_type_forwards_empty_object(
        self, client, mock_request, auth_headers
    ):
        mock_request.return_value = make_response(201, [{"id": 1}])
        headers = {**auth_headers, "Content-Type": "text/plain"}

        response = client.post("/api/todos", content=b'{"title": "x"}', headers=headers)

        assert response.status_code == 201
        assert mock_request.call_args.kwargs["json"] == {}


class TestUpdate:

    def test_update_builds_filter_query(self, client, mock_request, auth_headers):
        updated = [{"id": 5, "status": "active", "title": "y"}]
        mock_request.return_value = make_response(200, updated)

        response = client.patch(
            "/api/todos",
            json={"filter": {"id": 5, "status": "active"}, "data": {"title": "y"}},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": updated}
        args, kwargs = mock_request.call_args
        assert args == ("PATCH", f"{TABLE_URL}?id=eq.5&status=eq.active")
        assert kwargs["json"] == {"title": "y"}

    def test_update_without_filter_is_rejected(self, client, mock_request, auth_headers):
        response = client.patch("/api/todos", json={"data": {"title": "y"}}, headers=auth_headers)

        assert response.status_code == 422
        assert "error" in response.json()
        mock_request.assert_not_called()


class TestDelete:

    def test_delete_returns_fixed_confirmation(self, client, mock_request, auth_headers):
        mock_request.return_value = make_response(200, [{"id": 5}])

        response = client.request(
            "DELETE", "/api/todos", json={"filter": {"id": 5}}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Deleted successfully"}
        args, kwargs = mock_request.call_args
        assert args == ("DELETE", f"{TABLE_URL}?id=eq.5")
        assert kwargs["json"] is None

    def test_delete_without_filter_is_rejected(self, client, mock_request, auth_headers):
        response = client.request("DELETE", "/api/todos", json={}, headers=auth_headers)

        assert response.status_code == 422
        mock_request.assert_not_called()


class TestRead:

    def test_read_defaults(self, client, mock_request, auth_headers):
        rows = [{"id": 1}]
        mock_request.return_value = make_response(200, rows)

        response = client.get("/api/todos", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": rows}
        args, _ = mock_request.call_args
        assert args == ("GET", f"{TABLE_URL}?select=*&limit=100")

    def test_read_with_projection_limit_and_filter(self, client, mock_request, auth_headers):
        mock_request.return_value = make_response(200, [])

        client.get("/api/todos?select=name&limit=10&status=done", headers=auth_headers)

        args, _ = mock_request.call_args
        assert args == ("GET", f"{TABLE_URL}?select=name&limit=10&status=eq.done")


class TestBackendErrors:

    @pytest.mark.parametrize("method,path,kwargs", TABLE_OPERATIONS)
    def test_backend_status_and_body_are_relayed(
        self, client, mock_request, auth_headers, method, path, kwargs
    ):
        error_body = {"code": "23505", "message": "duplicate key value"}
        mock_request.return_value = make_response(409, error_body)

        response = client.request(method, path, headers=auth_headers, **kwargs)

        assert response.status_code == 409
        assert response.json() == {"error": error_body}

    @pytest.mark.parametrize("method,path,kwargs", TABLE_OPERATIONS)
    def test_transport_failure_is_500(
        self, client, mock_request, auth_headers, method, path, kwargs
    ):
        mock_request.side_effect = requests.ConnectionError("backend unreachable")

        response = client.request(method, path, headers=auth_headers, **kwargs)

        assert response.status_code == 500
        assert response.json() == {"error": "backend unreachable"}

    def test_non_json_success_body_is_500(self, client, mock_request, auth_headers):
        mock_request.return_value = make_response(200, json_error=ValueError("not json"))

        response = client.get("/api/todos", headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"error": "not json"}


class TestFramework:

    def test_unknown_route_uses_error_format(self, client):
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}

    def test_cors_preflight_allowed(self, client):
        response = client.options(
            "/api/todos",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "PATCH",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_startup_logs_default_key_warning(self, caplog):
        default_settings = BridgeSettings(
            supabase_url=SUPABASE_URL,
            supabase_service_role_key=SERVICE_KEY,
        )

        with caplog.at_level("INFO", logger="supabase_bridge.main"):
            with TestClient(create_app(default_settings)):
                pass

        assert "USING DEFAULT" in caplog.text
        assert SERVICE_KEY not in caplog.text
