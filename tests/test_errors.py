import asyncio
import functools

import httpx
from sqlalchemy.exc import OperationalError

from bakery.api import deps
from bakery.api.deps import respond
from bakery.config import settings
from bakery.errors import ACTION_ERRORS, ErrorCode, get_user_error_message, report_error
from bakery.main import app
from bakery.publishers.event_publisher import EventPublisher
from bakery.repositories.order_repository import OrderRepository
from bakery.schemas.order import OrderResult
from bakery.services import auth_client as auth_client_module
from bakery.services.auth_client import AuthClient, AuthServiceError

from conftest import auth_header


def test_respond_maps_error_codes_to_status():
    assert respond(OrderResult(success=True), 201).status_code == 201
    assert respond(OrderResult.fail(ErrorCode.DUPLICATE_PENDING, "x")).status_code == 409
    assert respond(OrderResult.fail(ErrorCode.BACKEND_UNAVAILABLE, "x")).status_code == 503
    assert respond(OrderResult(success=False, error="x")).status_code == 400


def test_user_message_is_generic_outside_development(monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    assert get_user_error_message(ValueError("boom"), "שגיאה") == "שגיאה"


def test_user_message_has_details_in_development(monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "development")
    message = get_user_error_message(ValueError("boom"), "שגיאה")
    assert message.startswith("שגיאה\n[Dev] boom")


def test_report_error_counts_by_action(caplog):
    counter = ACTION_ERRORS.labels(action="test_action", error_type="ValueError")
    before = counter._value.get()

    report_error(ValueError("boom"), "test_action", "user-1", {"items": 2})

    assert counter._value.get() == before + 1
    assert "test_action" in caplog.text


def test_database_failure_during_order_is_reported(client, order_payload, monkeypatch):
    def broken(self, user_id):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(OrderRepository, "has_pending", broken)
    response = client.post("/orders", json=order_payload, headers=auth_header("customer-token"))

    assert response.status_code == 503
    body = response.json()
    assert body["error_code"] == "backend_unavailable"
    assert body["error"] == "שגיאה בשליחת ההזמנה. אנא נסה שוב"


def test_publisher_disabled_does_not_connect(monkeypatch):
    monkeypatch.setattr(settings, "EVENTS_ENABLED", False)
    assert EventPublisher().publish_order_created({"order_id": "1"}) is False


def test_publish_failure_does_not_fail_order(client, order_payload, publisher, monkeypatch):
    def broken(data):
        raise RuntimeError("broker down")

    monkeypatch.setattr(publisher, "publish_order_created", broken)
    response = client.post("/orders", json=order_payload, headers=auth_header("customer-token"))
    assert response.status_code == 201


def mock_auth_client(monkeypatch, handler):
    transport = httpx.MockTransport(handler)
    monkeypatch.setattr(
        auth_client_module.httpx,
        "AsyncClient",
        functools.partial(httpx.AsyncClient, transport=transport),
    )
    return AuthClient(base_url="http://auth.test", api_key="anon")


def test_auth_client_resolves_user(monkeypatch):
    def handler(request):
        assert request.url.path == "/auth/v1/user"
        assert request.headers["authorization"] == "Bearer good"
        assert request.headers["apikey"] == "anon"
        return httpx.Response(200, json={
            "id": "u1",
            "email": "dana@example.com",
            "user_metadata": {"full_name": "Dana Levi"},
        })

    client = mock_auth_client(monkeypatch, handler)
    user = asyncio.run(client.get_user("good"))
    assert user.id == "u1"
    assert user.full_name == "Dana Levi"


def test_auth_client_rejected_token(monkeypatch):
    client = mock_auth_client(monkeypatch, lambda request: httpx.Response(401))
    assert asyncio.run(client.get_user("expired")) is None


def test_auth_client_password_sign_in(monkeypatch):
    def handler(request):
        assert request.url.params["grant_type"] == "password"
        return httpx.Response(200, json={
            "access_token": "a",
            "refresh_token": "r",
            "user": {"id": "u1", "email": "admin@example.com"},
        })

    client = mock_auth_client(monkeypatch, handler)
    session = asyncio.run(client.sign_in_with_password("admin@example.com", "secret"))
    assert session.access_token == "a"
    assert session.user.id == "u1"


def test_auth_client_bad_credentials(monkeypatch):
    client = mock_auth_client(monkeypatch, lambda request: httpx.Response(400))
    assert asyncio.run(client.sign_in_with_password("admin@example.com", "nope")) is None


def test_auth_provider_error_is_service_unavailable(client, order_payload):
    class FailingAuthClient:
        async def get_user(self, access_token):
            raise AuthServiceError("Unexpected status code: 500")

    app.dependency_overrides[deps.get_auth_client] = lambda: FailingAuthClient()
    response = client.post("/orders", json=order_payload, headers=auth_header("customer-token"))

    assert response.status_code == 503
    assert response.json()["detail"] == "שירות ההתחברות אינו זמין כרגע"
