from datetime import date, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from bakery.models.order import Order
from bakery.repositories.profile_repository import ProfileRepository
from bakery.services.admin_service import AdminService
from bakery.services.view_cache import ViewCache
from bakery.utils.delivery import get_next_delivery_day, today_local

from conftest import ADMIN, FakePublisher, auth_header

ADMIN_AUTH = auth_header("admin-token")
CUSTOMER_AUTH = auth_header("customer-token")


def add_order(db_session, user_id="customer-1", status="pending", archived=False, delivery_date=None, total=48):
    order = Order(
        user_id=user_id,
        customer_name="Dana Levi",
        customer_phone="0501234567",
        delivery_date=delivery_date or today_local() + timedelta(days=3),
        items=[{"productId": 1, "name": "Sourdough", "quantity": 2, "unitPrice": total / 2}],
        total_price=total,
        status=status,
        archived=archived,
    )
    db_session.add(order)
    db_session.commit()
    return order


@pytest.mark.parametrize("method,path", [
    ("get", "/admin/orders"),
    ("get", "/admin/orders/stats"),
    ("get", "/admin/catalog/revisions"),
    ("post", "/admin/catalog/editor"),
])
def test_admin_endpoints_reject_anonymous_and_customers(client, admin_profile, method, path):
    assert getattr(client, method)(path).status_code == 401
    assert getattr(client, method)(path, headers=CUSTOMER_AUTH).status_code == 403


def test_customer_cannot_change_status(client, admin_profile, db_session):
    order = add_order(db_session)
    response = client.patch(
        f"/admin/orders/{order.id}/status",
        json={"status": "confirmed"},
        headers=CUSTOMER_AUTH,
    )
    assert response.status_code == 403
    db_session.expire_all()
    assert db_session.get(Order, order.id).status == "pending"


def test_list_orders_hides_archived_by_default(client, admin_profile, db_session):
    add_order(db_session)
    add_order(db_session, user_id="customer-2", archived=True)

    active = client.get("/admin/orders", headers=ADMIN_AUTH).json()
    assert active["success"] is True
    assert active["total"] == 1
    assert active["orders"][0]["archived"] is False

    archive = client.get("/admin/orders", params={"archived": "true"}, headers=ADMIN_AUTH).json()
    assert archive["total"] == 1
    assert archive["orders"][0]["archived"] is True


def test_list_orders_filters(client, admin_profile, db_session):
    later = today_local() + timedelta(days=10)
    add_order(db_session, status="confirmed")
    add_order(db_session, delivery_date=later)

    by_status = client.get("/admin/orders", params={"status": "confirmed"}, headers=ADMIN_AUTH).json()
    assert [o["status"] for o in by_status["orders"]] == ["confirmed"]

    by_date = client.get(
        "/admin/orders", params={"delivery_date": later.isoformat()}, headers=ADMIN_AUTH
    ).json()
    assert by_date["total"] == 1
    assert by_date["orders"][0]["delivery_date"] == later.isoformat()


def test_list_orders_normalizes_legacy_items(client, admin_profile, db_session):
    order = add_order(db_session, status="completed")
    order.items = {"Sourdough": 2}
    db_session.commit()

    orders = client.get("/admin/orders", headers=ADMIN_AUTH).json()["orders"]
    assert orders[0]["items"] == [
        {"product_id": None, "name": "Sourdough", "quantity": 2, "unit_price": None}
    ]
    assert orders[0]["status_label"] == "הושלם"


def test_update_status_returns_persisted_order(client, admin_profile, db_session, publisher):
    order = add_order(db_session)

    response = client.patch(
        f"/admin/orders/{order.id}/status",
        json={"status": "confirmed"},
        headers=ADMIN_AUTH,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["order"]["id"] == order.id
    assert body["order"]["status"] == "confirmed"
    assert publisher.types() == ["OrderStatusChanged"]
    assert publisher.events[0][1]["old_status"] == "pending"


def test_update_status_rejects_legacy_status(client, admin_profile, db_session):
    order = add_order(db_session)
    response = client.patch(
        f"/admin/orders/{order.id}/status",
        json={"status": "completed"},
        headers=ADMIN_AUTH,
    )
    assert response.status_code == 422


def test_update_status_unknown_order(client, admin_profile):
    response = client.patch(
        "/admin/orders/missing/status",
        json={"status": "confirmed"},
        headers=ADMIN_AUTH,
    )
    assert response.status_code == 404


def test_status_change_refreshes_customer_history(client, admin_profile, order_payload):
    order_id = client.post("/orders", json=order_payload, headers=CUSTOMER_AUTH).json()["order_id"]
    assert client.get("/orders/mine", headers=CUSTOMER_AUTH).json()["orders"][0]["status"] == "pending"

    client.patch(f"/admin/orders/{order_id}/status", json={"status": "ready"}, headers=ADMIN_AUTH)

    orders = client.get("/orders/mine", headers=CUSTOMER_AUTH).json()["orders"]
    assert orders[0]["status"] == "ready"


def test_archive_is_independent_of_status(client, admin_profile, db_session, publisher):
    order = add_order(db_session, status="delivered")

    response = client.patch(
        f"/admin/orders/{order.id}/archive",
        json={"archived": True},
        headers=ADMIN_AUTH,
    )
    assert response.status_code == 200
    assert response.json()["order"]["archived"] is True
    assert response.json()["order"]["status"] == "delivered"

    restored = client.patch(
        f"/admin/orders/{order.id}/archive",
        json={"archived": False},
        headers=ADMIN_AUTH,
    ).json()
    assert restored["order"]["archived"] is False
    assert publisher.types() == ["OrderArchived", "OrderArchived"]


def test_archive_unknown_order(client, admin_profile):
    response = client.patch("/admin/orders/missing/archive", json={"archived": True}, headers=ADMIN_AUTH)
    assert response.status_code == 404


def test_stats(client, admin_profile, db_session):
    next_date = get_next_delivery_day()
    far_date = next_date + timedelta(days=30)

    add_order(db_session, status="pending", delivery_date=next_date, total=48)
    add_order(db_session, user_id="customer-2", status="confirmed", delivery_date=next_date, total=56)
    add_order(db_session, user_id="customer-3", status="cancelled", delivery_date=next_date, total=24)
    add_order(db_session, user_id="customer-4", status="delivered", delivery_date=far_date, total=28)
    add_order(db_session, user_id="customer-5", status="delivered", archived=True, total=100)

    response = client.get("/admin/orders/stats", headers=ADMIN_AUTH)
    assert response.status_code == 200
    stats = response.json()["stats"]

    assert stats["total"] == 4
    assert stats["pending"] == 1
    assert stats["confirmed"] == 1
    assert stats["delivered"] == 1
    assert stats["archived"] == 1
    assert stats["total_income"] == 48 + 56 + 28
    assert stats["next_delivery_date"] == next_date.isoformat()
    assert stats["next_delivery"] == 3
    assert stats["next_delivery_pending"] == 1
    assert stats["next_delivery_cancelled"] == 1
    assert stats["next_delivery_income"] == 48 + 56
    assert stats["next_delivery_pending_income"] == 48


@pytest.mark.parametrize("today,expected", [
    (date(2026, 10, 19), date(2026, 10, 20)),  # Monday -> Tuesday
    (date(2026, 10, 22), date(2026, 10, 23)),  # Thursday -> Friday
    (date(2026, 10, 20), date(2026, 10, 23)),  # Tuesday -> Friday
])
def test_stats_next_delivery_is_nearest_delivery_day(db_session, admin_profile, today, expected):
    add_order(db_session, delivery_date=expected, total=48)
    add_order(db_session, user_id="customer-2", delivery_date=expected + timedelta(days=7), total=56)

    service = AdminService(db_session, ViewCache(ttl=300), FakePublisher(), today=lambda: today)
    stats = service.get_stats(ADMIN).stats

    assert stats.next_delivery_date == expected
    assert stats.next_delivery == 1
    assert stats.next_delivery_income == 48


def test_role_lookup_failure_is_backend_unavailable(client, admin_profile, monkeypatch):
    def broken_get_role(self, user_id):
        raise OperationalError("SELECT role FROM profiles", {}, Exception("database is down"))

    monkeypatch.setattr(ProfileRepository, "get_role", broken_get_role)

    response = client.get("/admin/orders", headers=ADMIN_AUTH)
    assert response.status_code == 503
    assert response.json()["error_code"] == "backend_unavailable"

    catalog = [{"title": "Rye", "price": 26, "breads": [{"id": 3, "name": "Dark"}]}]
    saved = client.put("/admin/catalog", json={"categories": catalog}, headers=ADMIN_AUTH)
    assert saved.status_code == 503
