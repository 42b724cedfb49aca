"""Integration tests: catalog, order placement, status changes, reconciliation.

Pre-condition: PostgreSQL running and `alembic upgrade head` applied.
"""

import asyncio
import uuid

import pytest
from httpx import AsyncClient, Response

pytestmark = pytest.mark.asyncio(loop_scope="session")

PASSWORD = "TestPass123"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _funded_user(
    client: AsyncClient, admin_headers: dict[str, str], amount: int
) -> dict[str, str]:
    email = f"ord_{uuid.uuid4().hex[:10]}@example.com"
    reg = await client.post(
        "/api/v1/auth/register", json={"email": email, "password": PASSWORD}
    )
    user_id = reg.json()["data"]["user_id"]
    await client.post(
        f"/api/v1/admin/users/{user_id}/balance",
        json={"amount_cents": amount, "direction": "add"},
        headers=admin_headers,
    )
    login = await client.post(
        "/api/v1/auth/login", json={"email": email, "password": PASSWORD}
    )
    return {"Authorization": f"Bearer {login.json()['data']['access_token']}"}


async def _make_service(
    client: AsyncClient, admin_headers: dict[str, str], price_cents: int
) -> tuple[str, str]:
    suffix = uuid.uuid4().hex[:8]
    cat = await client.post(
        "/api/v1/admin/categories", json={"name": f"Cat {suffix}"}, headers=admin_headers
    )
    assert cat.status_code == 201, cat.text
    category_id = cat.json()["data"]["id"]
    svc = await client.post(
        "/api/v1/admin/services",
        json={"category_id": category_id, "name": f"Svc {suffix}", "price_cents": price_cents},
        headers=admin_headers,
    )
    assert svc.status_code == 201, svc.text
    return category_id, svc.json()["data"]["id"]


async def _balance(client: AsyncClient, headers: dict[str, str]) -> int:
    resp = await client.get("/api/v1/account/balance", headers=headers)
    return int(resp.json()["data"]["balance_cents"])


async def _place(
    client: AsyncClient, headers: dict[str, str], service_id: str, quantity: int
) -> Response:
    return await client.post(
        "/api/v1/orders",
        json={"service_id": service_id, "quantity": quantity},
        headers=headers,
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestPlaceOrder:
    async def test_order_debits_total(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        headers = await _funded_user(client, admin_headers, 3500)
        _, service_id = await _make_service(client, admin_headers, 500)

        resp = await _place(client, headers, service_id, 4000)

        assert resp.status_code == 201, resp.text
        data = resp.json()["data"]
        assert data["order"]["total_price_cents"] == 2000
        assert data["order"]["status"] == "PENDING"
        assert data["balance_cents"] == 1500
        assert await _balance(client, headers) == 1500

    async def test_insufficient_balance_persists_nothing(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        headers = await _funded_user(client, admin_headers, 1500)
        _, service_id = await _make_service(client, admin_headers, 1000)

        resp = await _place(client, headers, service_id, 2000)

        assert resp.status_code == 422
        assert resp.json()["code"] == 2001
        assert await _balance(client, headers) == 1500
        orders = await client.get("/api/v1/orders", headers=headers)
        assert orders.json()["data"]["items"] == []

    async def test_concurrent_orders_cannot_overspend(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        headers = await _funded_user(client, admin_headers, 2000)
        _, service_id = await _make_service(client, admin_headers, 1000)

        results = await asyncio.gather(
            _place(client, headers, service_id, 2000),
            _place(client, headers, service_id, 2000),
        )

        assert sorted(r.status_code for r in results) == [201, 422]
        assert await _balance(client, headers) == 0

    async def test_price_change_does_not_touch_placed_orders(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        headers = await _funded_user(client, admin_headers, 10000)
        _, service_id = await _make_service(client, admin_headers, 500)
        placed = await _place(client, headers, service_id, 1000)
        order_id = placed.json()["data"]["order"]["id"]

        upd = await client.put(
            f"/api/v1/admin/services/{service_id}",
            json={"price_cents": 900},
            headers=admin_headers,
        )
        assert upd.status_code == 200, upd.text

        order = await client.get(f"/api/v1/orders/{order_id}", headers=headers)
        assert order.json()["data"]["total_price_cents"] == 500
        assert order.json()["data"]["unit_price_cents"] == 500


class TestOrderStatus:
    async def test_cancel_refunds_and_is_terminal(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        headers = await _funded_user(client, admin_headers, 3500)
        _, service_id = await _make_service(client, admin_headers, 500)
        placed = await _place(client, headers, service_id, 4000)
        order_id = placed.json()["data"]["order"]["id"]
        url = f"/api/v1/admin/orders/{order_id}/status"

        processing = await client.post(url, json={"status": "PROCESSING"}, headers=admin_headers)
        assert processing.status_code == 200
        cancelled = await client.post(url, json={"status": "CANCELLED"}, headers=admin_headers)
        assert cancelled.status_code == 200
        assert cancelled.json()["data"]["refunded_cents"] == 2000
        assert await _balance(client, headers) == 3500

        again = await client.post(url, json={"status": "COMPLETED"}, headers=admin_headers)
        assert again.status_code == 409
        assert again.json()["code"] == 5002

    async def test_pending_cannot_skip_to_completed(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        headers = await _funded_user(client, admin_headers, 1000)
        _, service_id = await _make_service(client, admin_headers, 500)
        placed = await _place(client, headers, service_id, 1000)
        order_id = placed.json()["data"]["order"]["id"]

        resp = await client.post(
            f"/api/v1/admin/orders/{order_id}/status",
            json={"status": "COMPLETED"},
            headers=admin_headers,
        )
        assert resp.status_code == 409

    async def test_other_users_order_is_not_visible(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        owner = await _funded_user(client, admin_headers, 1000)
        other = await _funded_user(client, admin_headers, 100)
        _, service_id = await _make_service(client, admin_headers, 500)
        placed = await _place(client, owner, service_id, 1000)
        order_id = placed.json()["data"]["order"]["id"]

        resp = await client.get(f"/api/v1/orders/{order_id}", headers=other)
        assert resp.status_code == 404


class TestCatalogDeletion:
    async def test_delete_category_removes_services_keeps_orders(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        headers = await _funded_user(client, admin_headers, 5000)
        category_id, service_id = await _make_service(client, admin_headers, 500)
        for i in range(2):
            await client.post(
                "/api/v1/admin/services",
                json={"category_id": category_id, "name": f"Extra {i}", "price_cents": 700},
                headers=admin_headers,
            )
        placed = await _place(client, headers, service_id, 1000)
        order_id = placed.json()["data"]["order"]["id"]

        resp = await client.delete(
            f"/api/v1/admin/categories/{category_id}", headers=admin_headers
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["deleted_services"] == 3

        listed = await client.get(
            "/api/v1/catalog/services", params={"category_id": category_id}, headers=headers
        )
        assert listed.json()["data"] == []
        retry = await _place(client, headers, service_id, 1000)
        assert retry.status_code == 404
        kept = await client.get(f"/api/v1/orders/{order_id}", headers=headers)
        assert kept.status_code == 200
        assert kept.json()["data"]["service_name"].startswith("Svc ")


class TestReconciliation:
    async def test_invariants_hold(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        resp = await client.get("/api/v1/admin/invariants", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["data"] == {"ok": True, "violations": []}

    async def test_stats(self, client: AsyncClient, admin_headers: dict[str, str]) -> None:
        resp = await client.get("/api/v1/admin/stats", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["total_users"] >= 1
