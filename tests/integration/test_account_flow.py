"""Integration tests: auth, provisioning, balance requests, admin adjustments.

Pre-condition: PostgreSQL running and `alembic upgrade head` applied.
Uses the session-scoped fixtures from tests/integration/conftest.py.
"""

import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio(loop_scope="session")

PASSWORD = "TestPass123"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _new_user(client: AsyncClient) -> tuple[str, dict[str, str]]:
    email = f"acct_{uuid.uuid4().hex[:10]}@example.com"
    reg = await client.post(
        "/api/v1/auth/register", json={"email": email, "password": PASSWORD}
    )
    assert reg.status_code == 201, reg.text
    login = await client.post(
        "/api/v1/auth/login", json={"email": email, "password": PASSWORD}
    )
    token = login.json()["data"]["access_token"]
    return reg.json()["data"]["user_id"], {"Authorization": f"Bearer {token}"}


async def _balance(client: AsyncClient, headers: dict[str, str]) -> int:
    resp = await client.get("/api/v1/account/balance", headers=headers)
    assert resp.status_code == 200, resp.text
    return int(resp.json()["data"]["balance_cents"])


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestAuth:
    async def test_duplicate_email_is_conflict(self, client: AsyncClient) -> None:
        email = f"dup_{uuid.uuid4().hex[:10]}@example.com"
        body = {"email": email, "password": PASSWORD}
        assert (await client.post("/api/v1/auth/register", json=body)).status_code == 201
        resp = await client.post("/api/v1/auth/register", json=body)
        assert resp.status_code == 409
        assert resp.json()["code"] == 1001

    async def test_wrong_password(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@example.com", "password": "Wrong1pass"},
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1002

    async def test_me(self, client: AsyncClient) -> None:
        user_id, headers = await _new_user(client)
        resp = await client.get("/api/v1/auth/me", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["user_id"] == user_id
        assert resp.json()["data"]["is_admin"] is False

    async def test_non_admin_gets_403(self, client: AsyncClient) -> None:
        _, headers = await _new_user(client)
        resp = await client.get("/api/v1/admin/stats", headers=headers)
        assert resp.status_code == 403


class TestProvisioning:
    async def test_new_user_has_zero_balance(self, client: AsyncClient) -> None:
        _, headers = await _new_user(client)
        assert await _balance(client, headers) == 0

    async def test_provision_is_idempotent(self, client: AsyncClient) -> None:
        _, headers = await _new_user(client)
        resp = await client.post("/api/v1/account/provision", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["created"] is False


class TestBalanceRequests:
    async def test_approve_credits_once(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        _, headers = await _new_user(client)
        submit = await client.post(
            "/api/v1/balance-requests",
            json={"amount_cents": 2000, "receipt_ref": "https://cdn.example.com/r/1.png"},
            headers=headers,
        )
        assert submit.status_code == 201, submit.text
        request_id = submit.json()["data"]["id"]
        assert await _balance(client, headers) == 0

        approve = await client.post(
            f"/api/v1/admin/balance-requests/{request_id}/approve", headers=admin_headers
        )
        assert approve.status_code == 200, approve.text
        assert approve.json()["data"]["balance_cents"] == 2000
        assert await _balance(client, headers) == 2000

        again = await client.post(
            f"/api/v1/admin/balance-requests/{request_id}/approve", headers=admin_headers
        )
        assert again.status_code == 409
        assert again.json()["code"] == 3002
        assert await _balance(client, headers) == 2000

        ledger = await client.get("/api/v1/account/ledger", headers=headers)
        entries = ledger.json()["data"]["items"]
        assert [e["entry_type"] for e in entries] == ["DEPOSIT_APPROVED"]

    async def test_reject_has_no_effect(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        _, headers = await _new_user(client)
        submit = await client.post(
            "/api/v1/balance-requests",
            json={"amount_cents": 900, "receipt_ref": "sha256:abc"},
            headers=headers,
        )
        request_id = submit.json()["data"]["id"]
        resp = await client.post(
            f"/api/v1/admin/balance-requests/{request_id}/reject", headers=admin_headers
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["request"]["status"] == "REJECTED"
        assert await _balance(client, headers) == 0

    async def test_zero_amount_rejected(self, client: AsyncClient) -> None:
        _, headers = await _new_user(client)
        resp = await client.post(
            "/api/v1/balance-requests",
            json={"amount_cents": 0, "receipt_ref": "x"},
            headers=headers,
        )
        assert resp.status_code == 422


class TestManualAdjust:
    async def test_subtract_respects_non_negative_balance(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        user_id, headers = await _new_user(client)
        url = f"/api/v1/admin/users/{user_id}/balance"
        await client.post(url, json={"amount_cents": 5000, "direction": "add"}, headers=admin_headers)

        first = await client.post(
            url, json={"amount_cents": 3000, "direction": "subtract"}, headers=admin_headers
        )
        assert first.status_code == 200
        assert await _balance(client, headers) == 2000

        second = await client.post(
            url, json={"amount_cents": 3000, "direction": "subtract"}, headers=admin_headers
        )
        assert second.status_code == 422
        assert second.json()["code"] == 2001
        assert await _balance(client, headers) == 2000

    async def test_toggle_admin_round_trip(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        user_id, _ = await _new_user(client)
        url = f"/api/v1/admin/users/{user_id}/toggle-admin"
        promoted = await client.post(url, headers=admin_headers)
        assert promoted.json()["data"]["is_admin"] is True
        demoted = await client.post(url, headers=admin_headers)
        assert demoted.json()["data"]["is_admin"] is False
