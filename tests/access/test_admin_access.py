"""Tests for admin pending-user and access code management."""

import uuid

from httpx import AsyncClient


class TestPendingUsers:
    async def test_admin_lists_pending(self, client: AsyncClient, identity, admin):
        for email in ("one@loomero.dev", "two@loomero.dev"):
            await client.post("/api/v1/auth/request-access", headers=identity(email=email).headers)

        response = await client.get("/api/v1/admin/pending-users", headers=admin.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert {p["email"] for p in data["pending_users"]} == {"one@loomero.dev", "two@loomero.dev"}

    async def test_non_admin_forbidden(self, client: AsyncClient, mentor):
        response = await client.get("/api/v1/admin/pending-users", headers=mentor.headers)
        assert response.status_code == 403

    async def test_user_without_profile_forbidden(self, client: AsyncClient, identity):
        response = await client.get("/api/v1/admin/pending-users", headers=identity().headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Profile setup required"

    async def test_approve_unknown_email(self, client: AsyncClient, admin, mock_email_service):
        response = await client.post(
            "/api/v1/admin/pending-users/approve",
            headers=admin.headers,
            json={"email": "ghost@loomero.dev", "role": "intern"},
        )
        assert response.status_code == 404
        mock_email_service.send_template.assert_not_awaited()

    async def test_approve_removes_pending_row(self, client: AsyncClient, identity, admin, mock_email_service):
        await client.post("/api/v1/auth/request-access", headers=identity(email="move@loomero.dev").headers)
        await client.post(
            "/api/v1/admin/pending-users/approve",
            headers=admin.headers,
            json={"email": "move@loomero.dev", "role": "intern"},
        )
        response = await client.get("/api/v1/admin/pending-users", headers=admin.headers)
        assert response.json()["total"] == 0

    async def test_approval_survives_email_failure(self, client: AsyncClient, identity, admin, mock_email_service):
        mock_email_service.send_template.side_effect = RuntimeError("provider down")
        await client.post("/api/v1/auth/request-access", headers=identity(email="flaky@loomero.dev").headers)
        response = await client.post(
            "/api/v1/admin/pending-users/approve",
            headers=admin.headers,
            json={"email": "flaky@loomero.dev", "role": "intern"},
        )
        assert response.status_code == 200
        assert response.json()["email_sent"] is False

    async def test_reject_pending(self, client: AsyncClient, identity, admin):
        user = identity()
        pending = await client.post("/api/v1/auth/request-access", headers=user.headers)
        response = await client.delete(f"/api/v1/admin/pending-users/{pending.json()['id']}", headers=admin.headers)
        assert response.status_code == 204

        status = await client.get("/api/v1/auth/status", headers=user.headers)
        assert status.json()["status"] == "new"

    async def test_reject_unknown(self, client: AsyncClient, admin):
        response = await client.delete(f"/api/v1/admin/pending-users/{uuid.uuid4()}", headers=admin.headers)
        assert response.status_code == 404


class TestAccessCodes:
    async def test_create_and_list(self, client: AsyncClient, admin):
        created = await client.post(
            "/api/v1/admin/access-codes",
            headers=admin.headers,
            json={"email": "Coded@Loomero.dev", "role": "mentor"},
        )
        assert created.status_code == 201
        data = created.json()
        assert data["email"] == "coded@loomero.dev"
        assert data["is_used"] is False
        assert data["created_by"] == str(admin.id)

        listed = await client.get("/api/v1/admin/access-codes", headers=admin.headers)
        assert listed.json()["total"] == 1

    async def test_reset_reactivates_used_code(self, client: AsyncClient, admin, identity):
        user = identity(email="reset@loomero.dev")
        created = await client.post(
            "/api/v1/admin/access-codes",
            headers=admin.headers,
            json={"email": "reset@loomero.dev", "role": "intern"},
        )
        code_id = created.json()["id"]
        old_code = created.json()["code"]
        await client.post("/api/v1/auth/verify-code", headers=user.headers, json={"code": old_code})

        reset = await client.post(f"/api/v1/admin/access-codes/{code_id}/reset", headers=admin.headers)
        assert reset.status_code == 200
        assert reset.json()["is_used"] is False
        assert reset.json()["used_at"] is None

        again = await client.post(
            "/api/v1/auth/verify-code", headers=user.headers, json={"code": reset.json()["code"]}
        )
        assert again.status_code == 200

    async def test_delete(self, client: AsyncClient, admin):
        created = await client.post(
            "/api/v1/admin/access-codes",
            headers=admin.headers,
            json={"email": "gone@loomero.dev", "role": "intern"},
        )
        code_id = created.json()["id"]
        assert (await client.delete(f"/api/v1/admin/access-codes/{code_id}", headers=admin.headers)).status_code == 204
        assert (await client.delete(f"/api/v1/admin/access-codes/{code_id}", headers=admin.headers)).status_code == 404

    async def test_invalid_role_rejected(self, client: AsyncClient, admin):
        response = await client.post(
            "/api/v1/admin/access-codes",
            headers=admin.headers,
            json={"email": "role@loomero.dev", "role": "superuser"},
        )
        assert response.status_code == 422
