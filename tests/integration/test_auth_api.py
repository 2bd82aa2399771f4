"""Integration tests for /api/v1/auth endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, update

from contentops.api.deps import get_notifier
from contentops.kernel.models import Post, User
from contentops.kernel.notifications import TemplateKind
from contentops.main import app

from factories import PASSWORD, auth_headers


class FailingSender:
    async def send(self, template_kind, recipient, payload):
        raise ConnectionError("smtp down")


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, client, founder):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": founder.email, "password": PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] > 0
        assert data["user"]["role"] == "founder"
        assert data["user"]["profile"]["company_name"] == "Acme"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client, founder):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": founder.email, "password": "WrongPass999"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, client, db_engine):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@example.com", "password": PASSWORD},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client, db_engine):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_rejects_garbage_token(self, client, db_engine):
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me(self, client, admin):
        response = await client.get("/api/v1/auth/me", headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json()["email"] == admin.email
        assert response.headers["X-Request-ID"]


class TestRegistration:

    @pytest.mark.asyncio
    async def test_register_founder_sends_welcome(self, client, super_admin, notifier):
        response = await client.post(
            "/api/v1/auth/register/founder",
            headers=auth_headers(super_admin),
            json={
                "email": "new.founder@example.com",
                "password": "Founder123",
                "name": "New Founder",
                "company_name": "Startup",
                "industry": "Health",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["role"] == "founder"
        assert data["profile"]["company_name"] == "Startup"
        assert [(kind, to) for kind, to, _ in notifier.sent] == [(TemplateKind.WELCOME, "new.founder@example.com")]

    @pytest.mark.asyncio
    async def test_register_admin_survives_mail_failure(self, client, super_admin):
        app.dependency_overrides[get_notifier] = lambda: FailingSender()
        response = await client.post(
            "/api/v1/auth/register/admin",
            headers=auth_headers(super_admin),
            json={"email": "new.admin@example.com", "password": "Admin1234", "name": "New Admin"},
        )

        assert response.status_code == 201
        assert response.json()["role"] == "admin"

        login = await client.post(
            "/api/v1/auth/login",
            json={"email": "new.admin@example.com", "password": "Admin1234"},
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_duplicate_email_conflict(self, client, super_admin, admin):
        response = await client.post(
            "/api/v1/auth/register/admin",
            headers=auth_headers(super_admin),
            json={"email": admin.email, "password": "Admin1234", "name": "Dup Admin"},
        )
        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    @pytest.mark.asyncio
    async def test_weak_password_rejected(self, client, super_admin):
        response = await client.post(
            "/api/v1/auth/register/admin",
            headers=auth_headers(super_admin),
            json={"email": "weak@example.com", "password": "password", "name": "Weak"},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_only_super_admin_registers(self, client, admin):
        response = await client.post(
            "/api/v1/auth/register/founder",
            headers=auth_headers(admin),
            json={
                "email": "sneaky@example.com",
                "password": "Founder123",
                "name": "Sneaky",
                "company_name": "Nope",
            },
        )
        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

    @pytest.mark.asyncio
    async def test_list_users_by_role(self, client, super_admin, admin, other_admin, founder):
        headers = auth_headers(super_admin)

        admins = (await client.get("/api/v1/auth/admins", headers=headers)).json()
        founders = (await client.get("/api/v1/auth/founders", headers=headers)).json()

        assert {a["email"] for a in admins} == {admin.email, other_admin.email}
        assert [f["email"] for f in founders] == [founder.email]

    @pytest.mark.asyncio
    async def test_founders_with_post_stats(self, client, db_session, super_admin, admin, founder, other_founder):
        for status in ("pending", "pending", "scheduled", "approved", "rejected", "posted"):
            db_session.add(Post(founder_id=founder.id, admin_id=admin.id, caption="c", status=status, images=[]))
        await db_session.commit()

        response = await client.get("/api/v1/auth/founders/stats", headers=auth_headers(super_admin))

        assert response.status_code == 200
        rows = {row["email"]: row for row in response.json()}
        assert rows[founder.email]["post_stats"] == {"total": 4, "scheduled": 1, "approved": 1, "pending": 2}
        assert rows[founder.email]["company_name"] == "Acme"
        assert rows[founder.email]["verified"] is False
        assert rows[other_founder.email]["post_stats"]["total"] == 0
        assert (await client.get("/api/v1/auth/founders/stats", headers=auth_headers(admin))).status_code == 403


class TestPasswordReset:

    async def _request_token(self, client, notifier, email):
        response = await client.post("/api/v1/auth/forgot-password", json={"email": email})
        assert response.status_code == 200
        kind, recipient, payload = notifier.sent[-1]
        assert (kind, recipient) == (TemplateKind.PASSWORD_RESET, email)
        return payload["token"]

    @pytest.mark.asyncio
    async def test_reset_and_login_with_new_password(self, client, founder, notifier):
        token = await self._request_token(client, notifier, founder.email)

        response = await client.post(
            "/api/v1/auth/reset-password",
            json={"token": token, "password": "Changed123"},
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Password has been reset"

        old = await client.post("/api/v1/auth/login", json={"email": founder.email, "password": PASSWORD})
        assert old.status_code == 401
        new = await client.post("/api/v1/auth/login", json={"email": founder.email, "password": "Changed123"})
        assert new.status_code == 200
        assert new.json()["user"]["verified_at"] is not None

    @pytest.mark.asyncio
    async def test_token_is_single_use(self, client, founder, notifier):
        token = await self._request_token(client, notifier, founder.email)
        await client.post("/api/v1/auth/reset-password", json={"token": token, "password": "Changed123"})

        again = await client.post("/api/v1/auth/reset-password", json={"token": token, "password": "Again1234"})

        assert again.status_code == 400
        assert again.json()["detail"] == "Invalid or expired reset token"

    @pytest.mark.asyncio
    async def test_newer_request_replaces_token(self, client, founder, notifier):
        first = await self._request_token(client, notifier, founder.email)
        second = await self._request_token(client, notifier, founder.email)

        stale = await client.post("/api/v1/auth/reset-password", json={"token": first, "password": "Changed123"})
        fresh = await client.post("/api/v1/auth/reset-password", json={"token": second, "password": "Changed123"})

        assert stale.status_code == 400
        assert fresh.status_code == 200

    @pytest.mark.asyncio
    async def test_expired_token(self, client, db_session, founder, notifier):
        token = await self._request_token(client, notifier, founder.email)
        await db_session.commit()
        await db_session.execute(
            update(User)
            .where(User.id == founder.id)
            .values(reset_token_expires_at=datetime.now(timezone.utc) - timedelta(minutes=1))
        )
        await db_session.commit()

        response = await client.post("/api/v1/auth/reset-password", json={"token": token, "password": "Changed123"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_email(self, client, db_engine, notifier):
        response = await client.post("/api/v1/auth/forgot-password", json={"email": "nobody@example.com"})
        assert response.status_code == 404
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_mail_failure_still_issues_token(self, client, db_session, founder):
        app.dependency_overrides[get_notifier] = lambda: FailingSender()

        response = await client.post("/api/v1/auth/forgot-password", json={"email": founder.email})

        assert response.status_code == 200
        await db_session.commit()
        stored = (
            await db_session.execute(select(User.reset_token_hash).where(User.id == founder.id))
        ).scalar_one()
        assert len(stored) == 64

    @pytest.mark.asyncio
    async def test_weak_new_password_rejected(self, client, founder, notifier):
        token = await self._request_token(client, notifier, founder.email)
        response = await client.post("/api/v1/auth/reset-password", json={"token": token, "password": "short"})
        assert response.status_code == 422
