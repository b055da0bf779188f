"""Tests for authentication API endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from coral_auth.models.user import User
from coral_auth.users import UserService


class TestLocalLogin:
    """Tests for POST /api/auth/local."""

    @pytest.mark.asyncio
    async def test_login_with_form(self, client: AsyncClient, local_user: User, password: str):
        response = await client.post(
            "/api/auth/local", data={"email": "alice@example.com", "password": password}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == local_user.id
        assert data["username"] == "alice"

    @pytest.mark.asyncio
    async def test_login_with_json(self, client: AsyncClient, local_user: User, password: str):
        response = await client.post(
            "/api/auth/local", json={"email": "alice@example.com", "password": password}
        )

        assert response.status_code == 200
        assert response.json()["id"] == local_user.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, client: AsyncClient, local_user: User):
        response = await client.post(
            "/api/auth/local", data={"email": "alice@example.com", "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Incorrect email/password combination"

    @pytest.mark.asyncio
    async def test_disabled_user(self, client: AsyncClient, disabled_user: User, password: str):
        response = await client.post(
            "/api/auth/local", data={"email": "mallory@example.com", "password": password}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "user disabled"

    @pytest.mark.asyncio
    async def test_missing_credentials(self, client: AsyncClient):
        response = await client.post("/api/auth/local", data={"email": "alice@example.com"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Missing credentials"

    @pytest.mark.asyncio
    async def test_storage_error_is_server_error(
        self, client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(
            UserService,
            "find_local_user",
            AsyncMock(side_effect=SQLAlchemyError("database unavailable")),
        )

        response = await client.post(
            "/api/auth/local", data={"email": "alice@example.com", "password": "whatever"}
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Authentication failed"

    @pytest.mark.asyncio
    async def test_commit_failure_is_server_error_without_session(
        self,
        client: AsyncClient,
        local_user: User,
        password: str,
        db_session: AsyncSession,
        monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.setattr(
            db_session, "commit", AsyncMock(side_effect=SQLAlchemyError("disk full"))
        )

        response = await client.post(
            "/api/auth/local", data={"email": "alice@example.com", "password": password}
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Authentication failed"
        assert (await client.get("/api/auth/me")).status_code == 401


class TestSession:
    """Session serialization through the cookie."""

    @pytest.mark.asyncio
    async def test_me_unauthenticated(self, client: AsyncClient):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_after_login(self, client: AsyncClient, local_user: User, password: str):
        await client.post(
            "/api/auth/local", data={"email": "alice@example.com", "password": password}
        )

        response = await client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json()["id"] == local_user.id

    @pytest.mark.asyncio
    async def test_logout_clears_session(
        self, client: AsyncClient, local_user: User, password: str
    ):
        await client.post(
            "/api/auth/local", data={"email": "alice@example.com", "password": password}
        )

        response = await client.get("/api/auth/logout", follow_redirects=False)
        assert response.status_code == 302

        response = await client.get("/api/auth/me")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_deleted_user_ends_session(
        self, client: AsyncClient, local_user: User, password: str, db_session
    ):
        await client.post(
            "/api/auth/local", data={"email": "alice@example.com", "password": password}
        )
        await db_session.delete(local_user)
        await db_session.commit()

        response = await client.get("/api/auth/me")

        assert response.status_code == 401


class TestRegister:
    """Tests for POST /api/auth/register."""

    @pytest.mark.asyncio
    async def test_register_logs_in(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/register",
            json={"email": "new@example.com", "password": "long enough password"},
        )

        assert response.status_code == 201
        created = response.json()
        assert created["username"] == "new"

        me = await client.get("/api/auth/me")
        assert me.json()["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_register_existing_email(self, client: AsyncClient, local_user: User):
        response = await client.post(
            "/api/auth/register",
            json={"email": "alice@example.com", "password": "long enough password"},
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_register_short_password(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/register", json={"email": "short@example.com", "password": "short"}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_registered_user_can_log_in(self, client: AsyncClient):
        await client.post(
            "/api/auth/register",
            json={"email": "henry@example.com", "password": "long enough password"},
        )
        await client.get("/api/auth/logout")

        response = await client.post(
            "/api/auth/local",
            data={"email": "henry@example.com", "password": "long enough password"},
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_register_is_committed_before_login(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        response = await client.post(
            "/api/auth/register",
            json={"email": "olivia@example.com", "password": "long enough password"},
        )
        await db_session.rollback()

        assert response.status_code == 201
        assert await UserService(db_session).find_by_id(response.json()["id"]) is not None

    @pytest.mark.asyncio
    async def test_register_commit_failure_is_server_error(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.setattr(
            db_session, "commit", AsyncMock(side_effect=SQLAlchemyError("disk full"))
        )

        response = await client.post(
            "/api/auth/register",
            json={"email": "peggy@example.com", "password": "long enough password"},
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Authentication failed"
        assert (await client.get("/api/auth/me")).status_code == 401
