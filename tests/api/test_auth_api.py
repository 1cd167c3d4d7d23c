"""API tests for authentication, uploads and health endpoints."""

import base64

import pytest
from httpx import AsyncClient


class TestAuthAPI:
    """API tests for auth endpoints."""

    @pytest.mark.asyncio
    async def test_register(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/register", json={"username": "mia", "password": "pa55word"})

        assert response.status_code == 201
        data = response.json()
        assert data["username"] == "mia"
        assert "id" in data
        assert "password" not in data
        assert "password_hash" not in data
        assert data["token_type"] == "bearer"
        assert data["access_token"]

    @pytest.mark.asyncio
    async def test_register_duplicate(self, client: AsyncClient):
        await client.post("/api/v1/auth/register", json={"username": "mia", "password": "pa55word"})

        response = await client.post("/api/v1/auth/register", json={"username": "mia", "password": "other"})

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_register_validation_errors(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/register", json={"username": " ", "password": "x"})
        assert response.status_code == 422

        response = await client.post("/api/v1/auth/register", json={"username": "ned"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_login(self, client: AsyncClient):
        registered = (
            await client.post("/api/v1/auth/register", json={"username": "olga", "password": "pa55word"})
        ).json()

        response = await client.post("/api/v1/auth/login", json={"username": "olga", "password": "pa55word"})

        assert response.status_code == 200
        assert response.json()["id"] == registered["id"]

        token = response.json()["access_token"]
        me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["username"] == "olga"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient):
        await client.post("/api/v1/auth/register", json={"username": "olga", "password": "pa55word"})

        response = await client.post("/api/v1/auth/login", json={"username": "olga", "password": "nope"})

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient):
        registered = (
            await client.post("/api/v1/auth/register", json={"username": "pia", "password": "pa55word"})
        ).json()

        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {registered['access_token']}"})

        assert response.status_code == 200
        assert response.json() == {"id": registered["id"], "username": "pia"}

    @pytest.mark.asyncio
    async def test_me_anonymous(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_with_tampered_token(self, client: AsyncClient):
        """Test that a token whose payload was swapped for another user id is rejected."""
        mia = (await client.post("/api/v1/auth/register", json={"username": "mia", "password": "pa55word"})).json()
        ned = (await client.post("/api/v1/auth/register", json={"username": "ned", "password": "pa55word"})).json()
        forged = f"{ned['access_token'].split('.')[0]}.{mia['access_token'].split('.')[1]}"

        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {forged}"})

        assert response.status_code == 401


class TestUploadAPI:
    @pytest.mark.asyncio
    async def test_upload_image(self, client: AsyncClient):
        """Test that an uploaded file comes back as a data URI."""
        response = await client.post(
            "/api/v1/upload/image", files={"file": ("dot.png", b"\x89PNG", "image/png")}
        )

        assert response.status_code == 200
        url = response.json()["url"]
        assert url.startswith("data:image/png;base64,")
        assert base64.b64decode(url.split(",", 1)[1]) == b"\x89PNG"


class TestHealthAPI:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
