import pytest

from conftest import PASSWORD, login, signup


@pytest.mark.asyncio
async def test_register_and_me(client):
    profile_id, headers = await signup(client, "Alice@Example.com", "landlord")

    response = await client.get("/api/auth/me", headers=headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == profile_id
    assert data["email"] == "alice@example.com"
    assert data["role"] == "landlord"
    assert data["last_login"] is not None


@pytest.mark.asyncio
async def test_register_defaults_to_tenant(client):
    response = await client.post(
        "/api/auth/register",
        json={"email": "t@example.com", "password": PASSWORD, "full_name": "T"},
    )
    assert response.status_code == 201
    assert response.json()["data"]["role"] == "tenant"


@pytest.mark.asyncio
async def test_register_rejects_admin_role(client):
    response = await client.post(
        "/api/auth/register",
        json={
            "email": "root@example.com",
            "password": PASSWORD,
            "full_name": "Root",
            "role": "admin",
        },
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    await signup(client, "dup@example.com")
    response = await client.post(
        "/api/auth/register",
        json={"email": "DUP@example.com", "password": PASSWORD, "full_name": "Dup"},
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_login_wrong_password_counts_attempts(client):
    await signup(client, "bob@example.com")

    response = await client.post(
        "/api/auth/login", json={"email": "bob@example.com", "password": "wrong-pass"}
    )
    assert response.status_code == 401
    assert "2 attempts remaining" in response.json()["message"]


@pytest.mark.asyncio
async def test_login_locks_after_max_attempts(client):
    await signup(client, "carol@example.com")

    for _ in range(3):
        response = await client.post(
            "/api/auth/login",
            json={"email": "carol@example.com", "password": "wrong-pass"},
        )
        assert response.status_code == 401
    assert "locked" in response.json()["message"]

    # The right password is refused while locked
    response = await client.post(
        "/api/auth/login", json={"email": "carol@example.com", "password": PASSWORD}
    )
    assert response.status_code == 401
    assert "locked" in response.json()["message"]


@pytest.mark.asyncio
async def test_refresh_rotates_token(client):
    await signup(client, "dan@example.com")
    response = await client.post(
        "/api/auth/login", json={"email": "dan@example.com", "password": PASSWORD}
    )
    refresh_token = response.json()["data"]["refresh_token"]

    response = await client.post(
        "/api/auth/refresh", json={"refresh_token": refresh_token}
    )
    assert response.status_code == 200
    assert response.json()["data"]["refresh_token"] != refresh_token

    # The old token was revoked by the rotation
    response = await client.post(
        "/api/auth/refresh", json={"refresh_token": refresh_token}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_me_and_change_password(client):
    _, headers = await signup(client, "erin@example.com")

    response = await client.put(
        "/api/auth/me",
        json={"full_name": "  Erin Doe ", "phone": "+233200000000"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["full_name"] == "Erin Doe"

    response = await client.post(
        "/api/auth/change-password",
        json={"current_password": "not-it-at-all", "new_password": "another-pass"},
        headers=headers,
    )
    assert response.status_code == 400

    response = await client.post(
        "/api/auth/change-password",
        json={"current_password": PASSWORD, "new_password": "another-pass"},
        headers=headers,
    )
    assert response.status_code == 200
    await login(client, "erin@example.com", "another-pass")


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client):
    response = await client.get(
        "/api/auth/me", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_initial_admin_can_log_in(client, admin):
    _, headers = admin
    response = await client.get("/api/auth/me", headers=headers)
    assert response.json()["data"]["role"] == "admin"


@pytest.mark.asyncio
async def test_logout_revokes_refresh_tokens(client):
    await signup(client, "fay@example.com")
    response = await client.post(
        "/api/auth/login", json={"email": "fay@example.com", "password": PASSWORD}
    )
    tokens = response.json()["data"]
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    response = await client.post("/api/auth/logout", headers=headers)
    assert response.status_code == 200

    response = await client.post(
        "/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
    )
    assert response.status_code == 401
