import jwt
import pytest
from datetime import datetime, timedelta, timezone
from ecolearn.config import settings
from ecolearn.errors import AuthError, Conflict, ValidationError
from ecolearn.services.admins import authenticate, create_admin_user


@pytest.mark.asyncio
async def test_login_returns_signed_token(client, admin):
    r = await client.post("/api/admin/login", json={"username": "Moderator", "password": "supersecret"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["admin"]["username"] == "moderator"
    assert body["admin"]["lastLogin"] is not None
    assert "passwordHash" not in body["admin"]

    claims = jwt.decode(body["token"], settings.jwt_secret, algorithms=["HS256"])
    assert claims["sub"] == admin.id
    assert claims["type"] == "admin"

    r = await client.get("/api/admin/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert r.status_code == 200
    assert r.json()["fullName"] == "Mod Erator"


@pytest.mark.asyncio
async def test_bad_credentials(client, admin):
    r = await client.post("/api/admin/login", json={"username": "moderator", "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"
    r = await client.post("/api/admin/login", json={"username": "nobody", "password": "supersecret"})
    assert r.status_code == 401


def _token(**claims):
    now = datetime.now(timezone.utc)
    payload = {"sub": "x", "type": "admin", "iat": int(now.timestamp()), "exp": int((now + timedelta(hours=1)).timestamp())}
    payload.update(claims)
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


@pytest.mark.asyncio
async def test_rejected_tokens(client, admin):
    past = int((datetime.now(timezone.utc) - timedelta(minutes=5)).timestamp())
    bad = [
        "admin_1_1700000000",
        _token(sub=admin.id, type="student"),
        _token(sub=admin.id, exp=past),
        _token(sub="someone-else"),
        jwt.encode({"sub": admin.id, "type": "admin"}, "other-secret", algorithm="HS256"),
    ]
    for token in bad:
        r = await client.get("/api/admin/me", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401, token
    assert (await client.get("/api/admin/me")).status_code == 401


@pytest.mark.asyncio
async def test_logout(client):
    r = await client.post("/api/admin/logout")
    assert r.json() == {"success": True}


@pytest.mark.asyncio
async def test_create_admin_rules(session, admin):
    with pytest.raises(Conflict):
        await create_admin_user(session, username="MODERATOR", password="anotherpass", full_name="Dup")
    with pytest.raises(ValidationError):
        await create_admin_user(session, username="short", password="1234", full_name="Short")
    with pytest.raises(ValidationError):
        await create_admin_user(session, username="boss", password="longenough", full_name="Boss", role="owner")


@pytest.mark.asyncio
async def test_disabled_admin_cannot_login(session, admin):
    admin.is_active = False
    await session.commit()
    with pytest.raises(AuthError):
        await authenticate(session, "moderator", "supersecret")
