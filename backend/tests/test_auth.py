"""
Tests for authentication: password hashing, tokens, and the register/login
flow that provisions a vendor trust profile.
"""
import asyncio
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from vendor_trust.auth import (
    hash_password, verify_password, create_access_token, decode_token, require_vendor_access,
)
from vendor_trust.database import get_db
from vendor_trust.main import app
from vendor_trust.services.trust import ProfileStore


class TestPasswordsAndTokens:

    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_token_carries_role(self):
        payload = decode_token(create_access_token("user-1", "a@example.com", role="admin"))
        assert payload["sub"] == "user-1"
        assert payload["role"] == "admin"
        assert payload["vendor_id"] is None

    def test_token_carries_vendor_id(self):
        payload = decode_token(create_access_token("user-1", "a@example.com", vendor_id="vendor-7"))
        assert payload["vendor_id"] == "vendor-7"
        assert payload["role"] == "vendor"

    def test_tampered_token_rejected(self):
        token = create_access_token("user-1", "a@example.com")
        assert decode_token(token + "x") is None


@pytest.fixture
def client(db_session):
    def override_db():
        yield db_session

    app.dependency_overrides[get_db] = override_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestRegisterAndLogin:

    def test_register_provisions_default_profile(self, client, db_session):
        response = client.post("/auth/register", json={
            "email": "shop@example.com",
            "username": "shopkeeper",
            "password": "longenough",
            "shop_name": "Corner Shop",
        })

        assert response.status_code == 201
        profile = ProfileStore(db_session).read_profile(response.json()["vendor_id"])
        assert profile.trust_score == 70
        assert profile.trust_tier == "New or Improving"
        assert profile.shop_name == "Corner Shop"

    def test_duplicate_email_rejected(self, client):
        body = {"email": "dup@example.com", "username": "one", "password": "longenough"}
        client.post("/auth/register", json=body)

        response = client.post("/auth/register", json=dict(body, username="two"))
        assert response.status_code == 400

    def test_short_password_rejected(self, client):
        response = client.post("/auth/register", json={
            "email": "x@example.com", "username": "x", "password": "short",
        })
        assert response.status_code == 422

    def test_login_and_me(self, client):
        registered = client.post("/auth/register", json={
            "email": "me@example.com", "username": "me", "password": "longenough",
        }).json()

        login = client.post("/auth/login", json={"email": "me@example.com", "password": "longenough"})
        assert login.status_code == 200

        token = login.json()["access_token"]
        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["vendor_id"] == registered["vendor_id"]
        assert me.json()["role"] == "vendor"

    def test_bad_password_is_401(self, client):
        client.post("/auth/register", json={
            "email": "bad@example.com", "username": "bad", "password": "longenough",
        })
        response = client.post("/auth/login", json={"email": "bad@example.com", "password": "nope-nope"})
        assert response.status_code == 401

    def test_vendor_can_reach_own_trust_overview(self, client):
        registered = client.post("/auth/register", json={
            "email": "own@example.com", "username": "own", "password": "longenough",
        }).json()
        token = client.post(
            "/auth/login", json={"email": "own@example.com", "password": "longenough"}
        ).json()["access_token"]

        response = client.get(
            f"/vendors/{registered['vendor_id']}/trust",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 200
        assert response.json()["tier"]["recovery_recommended"] is True

    def test_login_token_names_own_vendor(self, client):
        registered = client.post("/auth/register", json={
            "email": "claim@example.com", "username": "claim", "password": "longenough",
        }).json()
        token = client.post(
            "/auth/login", json={"email": "claim@example.com", "password": "longenough"}
        ).json()["access_token"]

        assert decode_token(token)["vendor_id"] == registered["vendor_id"]


class TestRequireVendorAccess:

    def _check(self, user, vendor_id):
        return asyncio.run(require_vendor_access(vendor_id, current_user=user))

    def test_owner_allowed(self):
        user = SimpleNamespace(role="vendor", vendor_profile=SimpleNamespace(id="vendor-1"))
        assert self._check(user, "vendor-1") is user

    def test_admin_allowed_for_any_vendor(self):
        admin = SimpleNamespace(role="admin", vendor_profile=None)
        assert self._check(admin, "vendor-9") is admin

    @pytest.mark.parametrize("vendor_profile", [None, SimpleNamespace(id="vendor-2")])
    def test_other_vendor_forbidden(self, vendor_profile):
        user = SimpleNamespace(role="vendor", vendor_profile=vendor_profile)

        with pytest.raises(HTTPException) as exc_info:
            self._check(user, "vendor-1")

        assert exc_info.value.status_code == 403
