from conftest import ADMIN_EMAIL, PASSWORD, USER_EMAIL

AUTH = "/api/v1/auth"
USERS = "/api/v1/admin/users"


def _login(client, email=ADMIN_EMAIL, password=PASSWORD):
    return client.post(f"{AUTH}/login", data={"username": email, "password": password})


def _bearer(tokens):
    return {"Authorization": f"Bearer {tokens['access_token']}"}


def test_first_account_is_admin(client, admin_headers, user_headers):
    me = client.get(f"{AUTH}/me", headers=admin_headers).json()
    assert me["email"] == ADMIN_EMAIL
    assert me["role"] == "admin"
    assert client.get(f"{AUTH}/me", headers=user_headers).json()["role"] == "user"


def test_duplicate_registration_conflicts(client, admin_headers):
    resp = client.post(f"{AUTH}/register", json={"email": ADMIN_EMAIL, "password": PASSWORD})
    assert resp.status_code == 409
    assert resp.json()["error"]["type"] == "conflict"


def test_bad_password_is_unauthorized(client, admin_headers):
    resp = _login(client, password="wrong-password")
    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "Invalid credentials"


def test_update_own_profile(client, user_headers):
    resp = client.patch(f"{AUTH}/me", json={"sales_initials": "CC"}, headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["sales_initials"] == "CC"
    assert resp.json()["full_name"] == "Counter Clerk"


def test_logout_ends_the_session(client, admin_headers):
    tokens = _login(client).json()
    headers = _bearer(tokens)
    assert client.get(f"{AUTH}/me", headers=headers).status_code == 200

    assert client.post(f"{AUTH}/logout", headers=headers).json()["message"] == "Logged out"
    assert client.get(f"{AUTH}/me", headers=headers).status_code == 401
    assert client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]}).status_code == 401
    # Other sessions of the same user stay signed in.
    assert client.get(f"{AUTH}/me", headers=admin_headers).status_code == 200


def test_refresh_issues_working_tokens(client, admin_headers):
    tokens = _login(client).json()
    resp = client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert resp.status_code == 200, resp.text
    refreshed = resp.json()
    assert refreshed["session_id"] == tokens["session_id"]
    assert client.get(f"{AUTH}/me", headers=_bearer(refreshed)).status_code == 200


def test_access_token_cannot_refresh(client, admin_headers):
    tokens = _login(client).json()
    resp = client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["access_token"]})
    assert resp.status_code == 401


def test_user_administration_requires_admin(client, user_headers):
    assert client.get(USERS, headers=user_headers).status_code == 403


def test_admin_manages_users(client, admin_headers, user_headers):
    users = client.get(USERS, headers=admin_headers).json()
    clerk = next(u for u in users if u["email"] == USER_EMAIL)

    resp = client.put(f"{USERS}/{clerk['id']}/role", json={"role": "admin"}, headers=admin_headers)
    assert resp.json()["role"] == "admin"

    created = client.post(USERS, json={
        "email": "cashier@pointarthub.com", "password": "cashier1", "full_name": "Cashier",
    }, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["role"] == "user"
    assert _login(client, "cashier@pointarthub.com", "cashier1").status_code == 200

    assert client.delete(f"{USERS}/{created.json()['id']}", headers=admin_headers).status_code == 204
    assert _login(client, "cashier@pointarthub.com", "cashier1").status_code == 401

    actions = [e["action"] for e in client.get("/api/v1/audit", params={"table_name": "profiles"},
                                                headers=admin_headers).json()]
    assert actions == ["user_delete", "user_create", "role_change"]


def test_admin_cannot_demote_or_remove_self(client, admin_headers):
    me = client.get(f"{AUTH}/me", headers=admin_headers).json()
    resp = client.put(f"{USERS}/{me['id']}/role", json={"role": "user"}, headers=admin_headers)
    assert resp.status_code == 422
    assert client.patch(f"{USERS}/{me['id']}", json={"is_active": False}, headers=admin_headers).status_code == 422
    assert client.delete(f"{USERS}/{me['id']}", headers=admin_headers).status_code == 422


def test_deactivated_user_is_locked_out(client, admin_headers, user_headers):
    clerk = client.get(f"{AUTH}/me", headers=user_headers).json()
    resp = client.patch(f"{USERS}/{clerk['id']}", json={"is_active": False}, headers=admin_headers)
    assert resp.json()["is_active"] is False

    resp = client.get(f"{AUTH}/me", headers=user_headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Inactive user"
    assert _login(client, USER_EMAIL).status_code == 403
