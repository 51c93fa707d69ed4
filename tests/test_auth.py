from app.auth import create_access_token, decode_token


def test_register_login_and_me(client):
    res = client.post("/api/users", json={"email": "New@Example.com ", "password": "hunter22"})
    assert res.status_code == 201
    user = res.json()
    assert user["email"] == "new@example.com"
    assert "password" not in user

    res = client.post("/api/login", json={"email": "new@example.com", "password": "hunter22"})
    assert res.status_code == 200
    token = res.json()["access_token"]
    assert res.json()["token_type"] == "bearer"

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["id"] == user["id"]


def test_register_rejects_duplicates_and_short_passwords(client, owner):
    res = client.post("/api/users", json={"email": owner.email, "password": "whatever1"})
    assert res.status_code == 409

    res = client.post("/api/users", json={"email": "short@example.com", "password": "123"})
    assert res.status_code == 400


def test_login_wrong_password(client, owner):
    res = client.post("/api/login", json={"email": owner.email, "password": "wrong-password"})
    assert res.status_code == 401


def test_token_round_trip(owner):
    payload = decode_token(create_access_token(owner.id, owner.email))
    assert payload.sub == owner.id
    assert payload.email == owner.email


def test_garbage_token_is_rejected():
    assert decode_token("abc.def.ghi") is None


def test_me_requires_bearer(client):
    assert client.get("/api/users/me").status_code == 401
    assert client.get("/api/users/me", headers={"Authorization": "Basic Zm9vOmJhcg=="}).status_code == 401
