from conftest import PASSWORD


def test_login_and_me(client, make_user):
    make_user("judge", "evaluator")
    resp = client.post("/api/auth/login", json={"username": "judge", "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.get_json()["user"]["role"] == "evaluator"

    me = client.get("/api/auth/me").get_json()
    assert me["username"] == "judge"
    assert me["role_label"] == "المقيّم"


def test_login_with_wrong_password(client, make_user):
    make_user("judge", "evaluator")
    resp = client.post("/api/auth/login", json={"username": "judge", "password": "nope"})
    assert resp.status_code == 401


def test_login_requires_json(client):
    resp = client.post("/api/auth/login", data={"username": "x"})
    assert resp.status_code == 415


def test_me_requires_session(client):
    assert client.get("/api/auth/me").status_code == 401


def test_logout(evaluator):
    assert evaluator.post("/api/auth/logout").status_code == 200
    assert evaluator.get("/api/auth/me").status_code == 401


def test_change_password(evaluator):
    resp = evaluator.post("/api/auth/password", json={
        "current_password": PASSWORD,
        "new_password": "a-much-longer-one",
        "confirm_password": "a-much-longer-one",
    })
    assert resp.status_code == 200
    resp = evaluator.post("/api/auth/password", json={
        "current_password": "wrong",
        "new_password": "another-long-one",
        "confirm_password": "another-long-one",
    })
    assert resp.status_code == 400


def test_only_admin_manages_users(admin, evaluator):
    assert evaluator.get("/api/users").status_code == 403
    resp = admin.post("/api/users", json={"username": "screen", "password": "wall-display-9", "role": "viewer"})
    assert resp.status_code == 201
    user_id = resp.get_json()["user"]["id"]

    resp = admin.post("/api/users", json={"username": "screen", "password": "wall-display-9", "role": "viewer"})
    assert resp.status_code == 409

    resp = admin.patch(f"/api/users/{user_id}", json={"role": "evaluator"})
    assert resp.get_json()["user"]["role"] == "evaluator"

    resp = admin.post("/api/users", json={"username": "x", "password": "long-enough-pw", "role": "judge"})
    assert resp.status_code == 400

    assert admin.delete(f"/api/users/{user_id}").status_code == 200
    assert admin.get(f"/api/users/{user_id}").status_code == 404


def test_last_admin_cannot_be_demoted(admin):
    me = admin.get("/api/auth/me").get_json()
    resp = admin.patch(f"/api/users/{me['id']}", json={"role": "viewer"})
    assert resp.status_code == 400
    assert admin.delete(f"/api/users/{me['id']}").status_code == 400


def test_html_login_flow(client, make_user):
    make_user("boss", "admin")
    resp = client.post("/login", data={"username": "boss", "password": PASSWORD})
    assert resp.status_code == 302
    assert client.get("/").status_code == 200


def test_dashboard_requires_login(client):
    resp = client.get("/")
    assert resp.status_code == 302
    assert "/login" in resp.headers["Location"]
