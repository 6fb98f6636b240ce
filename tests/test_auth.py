from edusmart.application.use_cases.register_user import login_slug


def test_login_slug_strips_accents_and_spaces():
    assert login_slug("Nguyễn Văn An") == "nguyenvanan"
    assert login_slug("Đỗ  Thị\tHà") == "dothiha"


def test_register_assigns_role_prefixed_ids(register):
    first_teacher = register("Nguyễn Văn An", "teacher")
    first_learner = register("Trần Thị Bình", "learner")
    second_teacher = register("Lê Văn Cường", "teacher")

    assert first_teacher["custom_id"] == "GV000001"
    assert first_learner["custom_id"] == "HS000001"
    assert second_teacher["custom_id"] == "GV000002"
    assert first_teacher["login_identifier"] == "GV000001.nguyenvanan.edu@edusmart"
    assert second_teacher["login_identifier"] == "GV000002.levancuong.edu@edusmart"


def test_same_name_gets_distinct_identifiers(register):
    a = register("Trần Thị Bình", "learner")
    b = register("Trần Thị Bình", "learner")
    assert a["login_identifier"] != b["login_identifier"]


def test_register_rejects_unknown_role(client):
    response = client.post(
        "/api/auth/register",
        json={"full_name": "Someone", "role": "janitor", "password": "secret123"},
    )
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "role_invalid"


def test_register_cannot_create_admin(client):
    response = client.post(
        "/api/auth/register",
        json={"full_name": "Someone", "role": "admin", "password": "secret123"},
    )
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "role_invalid"


def test_register_short_password(client):
    response = client.post(
        "/api/auth/register",
        json={"full_name": "Someone", "role": "learner", "password": "123"},
    )
    assert response.status_code == 422


def test_login_success(client, register):
    learner = register("Trần Thị Bình", "learner", password="password123")
    response = client.post(
        "/api/auth/login",
        json={"identifier": learner["login_identifier"], "password": "password123"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["role"] == "learner"
    assert data["user_id"] == learner["id"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["custom_id"] == "HS000001"


def test_login_wrong_password(client, register):
    learner = register("Trần Thị Bình", "learner", password="password123")
    response = client.post(
        "/api/auth/login",
        json={"identifier": learner["login_identifier"], "password": "wrong"},
    )
    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "invalid_credentials"


def test_login_unknown_identifier(client):
    response = client.post(
        "/api/auth/login",
        json={"identifier": "HS999999.nobody.edu@edusmart", "password": "whatever"},
    )
    assert response.status_code == 401


def test_me_defaults(client, learner):
    response = client.get("/api/auth/me", headers=learner["headers"])
    assert response.status_code == 200
    data = response.json()
    assert data["wallet_tokens"] == 10
    assert data["kyc_status"] == "none"
    assert data["is_verified"] is False
    assert data["avatar"] == "/default-avatar.png"


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code in (401, 403)


def test_me_rejects_garbage_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_update_avatar(client, learner):
    response = client.put(
        "/api/auth/me/avatar", json={"path": "/uploads/avatars/b.png"}, headers=learner["headers"]
    )
    assert response.status_code == 200
    assert response.json()["avatar"] == "/uploads/avatars/b.png"


def test_admin_seeded_once(admin, session_factory):
    from edusmart.application.use_cases.register_user import EnsureAdmin
    from edusmart.infrastructure.repositories import UserRepository
    from edusmart.infrastructure.security import PasswordHasher

    db = session_factory()
    try:
        assert EnsureAdmin(UserRepository(db), PasswordHasher()).execute("admin2", "pw") is None
        seeded = UserRepository(db).get(admin["id"])
    finally:
        db.close()
    assert seeded.custom_id == "AD000001"
    assert seeded.is_verified is True
