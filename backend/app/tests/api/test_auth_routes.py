from sqlmodel import select

from app.core.config import settings
from app.core.security import decode_access_token
from app.models import RefreshToken, Topico, User, UserTopico

LOGIN = f"{settings.API_PREFIX}/auth/login"
COOKIE = settings.REFRESH_COOKIE_NAME


def test_register_creates_user_and_copies_catalog(client, db):
    db.add(Topico(nome="Tecnologia"))
    db.add(Topico(nome="Antigo", ativo=False))
    db.commit()

    r = client.post(
        f"{settings.API_PREFIX}/auth/register",
        json={"email": "  New@Example.com ", "password": "secret123", "name": "New"},
    )

    assert r.status_code == 201
    body = r.json()
    assert body["user"]["email"] == "new@example.com"
    assert body["user"]["role"] == "GENERAL"
    user = db.exec(select(User).where(User.email == "new@example.com")).one()
    topicos = db.exec(select(UserTopico).where(UserTopico.user_id == user.id)).all()
    assert [t.nome for t in topicos] == ["Tecnologia"]


def test_register_rejects_missing_fields_and_duplicates(client, normal_user):
    r = client.post(f"{settings.API_PREFIX}/auth/register", json={"email": "x@example.com"})
    assert r.status_code == 400
    assert "error" in r.json()

    r = client.post(
        f"{settings.API_PREFIX}/auth/register",
        json={"email": "user@example.com", "password": "secret123", "name": "Dup"},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Email já cadastrado"}


def test_login_returns_token_and_refresh_cookie(client, normal_user):
    r = client.post(LOGIN, json={"email": "user@example.com", "password": "secret123"})

    assert r.status_code == 200
    body = r.json()
    assert body["expires_in"] == settings.ACCESS_TOKEN_EXPIRE_SECONDS
    claims = decode_access_token(body["token"])
    assert claims["sub"] == str(normal_user.id)
    assert claims["email"] == "user@example.com"
    assert claims["role"] == "GENERAL"
    assert r.cookies.get(COOKIE)
    assert "httponly" in r.headers["set-cookie"].lower()


def test_login_rejects_bad_credentials_and_inactive_users(client, db, normal_user):
    r = client.post(LOGIN, json={"email": "user@example.com", "password": "wrong-password"})
    assert r.status_code == 401

    normal_user.is_active = False
    db.add(normal_user)
    db.commit()
    r = client.post(LOGIN, json={"email": "user@example.com", "password": "secret123"})
    assert r.status_code == 401

    r = client.post(LOGIN, json={"email": "", "password": ""})
    assert r.status_code == 400


def test_refresh_rotates_token(client, db, normal_user):
    login = client.post(LOGIN, json={"email": "user@example.com", "password": "secret123"})
    first_cookie = login.cookies.get(COOKIE)

    r = client.post(
        f"{settings.API_PREFIX}/auth/refresh", headers={"Cookie": f"{COOKIE}={first_cookie}"}
    )

    assert r.status_code == 200
    assert r.json()["token"]
    second_cookie = r.cookies.get(COOKIE)
    assert second_cookie and second_cookie != first_cookie

    # The rotated-out token cannot be replayed.
    r = client.post(
        f"{settings.API_PREFIX}/auth/refresh", headers={"Cookie": f"{COOKIE}={first_cookie}"}
    )
    assert r.status_code == 401

    live = db.exec(
        select(RefreshToken).where(
            RefreshToken.user_id == normal_user.id, RefreshToken.revoked_at == None  # noqa: E711
        )
    ).all()
    assert len(live) == 1


def test_refresh_without_cookie_is_unauthorized(client):
    client.cookies.clear()
    r = client.post(f"{settings.API_PREFIX}/auth/refresh")
    assert r.status_code == 401
    assert r.json()["error"] == "Refresh token não fornecido"


def test_verify_requires_valid_token(client, user_headers):
    r = client.get(f"{settings.API_PREFIX}/auth/verify", headers=user_headers)
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "user@example.com"

    r = client.get(f"{settings.API_PREFIX}/auth/verify", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert r.json() == {"error": "Token inválido"}

    r = client.get(f"{settings.API_PREFIX}/auth/verify")
    assert r.status_code == 401


def test_logout_revokes_refresh_token(client, db, normal_user):
    login = client.post(LOGIN, json={"email": "user@example.com", "password": "secret123"})
    cookie = login.cookies.get(COOKIE)

    r = client.post(f"{settings.API_PREFIX}/auth/logout", headers={"Cookie": f"{COOKIE}={cookie}"})
    assert r.status_code == 200

    r = client.post(f"{settings.API_PREFIX}/auth/refresh", headers={"Cookie": f"{COOKIE}={cookie}"})
    assert r.status_code == 401

    client.cookies.clear()
    assert client.post(f"{settings.API_PREFIX}/auth/logout").status_code == 200


def test_register_normalizes_role_case(client):
    r = client.post(
        f"{settings.API_PREFIX}/auth/register",
        json={"email": "boss@example.com", "password": "secret123", "name": "Boss", "role": "admin"},
    )
    assert r.status_code == 201
    assert r.json()["user"]["role"] == "ADMIN"

    r = client.post(
        f"{settings.API_PREFIX}/auth/register",
        json={"email": "guest@example.com", "password": "secret123", "name": "Guest", "role": "owner"},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Role inválido"}
