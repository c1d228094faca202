from sqlalchemy import select

from wavy.models import PasswordResetToken, Profile
from tests.conftest import make_user


def test_signup_then_login_and_me(client, db) -> None:
    signup = client.post(
        "/api/auth/signup",
        json={"email": "new@wavy.test", "password": "secret123", "metadata": {"full_name": "Nina Nouvelle"}},
    )
    assert signup.status_code == 201
    user = signup.json()["user"]
    assert user["email"] == "new@wavy.test"
    assert user["role"] == "user"
    assert user["roles"] == []
    assert db.execute(select(Profile.full_name)).scalar_one() == "Nina Nouvelle"

    login = client.post("/api/auth/login", json={"email": "NEW@wavy.test", "password": "secret123"})
    assert login.status_code == 200
    body = login.json()
    assert body["otpRequired"] is False

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["id"] == user["id"]


def test_duplicate_signup_is_conflict(client, db) -> None:
    make_user(db, "taken@wavy.test")
    resp = client.post("/api/auth/signup", json={"email": "taken@wavy.test", "password": "secret123"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "Cet email est déjà utilisé"


def test_wrong_password_and_unknown_email_look_the_same(client, db) -> None:
    make_user(db, "known@wavy.test")
    wrong = client.post("/api/auth/login", json={"email": "known@wavy.test", "password": "nope"})
    unknown = client.post("/api/auth/login", json={"email": "ghost@wavy.test", "password": "nope"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"error": "Identifiants invalides"}


def test_login_reports_roles(client, db) -> None:
    make_user(db, "boss@wavy.test", roles=("admin",))
    body = client.post("/api/auth/login", json={"email": "boss@wavy.test", "password": "secret123"}).json()
    assert body["user"]["role"] == "admin"
    assert body["user"]["roles"] == ["admin"]


def test_me_requires_a_valid_token(client) -> None:
    assert client.get("/api/auth/me").status_code == 401
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Token invalide ou expiré"


def test_invalid_body_is_400(client) -> None:
    resp = client.post("/api/auth/login", json={"email": "not-an-email"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Données invalides"


def test_logout(client) -> None:
    assert client.post("/api/auth/logout").json() == {"success": True}


def test_password_reset_token_is_single_use(client, db, sent_emails) -> None:
    make_user(db, "forgot@wavy.test", password="oldpass1")

    resp = client.post("/api/auth/reset-password", json={"email": "forgot@wavy.test"})
    assert resp.json() == {"success": True}
    token = db.execute(select(PasswordResetToken.token)).scalar_one()
    assert len(sent_emails) == 1
    assert f"reset={token}" in sent_emails[0]["html"]

    confirm = client.post("/api/auth/reset-password-confirm", json={"token": token, "password": "newpass1"})
    assert confirm.json() == {"success": True}

    replay = client.post("/api/auth/reset-password-confirm", json={"token": token, "password": "hijack1"})
    assert replay.status_code == 400
    assert replay.json()["success"] is False
    assert replay.json()["error"] == "Token invalide ou expiré"

    assert client.post("/api/auth/login", json={"email": "forgot@wavy.test", "password": "newpass1"}).status_code == 200
    assert client.post("/api/auth/login", json={"email": "forgot@wavy.test", "password": "hijack1"}).status_code == 401


def test_reset_request_does_not_reveal_unknown_accounts(client, sent_emails) -> None:
    resp = client.post("/api/auth/reset-password", json={"email": "nobody@wavy.test"})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert sent_emails == []


def test_second_reset_request_replaces_the_first(client, db, sent_emails) -> None:
    make_user(db, "twice@wavy.test")
    client.post("/api/auth/reset-password", json={"email": "twice@wavy.test"})
    first = db.execute(select(PasswordResetToken.token)).scalar_one()
    client.post("/api/auth/reset-password", json={"email": "twice@wavy.test"})
    db.expire_all()
    tokens = db.execute(select(PasswordResetToken.token)).scalars().all()
    assert len(tokens) == 1 and tokens[0] != first

    stale = client.post("/api/auth/reset-password-confirm", json={"token": first, "password": "newpass1"})
    assert stale.status_code == 400
