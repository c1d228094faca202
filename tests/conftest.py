from __future__ import annotations

import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the environment is prepared first.
_TMP = Path(tempfile.mkdtemp(prefix="wavy-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RESEND_API_KEY"] = ""
os.environ["JWT_SECRET"] = "test-secret"

import email_validator  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from wavy.db.base import Base  # noqa: E402
from wavy.db.session import SessionLocal, engine  # noqa: E402
from wavy import models  # noqa: E402,F401
from wavy.main import create_app  # noqa: E402
from wavy.security.jwt import issue_jwt  # noqa: E402
from wavy.services import mailer  # noqa: E402
from wavy.services.auth import create_account, grant_role  # noqa: E402

# Fixture accounts live under the reserved ".test" domain
email_validator.TEST_ENVIRONMENT = True


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sent_emails(monkeypatch) -> list[dict]:
    """Records outgoing emails instead of calling the provider."""
    outbox: list[dict] = []

    def fake_send_email(to, subject, html, attachments=None):
        outbox.append({"to": to, "subject": subject, "html": html, "attachments": attachments})
        return True

    monkeypatch.setattr(mailer, "send_email", fake_send_email)
    return outbox


def make_user(db, email: str, password: str = "secret123", roles: tuple[str, ...] = (), full_name: str = ""):
    user = create_account(db, email=email, password=password, full_name=full_name)
    for role in roles:
        grant_role(db, user.id, role)
    db.commit()
    return user


def headers_for(user, roles: tuple[str, ...] = ()) -> dict[str, str]:
    token = issue_jwt(sub=str(user.id), email=user.email, roles=list(roles))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(db):
    user = make_user(db, "admin@wavy.test", roles=("admin",), full_name="Alice Admin")
    return user, headers_for(user, ("admin",))


@pytest.fixture
def consultant(db):
    user = make_user(db, "consultant@wavy.test", roles=("user_cra",), full_name="Claire Consultante")
    return user, headers_for(user, ("user_cra",))


@pytest.fixture
def other_consultant(db):
    user = make_user(db, "other@wavy.test", roles=("user_cra",), full_name="Oscar Autre")
    return user, headers_for(user, ("user_cra",))
