from datetime import datetime, timedelta, timezone

from wavy.models import CraReport, OtpCode, PasswordResetToken, UserInvitation
from wavy.services.tokens import (
    as_utc,
    expires_in,
    is_expired,
    new_long_token,
    new_otp_code,
    new_token,
    purge_expired_tokens,
    utcnow,
)
from tests.conftest import make_user


def test_naive_timestamps_are_read_as_utc() -> None:
    naive = datetime(2024, 1, 1, 12, 0)
    assert as_utc(naive).tzinfo == timezone.utc
    assert as_utc(naive).hour == 12


def test_is_expired() -> None:
    assert is_expired(None)
    assert is_expired(utcnow() - timedelta(seconds=1))
    assert not is_expired(expires_in(minutes=5))
    # Naive values coming back from SQLite
    assert not is_expired((utcnow() + timedelta(hours=1)).replace(tzinfo=None))


def test_generated_tokens() -> None:
    code = new_otp_code()
    assert len(code) == 6 and code.isdigit()
    assert new_token() != new_token()
    assert len(new_long_token()) > len(new_token())


def test_purge_expired_tokens(db) -> None:
    user = make_user(db, "purge@wavy.test")
    past = utcnow() - timedelta(days=1)
    future = expires_in(days=1)

    db.add_all([
        OtpCode(user_id=user.id, code="111111", expires_at=past),
        OtpCode(user_id=user.id, code="222222", expires_at=future),
        PasswordResetToken(user_id=user.id, token="old", expires_at=past),
        UserInvitation(email="late@wavy.test", token="inv-old", expires_at=past),
        UserInvitation(email="soon@wavy.test", token="inv-new", expires_at=future),
        CraReport(user_id=user.id, month="2024-01", validation_token="cra-old", token_expires_at=past),
    ])
    db.commit()

    counts = purge_expired_tokens(db)

    assert counts == {
        "otp_codes": 1,
        "password_reset_tokens": 1,
        "user_invitations": 1,
        "cra_validation_tokens": 1,
    }
    assert db.query(OtpCode).count() == 1
    statuses = {inv.token: inv.status for inv in db.query(UserInvitation)}
    assert statuses == {"inv-old": "expired", "inv-new": "pending"}
    assert db.query(CraReport).one().validation_token is None
