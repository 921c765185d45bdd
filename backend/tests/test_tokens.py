"""Token engine and signing-key configuration."""

import base64
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from pydantic import ValidationError

from asha_assist.config import Settings
from asha_assist.security.principal import Principal, Role
from asha_assist.security.tokens import TokenEngine

from conftest import FrozenClock

SECRET = b"k" * 32
OTHER_SECRET = b"z" * 32


@pytest.fixture
def engine():
    return TokenEngine(SECRET)


@pytest.mark.parametrize("role", [Role.WORKER, Role.ADMIN])
def test_issued_token_validates_to_same_principal(engine, role):
    principal = Principal(username="asha1", role=role)
    assert engine.validate(engine.issue(principal)) == principal


def test_token_claims_carry_seven_day_absolute_lifetime(engine):
    token = engine.issue(Principal("asha1", Role.WORKER))
    claims = jwt.get_unverified_claims(token)
    assert claims["sub"] == "asha1"
    assert claims["role"] == "ASHA_KARMI"
    assert claims["exp"] - claims["iat"] == int(timedelta(days=7).total_seconds())


def test_expired_token_is_rejected():
    issued = datetime.now(timezone.utc) - timedelta(days=7, minutes=1)
    stale_engine = TokenEngine(SECRET, clock=FrozenClock(issued))
    token = stale_engine.issue(Principal("asha1", Role.WORKER))
    assert TokenEngine(SECRET).validate(token) is None


def test_token_signed_with_other_secret_is_rejected(engine):
    token = TokenEngine(OTHER_SECRET).issue(Principal("asha1", Role.ADMIN))
    assert engine.validate(token) is None


def test_token_with_other_algorithm_is_rejected(engine):
    now = int(datetime.now(timezone.utc).timestamp())
    token = jwt.encode(
        {"sub": "asha1", "role": "ADMIN", "iat": now, "exp": now + 60},
        SECRET,
        algorithm="HS512",
    )
    assert engine.validate(token) is None


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c", "Bearer x.y.z"])
def test_malformed_token_is_rejected(engine, token):
    assert engine.validate(token) is None


def test_unknown_role_is_rejected(engine):
    now = int(datetime.now(timezone.utc).timestamp())
    token = jwt.encode({"sub": "asha1", "role": "ROOT", "iat": now, "exp": now + 60}, SECRET, algorithm="HS256")
    assert engine.validate(token) is None


def test_token_without_expiry_is_rejected(engine):
    token = jwt.encode({"sub": "asha1", "role": "ADMIN"}, SECRET, algorithm="HS256")
    assert engine.validate(token) is None


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenEngine(b"")


def _settings(**overrides):
    values = {
        "database_url": "sqlite+aiosqlite:///:memory:",
        "jwt_secret": base64.b64encode(SECRET).decode(),
        "twilio_account_sid": "AC1",
        "twilio_auth_token": "tok",
        "twilio_phone_number": "+15550000000",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_settings_decode_signing_key():
    assert _settings().jwt_signing_key == SECRET


@pytest.mark.parametrize(
    "secret",
    ["not base64!!", base64.b64encode(b"short").decode()],
)
def test_settings_reject_bad_signing_key(secret):
    with pytest.raises(ValidationError):
        _settings(jwt_secret=secret)


def test_settings_reject_blank_sms_credentials():
    with pytest.raises(ValidationError):
        _settings(twilio_auth_token="   ")
