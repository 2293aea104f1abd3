from datetime import timedelta

import pytest

from invoice_server.core.exceptions import InvalidToken
from invoice_server.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_password_hash_round_trip():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong-password", hashed)


def test_malformed_hash_never_verifies():
    assert not verify_password("secret123", "not-a-bcrypt-hash")


def test_token_carries_subject_and_claims():
    token = create_access_token("7", claims={"username": "alice"})
    claims = decode_access_token(token)
    assert claims["sub"] == "7"
    assert claims["username"] == "alice"


def test_expired_token_is_forbidden():
    token = create_access_token("7", expires_delta=timedelta(seconds=-1))
    with pytest.raises(InvalidToken) as excinfo:
        decode_access_token(token)
    assert excinfo.value.error == "Token expired"
    assert excinfo.value.status_code == 403


def test_garbage_token_is_forbidden():
    with pytest.raises(InvalidToken) as excinfo:
        decode_access_token("not.a.token")
    assert excinfo.value.error == "Invalid or expired token."
