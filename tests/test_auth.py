"""Tests for credential checks and token handling."""

import jwt
import pytest

from dockmon.auth import TokenAuthority, bearer_token
from dockmon.config import AuthConfig
from dockmon.errors import AuthError


def test_check_credentials(authority):
    assert authority.check_credentials("admin", "s3cret")
    assert not authority.check_credentials("admin", "wrong")
    assert not authority.check_credentials("root", "s3cret")


def test_login_issues_verifiable_token(authority):
    token = authority.login("admin", "s3cret")
    claims = authority.verify(token)

    assert claims["username"] == "admin"
    assert claims["exp"] - claims["iat"] == 3600


def test_login_rejects_bad_password(authority):
    with pytest.raises(AuthError) as exc:
        authority.login("admin", "nope")
    assert exc.value.message == "Invalid credentials"
    assert exc.value.status_code == 401


def test_expired_token_is_rejected():
    authority = TokenAuthority(AuthConfig(secret="test-secret", token_ttl=-10))
    token = authority.issue("admin")

    with pytest.raises(AuthError) as exc:
        authority.verify(token)
    assert exc.value.message == "Token expired"


def test_token_signed_with_other_secret_is_rejected(authority):
    forged = jwt.encode({"username": "admin", "exp": 9999999999}, "other-secret", algorithm="HS256")
    with pytest.raises(AuthError) as exc:
        authority.verify(forged)
    assert exc.value.message == "Invalid token"


def test_token_without_username_is_rejected(authority):
    token = jwt.encode({"exp": 9999999999}, "test-secret", algorithm="HS256")
    with pytest.raises(AuthError):
        authority.verify(token)


@pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
def test_missing_or_malformed_token(authority, token):
    with pytest.raises(AuthError):
        authority.verify(token)


def test_random_secret_when_unset():
    first = AuthConfig()
    second = AuthConfig()
    assert first.secret and second.secret
    assert first.secret != second.secret


@pytest.mark.parametrize("header,expected", [
    ("Bearer abc.def", "abc.def"),
    ("bearer abc", "abc"),
    ("Basic abc", None),
    ("Bearer ", None),
    (None, None),
])
def test_bearer_token(header, expected):
    assert bearer_token(header) == expected
