"""Unit tests for JWTAuthProvider."""

from datetime import datetime, timedelta

import pytest
from jose import jwt as jose_jwt

from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_hs256_token(payload: dict, secret: str = "test-secret") -> str:
    """Create an HS256-signed JWT with a given payload."""
    return jose_jwt.encode(payload, secret, algorithm="HS256")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def hs256_provider() -> JWTAuthProvider:
    """JWTAuthProvider configured with the shared test secret."""
    return JWTAuthProvider(secret_key="test-secret", algorithm="HS256", expire_minutes=30)


# ---------------------------------------------------------------------------
# Tests: validate_token
# ---------------------------------------------------------------------------


class TestValidateToken:
    """validate_token maps claims to a TokenUser or returns None."""

    async def test_should_round_trip_created_token(self, hs256_provider: JWTAuthProvider):
        user = TokenUser(id="123456789012345678", display_name="Ahmed", email="a@example.com")

        result = await hs256_provider.validate_token(hs256_provider.create_token(user))

        assert result == user

    async def test_should_accept_token_without_optional_claims(
        self, hs256_provider: JWTAuthProvider
    ):
        """Only 'sub' is required; name and email are optional."""
        token = _make_hs256_token({"sub": "42", "exp": 9999999999})

        result = await hs256_provider.validate_token(token)

        assert result == TokenUser(id="42")

    async def test_should_stringify_numeric_sub(self, hs256_provider: JWTAuthProvider):
        token = _make_hs256_token({"sub": "987", "name": "N", "exp": 9999999999})

        result = await hs256_provider.validate_token(token)

        assert result is not None
        assert result.id == "987"
        assert result.display_name == "N"

    async def test_should_return_none_when_token_has_no_sub_claim(
        self, hs256_provider: JWTAuthProvider
    ):
        token = _make_hs256_token({"email": "user@example.com", "exp": 9999999999})

        assert await hs256_provider.validate_token(token) is None

    async def test_should_return_none_when_token_has_empty_sub(
        self, hs256_provider: JWTAuthProvider
    ):
        token = _make_hs256_token({"sub": "", "exp": 9999999999})

        assert await hs256_provider.validate_token(token) is None

    async def test_should_return_none_for_wrong_secret(self, hs256_provider: JWTAuthProvider):
        token = _make_hs256_token({"sub": "42", "exp": 9999999999}, secret="other-secret")

        assert await hs256_provider.validate_token(token) is None

    async def test_should_return_none_for_expired_token(self, hs256_provider: JWTAuthProvider):
        expired = datetime.utcnow() - timedelta(minutes=5)
        token = _make_hs256_token({"sub": "42", "exp": expired})

        assert await hs256_provider.validate_token(token) is None

    async def test_should_return_none_for_garbage(self, hs256_provider: JWTAuthProvider):
        assert await hs256_provider.validate_token("not-a-jwt") is None


# ---------------------------------------------------------------------------
# Tests: create_token
# ---------------------------------------------------------------------------


class TestCreateToken:
    def test_should_omit_missing_optional_claims(self, hs256_provider: JWTAuthProvider):
        token = hs256_provider.create_token(TokenUser(id="42"))

        claims = jose_jwt.decode(token, "test-secret", algorithms=["HS256"])

        assert claims["sub"] == "42"
        assert "name" not in claims
        assert "email" not in claims

    def test_should_store_configuration(self):
        provider = JWTAuthProvider(secret_key="my-secret", algorithm="HS256", expire_minutes=15)

        assert provider._algorithm == "HS256"
        assert provider._secret_key == "my-secret"
        assert provider._expire_minutes == 15
