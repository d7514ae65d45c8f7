"""
Unit Tests for AuthTokenIssuer
"""

from datetime import datetime, timedelta, timezone

from core.jwt_manager import TokenType


class TestIssue:

    def test_access_token(self, token_issuer):
        token = token_issuer.issue_access_token("u-1", "ada@example.com", ["CUSTOMER"])

        claims = token_issuer.decode(token, TokenType.ACCESS)
        assert claims["valid"] is True
        assert claims["user_id"] == "u-1"
        assert claims["roles"] == ["CUSTOMER"]
        assert token_issuer.validate(token) is True

    def test_refresh_token_is_not_an_access_token(self, token_issuer):
        token = token_issuer.issue_refresh_token("u-1", "ada@example.com")

        assert token_issuer.decode(token, TokenType.REFRESH)["valid"] is True
        result = token_issuer.decode(token, TokenType.ACCESS)
        assert result["valid"] is False
        assert "Expected access" in result["error"]

    def test_garbage_is_invalid(self, token_issuer):
        assert token_issuer.validate("not.a.jwt") is False
        assert token_issuer.decode("")["error"] == "Token is empty"


class TestExpiry:

    def test_expiry_from_config(self, token_issuer):
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)

        assert token_issuer.access_token_expiry == 3600
        assert token_issuer.access_expires_at(now) == now + timedelta(hours=1)
        assert token_issuer.refresh_expires_at(now) == now + timedelta(days=7)
