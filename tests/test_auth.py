"""Tests for bearer credential verification."""

from datetime import timedelta

import jwt
import pytest

from floris.auth import create_access_token, decode_access_token
from floris.config import settings
from floris.models.failure import UnauthorizedError


class TestDecodeAccessToken:
    def test_round_trip(self) -> None:
        token = create_access_token("user-1")
        assert decode_access_token(token) == "user-1"

    def test_sub_claim_accepted(self) -> None:
        token = jwt.encode({"sub": "user-2"}, settings.jwt_secret, algorithm="HS256")
        assert decode_access_token(token) == "user-2"

    def test_wrong_secret(self) -> None:
        token = jwt.encode({"id": "user-1"}, "another-secret", algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            decode_access_token(token)

    def test_expired(self) -> None:
        token = create_access_token("user-1", expires_in=timedelta(seconds=-10))
        with pytest.raises(UnauthorizedError):
            decode_access_token(token)

    def test_garbage(self) -> None:
        with pytest.raises(UnauthorizedError):
            decode_access_token("not-a-jwt")

    def test_missing_user_id(self) -> None:
        token = jwt.encode({"name": "nobody"}, settings.jwt_secret, algorithm="HS256")
        with pytest.raises(UnauthorizedError) as exc_info:
            decode_access_token(token)
        assert exc_info.value.status_code == 401
