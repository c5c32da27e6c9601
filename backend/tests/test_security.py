"""
Tests for bearer-token decoding.
"""

from datetime import timedelta

import jwt
import pytest

from seat_reservation.core.config import get_settings
from seat_reservation.core.exceptions import Unauthorized
from seat_reservation.core.security import Principal, create_access_token, decode_access_token


def test_token_round_trip():
    token = create_access_token({"sub": "user-7"})
    assert decode_access_token(token) == Principal(user_id="user-7", is_admin=False)


def test_admin_claim():
    token = create_access_token({"sub": "ops", "is_admin": True})
    assert decode_access_token(token).is_admin is True


def test_expired_token():
    token = create_access_token({"sub": "user-7"}, expires_delta=timedelta(seconds=-5))
    with pytest.raises(Unauthorized) as exc:
        decode_access_token(token)
    assert exc.value.message == "Token expired"


def test_wrong_signature():
    settings = get_settings()
    token = jwt.encode({"sub": "user-7"}, "some-other-key", algorithm=settings.ALGORITHM)
    with pytest.raises(Unauthorized):
        decode_access_token(token)


def test_missing_subject():
    token = create_access_token({"is_admin": True})
    with pytest.raises(Unauthorized) as exc:
        decode_access_token(token)
    assert exc.value.status_code == 401
