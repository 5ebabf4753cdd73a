# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Session token issue/verify."""

from datetime import timedelta

import pytest
from jose import jwt

from albumrate_server.auth import InvalidToken, create_access_token, decode_token
from albumrate_server.config import settings


def test_round_trip():
    token = create_access_token(42, "ivy")
    identity = decode_token(token)
    assert identity.id == 42
    assert identity.username == "ivy"


def test_default_expiry_window():
    claims = jwt.get_unverified_claims(create_access_token(1, "jo"))
    assert claims["exp"] - claims["iat"] == settings.jwt_expire_minutes * 60


def test_expired_token_is_invalid():
    token = create_access_token(1, "jo", expires_delta=timedelta(seconds=-5))
    with pytest.raises(InvalidToken):
        decode_token(token)


def test_foreign_signature_is_invalid():
    token = jwt.encode({"id": 1, "username": "jo"}, "some-other-secret", algorithm="HS256")
    with pytest.raises(InvalidToken):
        decode_token(token)


def test_tampered_payload_is_invalid():
    header, _payload, signature = create_access_token(1, "jo").split(".")
    forged = jwt.encode({"id": 2, "username": "mallory"}, "x", algorithm="HS256").split(".")[1]
    with pytest.raises(InvalidToken):
        decode_token(".".join([header, forged, signature]))


@pytest.mark.parametrize("token", ["", "abc", "a.b.c"])
def test_malformed_token_is_invalid(token):
    with pytest.raises(InvalidToken):
        decode_token(token)


def test_missing_identity_claims_is_invalid():
    token = jwt.encode({"sub": "1"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    with pytest.raises(InvalidToken):
        decode_token(token)
