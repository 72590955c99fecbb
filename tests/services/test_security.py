"""Tests for password hashing and access tokens."""

from __future__ import annotations

from echo_feedback.core import security


def test_hash_password_is_salted() -> None:
    first = security.hash_password("s3cret", rounds=4)
    second = security.hash_password("s3cret", rounds=4)

    assert first != second
    assert first.startswith("$2b$04$")
    assert security.verify_password("s3cret", first)
    assert not security.verify_password("S3cret", first)


def test_hash_password_uses_configured_cost() -> None:
    hashed = security.hash_password("s3cret")

    assert hashed.startswith(f"$2b${security.settings.password_hash_rounds:02d}$")


def test_verify_password_rejects_malformed_hashes() -> None:
    assert not security.verify_password("s3cret", "")
    assert not security.verify_password("s3cret", "md5$abc")
    assert not security.verify_password("s3cret", "pbkdf2_sha256$1000$salt$digest")


def test_access_token_round_trip() -> None:
    token = security.create_access_token("U-1234", is_admin=True)

    claims = security.decode_access_token(token)

    assert claims is not None
    assert claims["sub"] == "U-1234"
    assert claims["adm"] is True


def test_decode_access_token_rejects_garbage() -> None:
    assert security.decode_access_token("not-a-token") is None
