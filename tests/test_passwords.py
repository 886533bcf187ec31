"""Tests for perch.security.passwords — argon2 hashing."""

import pytest

from perch.security.passwords import hash_password, verify_password


class TestHashPassword:
    def test_produces_argon2_hash(self) -> None:
        assert hash_password("pass").startswith("$argon2id$")

    def test_salted(self) -> None:
        assert hash_password("pass") != hash_password("pass")

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError):
            hash_password("")


class TestVerifyPassword:
    def test_correct(self) -> None:
        assert verify_password("pass", hash_password("pass")) is True

    def test_wrong(self) -> None:
        assert verify_password("word", hash_password("pass")) is False

    def test_empty_password(self) -> None:
        assert verify_password("", hash_password("pass")) is False

    def test_empty_hash(self) -> None:
        assert verify_password("pass", "") is False

    def test_plaintext_hash_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown hash format"):
            verify_password("pass", "pass")
