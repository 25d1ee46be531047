"""Unit tests for login link tokens and one-time codes"""

import re

from organizer.auth.otp import (
    generate_code,
    generate_link_token,
    hash_code,
    hash_token,
    verify_code,
)


class TestGenerate:

    def test_code_is_six_digits(self):
        for _ in range(50):
            assert re.fullmatch(r"\d{6}", generate_code())

    def test_link_tokens_are_unique(self):
        tokens = {generate_link_token() for _ in range(20)}
        assert len(tokens) == 20


class TestHashToken:

    def test_hash_is_deterministic_sha256_hex(self):
        assert hash_token("abc") == hash_token("abc")
        assert len(hash_token("abc")) == 64

    def test_different_tokens_hash_differently(self):
        assert hash_token("abc") != hash_token("abd")


class TestCodeHashing:

    def test_verify_correct_code(self):
        code_hash = hash_code("123456")
        assert code_hash.startswith("$argon2id$")
        assert verify_code("123456", code_hash) is True

    def test_verify_wrong_code(self):
        assert verify_code("654321", hash_code("123456")) is False

    def test_hash_is_salted(self):
        assert hash_code("123456") != hash_code("123456")

    def test_verify_empty_inputs(self):
        assert verify_code("", hash_code("123456")) is False
        assert verify_code("123456", "") is False

    def test_verify_malformed_hash(self):
        assert verify_code("123456", "not-an-argon2-hash") is False
