"""Tests for bcrypt password hashing."""

from app.services.auth.passwords import PasswordHasher

hasher = PasswordHasher(rounds=4)


def test_hash_password():
    hashed = hasher.hash("SecurePass123")

    assert hashed != "SecurePass123"
    assert hashed.startswith("$2b$04$")


def test_hashes_are_salted():
    assert hasher.hash("SecurePass123") != hasher.hash("SecurePass123")


def test_verify_password_correct():
    hashed = hasher.hash("SecurePass123")

    assert hasher.verify("SecurePass123", hashed) is True


def test_verify_password_incorrect():
    hashed = hasher.hash("SecurePass123")

    assert hasher.verify("WrongPass123", hashed) is False


def test_verify_against_malformed_hash_is_false():
    assert hasher.verify("SecurePass123", "not-a-bcrypt-hash") is False


def test_dummy_verify_runs_a_real_check():
    hasher_ = PasswordHasher(rounds=4)

    hasher_.dummy_verify("SecurePass123")

    assert hasher_._dummy_hash is not None
    assert hasher_._dummy_hash.startswith("$2b$04$")
