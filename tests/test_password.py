"""Password hashing tests."""

from tasktrack.auth.password import hash_password, verify_password


def test_hash_is_not_plaintext():
    hashed = hash_password("password", rounds=4)
    assert hashed != "password"
    assert hashed.startswith("$2b$04$")


def test_fresh_salt_every_time():
    assert hash_password("password", rounds=4) != hash_password("password", rounds=4)


def test_verify_correct_and_wrong():
    hashed = hash_password("correct horse", rounds=4)
    assert verify_password("correct horse", hashed)
    assert not verify_password("battery staple", hashed)


def test_default_cost_is_ten_rounds():
    assert hash_password("password").startswith("$2b$10$")


def test_malformed_hash_is_a_mismatch():
    assert not verify_password("password", "not-a-bcrypt-hash")
    assert not verify_password("password", "")
