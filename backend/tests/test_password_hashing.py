import pytest

from mongol_shop.services.auth import (
    get_password_hash,
    is_legacy_hash,
    legacy_rolling_hash,
    verify_password,
)


def test_new_hashes_are_salted_pbkdf2():
    first = get_password_hash("secret1")
    second = get_password_hash("secret1")

    assert first.startswith("pbkdf2_sha256$100000$")
    assert first != second
    assert verify_password("secret1", first)
    assert verify_password("secret1", second)
    assert not verify_password("secret2", first)


@pytest.mark.parametrize(
    "password,expected",
    [
        ("", "0"),
        ("a", "97"),
        ("ab", "3105"),
        ("hello", "99162322"),
        # wraps to INT32_MIN
        ("polygenelubricants", "-2147483648"),
    ],
)
def test_legacy_rolling_hash_matches_int32_arithmetic(password, expected):
    assert legacy_rolling_hash(password) == expected


def test_legacy_hashes_still_verify():
    stored = legacy_rolling_hash("secret1")
    assert is_legacy_hash(stored)
    assert verify_password("secret1", stored)
    assert not verify_password("secret2", stored)


def test_missing_or_malformed_hash_never_verifies():
    assert not verify_password("anything", None)
    assert not verify_password("anything", "")
    assert not verify_password("anything", "pbkdf2_sha256$notanumber$zz$zz")
    assert not verify_password("anything", "bcrypt$whatever")
    assert not is_legacy_hash(get_password_hash("x"))


@pytest.mark.parametrize("stored", ["12\n", "١٢", "１２", "+12", "1 2"])
def test_legacy_digest_must_be_plain_ascii_decimal(stored):
    assert not is_legacy_hash(stored)
    assert not verify_password("anything", stored)
