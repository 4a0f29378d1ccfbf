from __future__ import annotations

import pytest

from execution.crypto import (
    SECP256K1_N,
    ecrecover,
    keccak256,
    private_key_to_address,
    sign_digest,
)

KEY_ONE = (1).to_bytes(32, "big")


def test_keccak256_known_vectors():
    assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    assert keccak256(b"abc").hex() == "4e03657aea45a94fc7d47ba826c8d667c0d1e6e33a64a036ec44f58fa12d6c45"


def test_keccak256_rejects_text():
    with pytest.raises(TypeError):
        keccak256("abc")  # type: ignore[arg-type]


def test_address_of_private_key_one():
    assert private_key_to_address(KEY_ONE).hex() == "7e5f4552091a69125d5dfcb7b8c2659029395bdf"


@pytest.mark.parametrize("bad", [b"", b"\x00" * 32, SECP256K1_N.to_bytes(32, "big"), b"\x01" * 31])
def test_private_key_validation(bad):
    with pytest.raises(ValueError):
        private_key_to_address(bad)


def test_sign_then_recover_yields_signer():
    digest = keccak256(b"permit me")
    key = keccak256(b"some dev key")
    v, r, s = sign_digest(digest, key)
    assert v in (27, 28)
    assert s <= SECP256K1_N // 2
    assert ecrecover(digest, v, r, s) == private_key_to_address(key)


def test_recover_other_digest_gives_other_address():
    key = keccak256(b"some dev key")
    v, r, s = sign_digest(keccak256(b"one"), key)
    assert ecrecover(keccak256(b"two"), v, r, s) != private_key_to_address(key)


def test_recover_rejects_malformed_signatures():
    digest = keccak256(b"x")
    v, r, s = sign_digest(digest, KEY_ONE)
    assert ecrecover(digest, 29, r, s) is None
    assert ecrecover(digest, 0, r, s) is None
    assert ecrecover(digest, v, 0, s) is None
    assert ecrecover(digest, v, r, 0) is None
    assert ecrecover(digest[:31], v, r, s) is None


def test_recover_rejects_high_s_twin():
    digest = keccak256(b"malleable")
    v, r, s = sign_digest(digest, KEY_ONE)
    flipped_v = 55 - v  # 27 <-> 28
    assert ecrecover(digest, flipped_v, r, SECP256K1_N - s) is None
