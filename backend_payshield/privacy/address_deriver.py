"""
Deterministic mixing-address derivation.

derive(seed, index) is a pure function: SHA-256(seed || index as big-endian
u32) becomes the ed25519 seed of a Solana keypair. Same (seed, index) always
yields the same address; without the seed, addresses for different indices
are unlinkable. No network, no storage.
"""

from __future__ import annotations

import hashlib
from typing import Awaitable, Callable

import base58
from solders.keypair import Keypair

from backend_payshield.core.exceptions import InvalidSeedLengthError, ValidationError
from backend_payshield.privacy.models import DerivedAddress

SEED_LENGTH = 32
MAX_INDEX = 2**32 - 1


def _check_inputs(seed: bytes, index: int) -> bytes:
    try:
        raw = bytes(seed)
    except (TypeError, ValueError) as e:
        raise ValidationError("Seed must be a bytes-like value") from e
    if len(raw) != SEED_LENGTH:
        raise InvalidSeedLengthError(len(raw))
    if isinstance(index, bool) or not isinstance(index, int):
        raise ValidationError(f"Invalid index: expected int, got {type(index).__name__}")
    if index < 0 or index > MAX_INDEX:
        raise ValidationError(f"Invalid index: must be between 0 and {MAX_INDEX} (u32)")
    return raw


def derive_keypair(seed: bytes, index: int) -> Keypair:
    """Return the Solana keypair for (seed, index)."""
    raw = _check_inputs(seed, index)
    child_seed = hashlib.sha256(raw + index.to_bytes(4, "big")).digest()
    return Keypair.from_seed(child_seed)


def derive(seed: bytes, index: int) -> tuple[str, bytes]:
    """Return (base58 public address, 64-byte secret key) for (seed, index)."""
    kp = derive_keypair(seed, index)
    return str(kp.pubkey()), bytes(kp)


def derive_address(seed: bytes, index: int) -> str:
    return str(derive_keypair(seed, index).pubkey())


def derive_addresses(seed: bytes, count: int, start_index: int = 0) -> list[DerivedAddress]:
    """Derive `count` consecutive addresses starting at start_index (all unused)."""
    if count < 0:
        raise ValidationError("count must be non-negative")
    return [
        DerivedAddress(index=i, public_address=derive_address(seed, i))
        for i in range(start_index, start_index + count)
    ]


def export_secret_key(seed: bytes, index: int) -> str:
    """Base58-encoded 64-byte secret key, the format wallets import."""
    _, secret = derive(seed, index)
    return base58.b58encode(secret).decode("ascii")


def create_keypair_signer(keypair: Keypair) -> Callable[[bytes], Awaitable[bytes]]:
    """Return an async signer producing detached ed25519 signatures for keypair."""

    async def sign(message: bytes) -> bytes:
        return bytes(keypair.sign_message(bytes(message)))

    return sign
