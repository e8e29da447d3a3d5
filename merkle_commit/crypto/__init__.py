"""
Cryptographic primitives for merkle-commit.

This module provides:
- Raw hashing functions (SHA-256, Keccak-256)
- Hex conversion helpers
- The injectable HashFunction interface used by the tree

Design Notes:
-------------
The tree never calls a hash algorithm directly. It depends only on the
HashFunction contract (hash_leaf / hash_internal / digest_size), so a
production hash can be swapped for a deterministic stand-in in tests
without touching tree logic.

SHA-256 is the default backend. Keccak-256 is offered for commitments that
must be checked by EVM contracts.
"""

import hashlib

from Crypto.Hash import keccak


# =============================================================================
# Hashing
# =============================================================================


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash.

    Used for: default tree backend.
    """
    return hashlib.sha256(data).digest()


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for: trees whose roots are verified on-chain.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


# =============================================================================
# Utility Functions
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to hex string with 0x prefix."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith("0x") or hex_str.startswith("0X"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)


# Imported last: hasher builds on the primitives above
from merkle_commit.crypto.hasher import (
    HashFunction,
    PrefixedHasher,
    Sha256Hasher,
    Keccak256Hasher,
    get_hasher,
    DIGEST_SIZE,
    LEAF_PREFIX,
    NODE_PREFIX,
)


__all__ = [
    "sha256",
    "keccak256",
    "bytes_to_hex",
    "hex_to_bytes",
    "HashFunction",
    "PrefixedHasher",
    "Sha256Hasher",
    "Keccak256Hasher",
    "get_hasher",
    "DIGEST_SIZE",
    "LEAF_PREFIX",
    "NODE_PREFIX",
]
