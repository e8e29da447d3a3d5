"""
HashFunction - the hash boundary consumed by the Merkle tree.

The tree needs exactly two entry points:

    hash_leaf(data)            -> digest   (raw leaf bytes)
    hash_internal(left, right) -> digest   (two child digests)

plus a tree-wide constant `digest_size`.

Domain Separation:
-----------------
Leaf and internal hashes are computed over differently-tagged inputs:

    hash_leaf(data)        = H(0x00 || data)
    hash_internal(l, r)    = H(0x01 || l || r)

Without the tag, the 64-byte concatenation of two child digests is also a
valid leaf value, and an attacker could present an internal node as a leaf
(second-preimage forgery of an opening). With the tag the two input spaces
never overlap.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict

from merkle_commit.crypto import sha256, keccak256


# =============================================================================
# Constants
# =============================================================================

DIGEST_SIZE = 32

LEAF_PREFIX = b"\x00"
NODE_PREFIX = b"\x01"


# =============================================================================
# Interface
# =============================================================================


class HashFunction(ABC):
    """
    Abstract hash primitive injected into a MerkleTree.

    Implementations must be deterministic and always return
    `digest_size` bytes.
    """

    name: str = "abstract"
    digest_size: int = DIGEST_SIZE

    @abstractmethod
    def hash_leaf(self, data: bytes) -> bytes:
        """Hash raw leaf data into a leaf digest."""

    @abstractmethod
    def hash_internal(self, left: bytes, right: bytes) -> bytes:
        """Hash two child digests (in positional order) into a parent digest."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(digest_size={self.digest_size})"


class PrefixedHasher(HashFunction):
    """
    HashFunction built from a single one-shot digest function.

    Subclasses supply `_digest`; domain separation and input checks
    live here.
    """

    @abstractmethod
    def _digest(self, data: bytes) -> bytes:
        """One-shot digest of `data`."""

    def hash_leaf(self, data: bytes) -> bytes:
        return self._digest(LEAF_PREFIX + bytes(data))

    def hash_internal(self, left: bytes, right: bytes) -> bytes:
        if len(left) != self.digest_size:
            raise ValueError(f"Left child must be {self.digest_size} bytes, got {len(left)}")
        if len(right) != self.digest_size:
            raise ValueError(f"Right child must be {self.digest_size} bytes, got {len(right)}")
        return self._digest(NODE_PREFIX + left + right)


class Sha256Hasher(PrefixedHasher):
    """Domain-separated SHA-256 (default backend)."""

    name = "sha256"

    def _digest(self, data: bytes) -> bytes:
        return sha256(data)


class Keccak256Hasher(PrefixedHasher):
    """Domain-separated Keccak-256."""

    name = "keccak256"

    def _digest(self, data: bytes) -> bytes:
        return keccak256(data)


# =============================================================================
# Registry
# =============================================================================

_HASHERS: Dict[str, Callable[[], HashFunction]] = {
    Sha256Hasher.name: Sha256Hasher,
    Keccak256Hasher.name: Keccak256Hasher,
}


def get_hasher(name: str) -> HashFunction:
    """
    Resolve a hash backend by name.

    Args:
        name: Backend name ("sha256" or "keccak256", case-insensitive)

    Returns:
        A new HashFunction instance

    Raises:
        ValueError: If the name is unknown
    """
    factory = _HASHERS.get(name.lower())
    if factory is None:
        known = ", ".join(sorted(_HASHERS))
        raise ValueError(f"Unknown hash function '{name}' (known: {known})")
    return factory()
