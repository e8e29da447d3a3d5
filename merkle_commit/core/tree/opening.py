"""
Opening - a self-contained inclusion proof for one leaf.

Conceptual Background:
---------------------
An opening lets a verifier who holds only the root check that a given
value sits at a given leaf position. It carries the raw leaf value and,
for every level from the leaf up to just below the root, the digest of
the sibling on the path and which side that sibling sits on.

Verification:
------------
    acc = hash_leaf(leaf_value)
    for (digest, side) in sibling_path:
        acc = hash_internal(digest, acc)   if side == LEFT
        acc = hash_internal(acc, digest)   if side == RIGHT
    valid iff acc == root

Malformed openings never raise during verification: a wrong path length,
a digest of the wrong size, an unknown side, or a leaf index whose bits
disagree with the recorded sides all make verify_opening return False.
MalformedOpening is reserved for decoding (from_bytes / from_dict).

Wire Format:
-----------
    version(1) | leaf_index(8) | depth(1) | digest_size(1) | leaf_len(4)
    | leaf_value | depth x [side(1) | digest(digest_size)]

All integers big-endian.
"""

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Optional, Tuple

from merkle_commit.core.config import config
from merkle_commit.core.errors import MalformedOpening
from merkle_commit.crypto import HashFunction, bytes_to_hex, get_hasher, hex_to_bytes
from merkle_commit.utils.validation import validate_hash, validate_hex_string, validate_integer


# =============================================================================
# Constants
# =============================================================================

OPENING_VERSION = 1

# version, leaf_index, depth, digest_size, leaf_len
_HEADER = struct.Struct(">BQBBI")


class Side(IntEnum):
    """Side occupied by a sibling relative to the node on the path."""
    LEFT = 0
    RIGHT = 1


PathEntry = Tuple[bytes, Side]


# =============================================================================
# Opening
# =============================================================================


@dataclass(frozen=True)
class Opening:
    """
    Inclusion proof for a single leaf.

    Holds no reference to the tree that produced it.

    Attributes:
        leaf_index: Position of the leaf (0-based)
        leaf_value: Raw leaf data
        sibling_path: (sibling digest, sibling side) pairs, leaf to root
    """
    leaf_index: int
    leaf_value: bytes
    sibling_path: Tuple[PathEntry, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "sibling_path", tuple(tuple(e) for e in self.sibling_path))

    @property
    def depth(self) -> int:
        """Number of path entries (equals the tree height for a well-formed opening)."""
        return len(self.sibling_path)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_bytes(self) -> bytes:
        """Serialize to the binary wire format."""
        digest_size = len(self.sibling_path[0][0]) if self.sibling_path else 0
        parts = [
            _HEADER.pack(
                OPENING_VERSION,
                self.leaf_index,
                self.depth,
                digest_size,
                len(self.leaf_value),
            ),
            bytes(self.leaf_value),
        ]
        for digest, side in self.sibling_path:
            if len(digest) != digest_size:
                raise ValueError("All sibling digests must have the same size")
            parts.append(struct.pack(">B", int(side)))
            parts.append(bytes(digest))
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Opening":
        """
        Deserialize from the binary wire format.

        Raises:
            MalformedOpening: On truncation, trailing bytes, unknown
                version or invalid side byte
        """
        if len(data) < _HEADER.size:
            raise MalformedOpening(f"Opening too short: {len(data)} bytes")

        version, leaf_index, depth, digest_size, leaf_len = _HEADER.unpack_from(data, 0)
        if version != OPENING_VERSION:
            raise MalformedOpening(f"Unsupported opening version: {version}")
        if depth > 0 and digest_size == 0:
            raise MalformedOpening("Digest size must be positive when the path is non-empty")

        expected = _HEADER.size + leaf_len + depth * (1 + digest_size)
        if len(data) != expected:
            raise MalformedOpening(f"Opening must be {expected} bytes, got {len(data)}")

        offset = _HEADER.size
        leaf_value = bytes(data[offset:offset + leaf_len])
        offset += leaf_len

        path = []
        for level in range(depth):
            side_byte = data[offset]
            offset += 1
            try:
                side = Side(side_byte)
            except ValueError:
                raise MalformedOpening(f"Invalid side byte {side_byte} at level {level}") from None
            path.append((bytes(data[offset:offset + digest_size]), side))
            offset += digest_size

        return cls(leaf_index=leaf_index, leaf_value=leaf_value, sibling_path=tuple(path))

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation (0x-hex bytes, named sides)."""
        return {
            "leaf_index": self.leaf_index,
            "leaf_value": bytes_to_hex(self.leaf_value),
            "sibling_path": [
                {"digest": bytes_to_hex(digest), "side": Side(side).name.lower()}
                for digest, side in self.sibling_path
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Opening":
        """
        Rebuild an opening from to_dict() output.

        Raises:
            MalformedOpening: On missing fields, bad hex or unknown side
        """
        if not isinstance(data, dict):
            raise MalformedOpening("Opening data must be dict")
        for key in ("leaf_index", "leaf_value", "sibling_path"):
            if key not in data:
                raise MalformedOpening(f"Missing required field: {key}")

        valid, err = validate_integer(data["leaf_index"], "leaf_index", 0, 2**64 - 1)
        if not valid:
            raise MalformedOpening(err)
        valid, err = validate_hex_string(data["leaf_value"], "leaf_value")
        if not valid:
            raise MalformedOpening(err)
        if not isinstance(data["sibling_path"], list):
            raise MalformedOpening("sibling_path must be a list")

        path = []
        for level, entry in enumerate(data["sibling_path"]):
            if not isinstance(entry, dict) or "digest" not in entry or "side" not in entry:
                raise MalformedOpening(f"Invalid path entry at level {level}")
            valid, err = validate_hex_string(entry["digest"], f"sibling_path[{level}].digest")
            if not valid:
                raise MalformedOpening(err)
            side_name = entry["side"]
            if not isinstance(side_name, str) or side_name.upper() not in Side.__members__:
                raise MalformedOpening(f"Invalid side {side_name!r} at level {level}")
            path.append((hex_to_bytes(entry["digest"]), Side[side_name.upper()]))

        return cls(
            leaf_index=data["leaf_index"],
            leaf_value=hex_to_bytes(data["leaf_value"]),
            sibling_path=tuple(path),
        )

    def __repr__(self) -> str:
        return (
            f"Opening(index={self.leaf_index}, value={bytes_to_hex(self.leaf_value)[:18]}, "
            f"depth={self.depth})"
        )


# =============================================================================
# Verification
# =============================================================================


def verify_opening(
    opening: Opening,
    expected_root: bytes,
    hasher: Optional[HashFunction] = None,
    height: Optional[int] = None,
) -> bool:
    """
    Check an opening against a root digest.

    Args:
        opening: Proof to check
        expected_root: Root digest the leaf should commit to
        hasher: Hash backend used to build the tree (default from config)
        height: Expected tree height; when given, the path length must match

    Returns:
        True if the opening proves inclusion under expected_root
    """
    if hasher is None:
        hasher = get_hasher(config.hash_function)
    digest_size = hasher.digest_size

    if not isinstance(opening, Opening):
        return False
    if not validate_hash(expected_root, "expected_root", digest_size)[0]:
        return False
    if not isinstance(opening.leaf_value, (bytes, bytearray)):
        return False

    path = opening.sibling_path
    if height is not None and len(path) != height:
        return False

    index = opening.leaf_index
    if isinstance(index, bool) or not isinstance(index, int):
        return False
    if not 0 <= index < (1 << len(path)):
        return False

    acc = hasher.hash_leaf(opening.leaf_value)
    for level, entry in enumerate(path):
        if len(entry) != 2:
            return False
        digest, side = entry
        if not validate_hash(digest, f"sibling_path[{level}]", digest_size)[0]:
            return False
        if side not in (Side.LEFT, Side.RIGHT):
            return False

        # Bit `level` of the index is 0 when the path node is a left child
        path_is_left = (index >> level) & 1 == 0
        if path_is_left != (side == Side.RIGHT):
            return False

        if side == Side.LEFT:
            acc = hasher.hash_internal(bytes(digest), acc)
        else:
            acc = hasher.hash_internal(acc, bytes(digest))

    return acc == bytes(expected_root)
