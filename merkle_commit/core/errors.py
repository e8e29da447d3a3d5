"""
Error types raised by the Merkle tree.

Each error also derives from the built-in exception a caller would
naturally expect (ValueError / IndexError), so generic handlers keep
working.
"""


class MerkleError(Exception):
    """Base class for all Merkle tree errors."""


class InvalidHeight(MerkleError, ValueError):
    """Tree height is negative, not an integer, or above the configured bound."""


class TooManyLeaves(MerkleError, ValueError):
    """More leaves were supplied (or appended) than the tree can hold."""


class IndexOutOfBounds(MerkleError, IndexError):
    """Leaf or node index outside the valid range for the tree's height."""


class MalformedOpening(MerkleError, ValueError):
    """Serialized opening could not be decoded."""


__all__ = [
    "MerkleError",
    "InvalidHeight",
    "TooManyLeaves",
    "IndexOutOfBounds",
    "MalformedOpening",
]
