"""
Node - one slot of the flattened Merkle tree.

Layout:
-------
The complete binary tree of height h is stored as a flat array of
2^(h+1) - 1 slots in level order:

    position 0                 root
    children of i              2i + 1, 2i + 2
    parent of i (i > 0)        (i - 1) // 2
    leaf k                     2^h - 1 + k

Left children always sit at odd positions, right children at even ones.
"""

from dataclasses import dataclass

from merkle_commit.crypto import bytes_to_hex


# =============================================================================
# Index Arithmetic
# =============================================================================


def parent_index(position: int) -> int:
    """Position of the parent of `position` (root has none)."""
    if position <= 0:
        raise ValueError("Root node has no parent")
    return (position - 1) // 2


def left_child_index(position: int) -> int:
    return 2 * position + 1


def right_child_index(position: int) -> int:
    return 2 * position + 2


def is_left_child(position: int) -> bool:
    """True if `position` is the left child of its parent."""
    return position > 0 and position % 2 == 1


def sibling_index(position: int) -> int:
    """Position of the other child of the same parent."""
    if position <= 0:
        raise ValueError("Root node has no sibling")
    return position + 1 if is_left_child(position) else position - 1


def first_leaf_index(height: int) -> int:
    """Position of leaf 0 in a tree of the given height."""
    return (1 << height) - 1


def node_count(height: int) -> int:
    """Number of slots in a tree of the given height."""
    return (1 << (height + 1)) - 1


# =============================================================================
# Node
# =============================================================================


@dataclass(frozen=True)
class Node:
    """
    A digest together with its structural role.

    Nodes are never mutated in place; the owning tree swaps in a new
    Node when a digest changes.

    Attributes:
        digest: Hash output (digest_size bytes)
        is_leaf: True for leaf slots, False for internal slots
    """
    digest: bytes
    is_leaf: bool = False

    @classmethod
    def leaf(cls, data: bytes, hasher) -> "Node":
        """Leaf node over raw data."""
        return cls(digest=hasher.hash_leaf(data), is_leaf=True)

    @classmethod
    def internal(cls, left: "Node", right: "Node", hasher) -> "Node":
        """Internal node over two children, in positional order."""
        return cls(digest=hasher.hash_internal(left.digest, right.digest), is_leaf=False)

    def __repr__(self) -> str:
        kind = "leaf" if self.is_leaf else "internal"
        return f"Node({kind}, {bytes_to_hex(self.digest)[:18]}...)"
