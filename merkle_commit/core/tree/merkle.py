"""
Height-bounded binary Merkle tree over a flat node array.

Conceptual Background:
---------------------
The tree commits to an ordered array of 2^height leaves with a single
digest (the root). Nodes live in one level-order array (see node.py for
the index arithmetic), so parent/child/sibling lookups are plain integer
math and the tree never holds references between nodes.

Two-Phase Writes:
----------------
A leaf write is split in two:

    tree.insert(i, data)           # leaf digest only
    tree.update_internal_nodes(i)  # the `height` ancestors of leaf i

Between the two calls the root and any opening read from the tree are
STALE: they still commit to the old leaf. This is not guarded. Callers
that batch many writes can insert them all and call flush() once, which
recomputes every shared ancestor a single time. Callers that do not
batch should use insert_and_update().

Concurrency:
-----------
The tree is a plain in-memory structure with no locking. A host sharing
one tree across threads must hold a single exclusive lock across each
insert + update_internal_nodes (or flush) sequence. Reads (get_root,
get_value, get_opening) may run together but never alongside a write.

Properties:
----------
- Build: O(2^height)
- Insert: O(1), update_internal_nodes: O(height)
- Root / value: O(1)
- Opening: O(height)
"""

from typing import Iterable, List, Optional, Set, Tuple

from merkle_commit.core.config import ABSOLUTE_MAX_HEIGHT, config
from merkle_commit.core.errors import IndexOutOfBounds, InvalidHeight, TooManyLeaves
from merkle_commit.core.tree.node import (
    Node,
    first_leaf_index,
    is_left_child,
    left_child_index,
    node_count,
    parent_index,
    right_child_index,
    sibling_index,
)
from merkle_commit.core.tree.opening import Opening, Side, verify_opening
from merkle_commit.crypto import HashFunction, bytes_to_hex, get_hasher
from merkle_commit.utils.logger import get_logger
from merkle_commit.utils.validation import validate_bytes, validate_height, validate_leaf_index

logger = get_logger("tree")


# Data written to leaf slots that were never supplied
DEFAULT_LEAF_DATA = b""


# =============================================================================
# Merkle Tree
# =============================================================================


class MerkleTree:
    """
    Dense binary Merkle tree of fixed height.

    Attributes:
        height: Levels below the root (capacity = 2^height leaves)
        hasher: Injected hash backend
        leaf_count: One past the highest leaf position written so far
    """

    def __init__(
        self,
        height: int,
        leaves: Iterable[bytes] = (),
        hasher: Optional[HashFunction] = None,
        max_height: Optional[int] = None,
    ):
        if max_height is None:
            max_height = config.max_height
        valid, err = validate_height(height, min(max_height, ABSOLUTE_MAX_HEIGHT))
        if not valid:
            raise InvalidHeight(err)

        leaves = list(leaves)
        capacity = 1 << height
        if len(leaves) > capacity:
            raise TooManyLeaves(
                f"Tree of height {height} holds {capacity} leaves, got {len(leaves)}"
            )
        for i, leaf in enumerate(leaves):
            valid, err = validate_bytes(leaf, f"leaves[{i}]")
            if not valid:
                raise TypeError(err)

        self.height = height
        self.hasher = hasher if hasher is not None else get_hasher(config.hash_function)
        self.leaf_count = len(leaves)

        self._first_leaf = first_leaf_index(height)
        self._leaf_data: List[bytes] = [bytes(leaf) for leaf in leaves]
        self._leaf_data.extend([DEFAULT_LEAF_DATA] * (capacity - len(leaves)))
        self._pending: Set[int] = set()

        self._nodes: List[Optional[Node]] = [None] * node_count(height)
        self._build()

    @classmethod
    def build_from_height(
        cls,
        height: int,
        leaves: Iterable[bytes] = (),
        hasher: Optional[HashFunction] = None,
        max_height: Optional[int] = None,
    ) -> "MerkleTree":
        """
        Build a fully consistent tree.

        Unused leaf slots are padded with DEFAULT_LEAF_DATA (empty bytes),
        so trees over the same logical leaves always share a root.

        Args:
            height: Levels below the root
            leaves: Up to 2^height byte strings, in leaf order
            hasher: Hash backend (default from config)
            max_height: Height bound (default config.max_height)

        Raises:
            InvalidHeight: Height negative, non-integer or above the bound
            TooManyLeaves: More than 2^height leaves
            TypeError: A leaf is not bytes-like
        """
        return cls(height, leaves, hasher=hasher, max_height=max_height)

    def _build(self) -> None:
        """Hash every leaf, then every internal node bottom-up, in one pass."""
        padding = Node.leaf(DEFAULT_LEAF_DATA, self.hasher)
        for index, data in enumerate(self._leaf_data):
            if index < self.leaf_count:
                self._nodes[self._first_leaf + index] = Node.leaf(data, self.hasher)
            else:
                self._nodes[self._first_leaf + index] = padding

        for position in range(self._first_leaf - 1, -1, -1):
            self._recompute(position)

        logger.debug(
            f"Built tree: height={self.height}, leaves={self.leaf_count}, "
            f"root={bytes_to_hex(self.get_root())[:18]}"
        )

    def _recompute(self, position: int) -> None:
        self._nodes[position] = Node.internal(
            self._nodes[left_child_index(position)],
            self._nodes[right_child_index(position)],
            self.hasher,
        )

    def _check_index(self, index: int) -> int:
        """Validate a leaf index and return its node position."""
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"index must be int, got {type(index).__name__}")
        valid, err = validate_leaf_index(index, self.capacity)
        if not valid:
            raise IndexOutOfBounds(err)
        return self._first_leaf + index

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def capacity(self) -> int:
        """Number of leaf slots (2^height)."""
        return 1 << self.height

    @property
    def is_full(self) -> bool:
        return self.leaf_count >= self.capacity

    @property
    def pending_updates(self) -> Tuple[int, ...]:
        """Leaf indices written by insert() whose ancestors are stale."""
        return tuple(sorted(self._pending))

    @property
    def is_consistent(self) -> bool:
        """True when every internal digest matches its children."""
        return not self._pending

    @property
    def nodes(self) -> Tuple[Node, ...]:
        """Snapshot of all nodes in level order."""
        return tuple(self._nodes)

    # =========================================================================
    # Writes
    # =========================================================================

    def insert(self, index: int, data: bytes) -> None:
        """
        Write (or overwrite) one leaf.

        Only the leaf digest changes. The root and openings stay stale
        until update_internal_nodes(index) or flush() is called.

        Args:
            index: Leaf index in [0, 2^height)
            data: Raw leaf data

        Raises:
            IndexOutOfBounds: Index outside the leaf range
            TypeError: Index not an int, or data not bytes-like
        """
        position = self._check_index(index)
        valid, err = validate_bytes(data, "data")
        if not valid:
            raise TypeError(err)

        self._leaf_data[index] = bytes(data)
        self._nodes[position] = Node.leaf(data, self.hasher)
        self._pending.add(index)
        if index >= self.leaf_count:
            self.leaf_count = index + 1

    def update_internal_nodes(self, index: int) -> None:
        """
        Recompute the ancestors of leaf `index`, leaf to root.

        Visits exactly `height` nodes; each uses its already-updated
        children.

        Raises:
            IndexOutOfBounds: Index outside the leaf range
        """
        position = self._check_index(index)
        while position > 0:
            position = parent_index(position)
            self._recompute(position)
        self._pending.discard(index)

    def insert_and_update(self, index: int, data: bytes) -> None:
        """Write one leaf and restore consistency immediately."""
        self.insert(index, data)
        self.update_internal_nodes(index)

    def append(self, data: bytes) -> int:
        """
        Write data at the next free leaf position (leaf_count).

        Like insert(), the write is pending until propagated.

        Returns:
            Index of the written leaf

        Raises:
            TooManyLeaves: Tree is full
        """
        if self.is_full:
            raise TooManyLeaves(f"Tree is full ({self.capacity} leaves)")
        index = self.leaf_count
        self.insert(index, data)
        return index

    def flush(self) -> int:
        """
        Propagate every pending write.

        Ancestors shared by several pending leaves are recomputed once,
        deepest level first.

        Returns:
            Number of internal nodes recomputed
        """
        if not self._pending:
            return 0

        level = {parent_index(self._first_leaf + i) for i in self._pending if self.height > 0}
        recomputed = 0
        while level:
            for position in sorted(level):
                self._recompute(position)
            recomputed += len(level)
            level = {parent_index(p) for p in level if p > 0}

        logger.debug(f"Flushed {len(self._pending)} pending leaves, {recomputed} nodes recomputed")
        self._pending.clear()
        return recomputed

    # =========================================================================
    # Reads
    # =========================================================================

    def get_root(self) -> bytes:
        """Root digest (stale while writes are pending)."""
        return self._nodes[0].digest

    def get_value(self, index: int) -> bytes:
        """
        Leaf digest at `index`.

        Raises:
            IndexOutOfBounds: Index outside the leaf range
        """
        return self._nodes[self._check_index(index)].digest

    def get_leaf_data(self, index: int) -> bytes:
        """Raw data stored at leaf `index` (empty bytes for padding)."""
        self._check_index(index)
        return self._leaf_data[index]

    def get_node(self, position: int) -> Node:
        """
        Node at a level-order position.

        Raises:
            IndexOutOfBounds: Position outside the node array
        """
        if isinstance(position, bool) or not isinstance(position, int):
            raise TypeError(f"position must be int, got {type(position).__name__}")
        if not 0 <= position < len(self._nodes):
            raise IndexOutOfBounds(
                f"Node position {position} out of range [0, {len(self._nodes)})"
            )
        return self._nodes[position]

    # =========================================================================
    # Openings
    # =========================================================================

    def get_opening(self, index: int) -> Opening:
        """
        Inclusion proof for leaf `index`.

        Reads the current node digests, so an opening taken while writes
        are pending does not verify against the eventual root.

        Raises:
            IndexOutOfBounds: Index outside the leaf range
        """
        position = self._check_index(index)
        path = []
        while position > 0:
            side = Side.RIGHT if is_left_child(position) else Side.LEFT
            path.append((self._nodes[sibling_index(position)].digest, side))
            position = parent_index(position)

        logger.debug(f"Opening for leaf {index}: depth={len(path)}")
        return Opening(
            leaf_index=index,
            leaf_value=self._leaf_data[index],
            sibling_path=tuple(path),
        )

    def verify_opening(self, opening: Opening) -> bool:
        """Check an opening against this tree's root, hasher and height."""
        return verify_opening(opening, self.get_root(), hasher=self.hasher, height=self.height)

    def __len__(self) -> int:
        return self.leaf_count

    def __repr__(self) -> str:
        return (
            f"MerkleTree(height={self.height}, leaves={self.leaf_count}/{self.capacity}, "
            f"root={bytes_to_hex(self.get_root())[:18]}...)"
        )
