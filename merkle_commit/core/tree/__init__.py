"""
Merkle tree module.

Provides:
- Node: one digest slot of the flattened tree
- MerkleTree: build, two-phase insert/update, retrieval, openings
- Opening / verify_opening: self-contained inclusion proofs
"""

from merkle_commit.core.tree.node import Node
from merkle_commit.core.tree.opening import Opening, Side, verify_opening
from merkle_commit.core.tree.merkle import MerkleTree, DEFAULT_LEAF_DATA

__all__ = [
    "Node",
    "Opening",
    "Side",
    "verify_opening",
    "MerkleTree",
    "DEFAULT_LEAF_DATA",
]
