"""
merkle-commit

A height-bounded binary Merkle tree providing:
- A single fixed-size commitment (root) over an ordered leaf array
- Two-phase leaf writes with O(height) incremental recomputation
- Self-contained inclusion proofs (openings) verifiable without the tree
"""

__version__ = "0.1.0"
