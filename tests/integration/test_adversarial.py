"""
Adversarial Tests - forgery attempts against openings.

Tests verify:
1. Internal nodes cannot be passed off as leaves
2. Openings do not transfer between trees or positions
3. Decoded hostile input is rejected or fails verification
"""

import pytest

from merkle_commit.crypto import Sha256Hasher, LEAF_PREFIX, NODE_PREFIX, sha256
from merkle_commit.core.errors import MalformedOpening
from merkle_commit.core.tree import MerkleTree, Opening, Side, verify_opening


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def tree():
    return MerkleTree.build_from_height(2, [b"a", b"b", b"c", b"d"])


class TestSecondPreimage:
    """Domain separation blocks internal-node-as-leaf forgeries."""

    def test_internal_node_as_leaf(self, tree):
        """Present node 1 (parent of leaves 0, 1) as a leaf at height 1."""
        left, right = tree.get_node(3).digest, tree.get_node(4).digest
        forged = Opening(
            leaf_index=0,
            leaf_value=left + right,
            sibling_path=((tree.get_node(2).digest, Side.RIGHT),),
        )
        assert not verify_opening(forged, tree.get_root())

    def test_prefixes_separate_input_spaces(self):
        """The leaf hash of two concatenated digests never equals their parent."""
        a, b = sha256(b"a"), sha256(b"b")
        h = Sha256Hasher()
        assert h.hash_leaf(a + b) == sha256(LEAF_PREFIX + a + b)
        assert h.hash_internal(a, b) == sha256(NODE_PREFIX + a + b)
        assert h.hash_leaf(a + b) != h.hash_internal(a, b)


class TestTransplant:
    """Openings are bound to one root and one position."""

    def test_opening_against_other_tree(self, tree):
        other = MerkleTree.build_from_height(2, [b"a", b"b", b"c", b"e"])
        assert not verify_opening(tree.get_opening(0), other.get_root())

    def test_swap_leaf_value_between_positions(self, tree):
        opening = tree.get_opening(0)
        forged = Opening(0, b"b", opening.sibling_path)
        assert not verify_opening(forged, tree.get_root())

    def test_short_path_at_wrong_height(self, tree):
        """A one-level opening for an internal digest fails the height check."""
        forged = Opening(0, b"a", tree.get_opening(0).sibling_path[:1])
        assert not verify_opening(forged, tree.get_root(), height=2)


class TestHostileInput:
    """Decoding never yields an opening that verifies by accident."""

    def test_random_garbage(self):
        for blob in (b"", b"\x01", b"\xff" * 64):
            with pytest.raises(MalformedOpening):
                Opening.from_bytes(blob)

    def test_inflated_leaf_length(self, tree):
        encoded = bytearray(tree.get_opening(2).to_bytes())
        encoded[11:15] = (2**32 - 1).to_bytes(4, "big")
        with pytest.raises(MalformedOpening):
            Opening.from_bytes(bytes(encoded))

    def test_decoded_with_wrong_digest_size(self, tree):
        """A well-formed encoding with short digests decodes but fails verification."""
        short = Opening(0, b"a", ((b"\x00" * 8, Side.RIGHT), (b"\x00" * 8, Side.RIGHT)))
        decoded = Opening.from_bytes(short.to_bytes())
        assert not verify_opening(decoded, tree.get_root())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
