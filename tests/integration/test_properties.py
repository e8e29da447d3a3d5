"""
End-to-end properties of the Merkle tree.

Tests verify:
1. Build determinism
2. Insert+update consistency against a fresh build
3. Opening round-trip for every leaf
4. Tamper sensitivity
5. Bounds errors
6. Padding stability and the worked examples
"""

import random

import pytest

from merkle_commit.crypto import Sha256Hasher
from merkle_commit.core.errors import IndexOutOfBounds, TooManyLeaves
from merkle_commit.core.tree import MerkleTree, Opening, Side, verify_opening


H = Sha256Hasher()


def random_leaves(rng, count):
    return [rng.randbytes(rng.randint(0, 40)) for _ in range(count)]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def rng():
    return random.Random(1337)


@pytest.fixture(params=[0, 1, 2, 3, 5])
def height(request):
    return request.param


# =============================================================================
# Properties
# =============================================================================


class TestDeterminism:
    """Building twice from the same input yields the same root."""

    def test_same_input_same_root(self, rng, height):
        leaves = random_leaves(rng, rng.randint(0, 1 << height))
        first = MerkleTree.build_from_height(height, leaves)
        second = MerkleTree.build_from_height(height, list(leaves))
        assert first.get_root() == second.get_root()
        assert first.nodes == second.nodes

    def test_leaf_order_matters(self):
        a = MerkleTree.build_from_height(1, [b"x", b"y"])
        b = MerkleTree.build_from_height(1, [b"y", b"x"])
        assert a.get_root() != b.get_root()


class TestInsertConsistency:
    """insert + update_internal_nodes equals a fresh build."""

    def test_random_writes(self, rng, height):
        capacity = 1 << height
        leaves = random_leaves(rng, capacity)
        tree = MerkleTree.build_from_height(height, leaves)

        for _ in range(20):
            index = rng.randrange(capacity)
            data = rng.randbytes(16)
            tree.insert(index, data)
            tree.update_internal_nodes(index)
            leaves[index] = data

            assert tree.get_value(index) == H.hash_leaf(data)
            assert tree.get_root() == MerkleTree.build_from_height(height, leaves).get_root()

    def test_batched_writes(self, rng, height):
        capacity = 1 << height
        leaves = random_leaves(rng, capacity)
        tree = MerkleTree.build_from_height(height, leaves)

        for index in rng.sample(range(capacity), k=min(capacity, 5)):
            data = rng.randbytes(8)
            tree.insert(index, data)
            leaves[index] = data
        tree.flush()

        assert tree.get_root() == MerkleTree.build_from_height(height, leaves).get_root()


class TestOpeningRoundTrip:
    """Every opening verifies against its tree's root."""

    def test_all_leaves(self, rng, height):
        tree = MerkleTree.build_from_height(height, random_leaves(rng, 1 << height))
        root = tree.get_root()
        for index in range(tree.capacity):
            opening = tree.get_opening(index)
            assert opening.depth == height
            assert verify_opening(opening, root, height=height)
            assert verify_opening(Opening.from_bytes(opening.to_bytes()), root, height=height)
            assert verify_opening(Opening.from_dict(opening.to_dict()), root, height=height)

    def test_openings_after_updates(self, rng):
        tree = MerkleTree.build_from_height(4, random_leaves(rng, 9))
        for index in (0, 9, 15):
            tree.insert_and_update(index, b"fresh")
        for index in range(16):
            assert verify_opening(tree.get_opening(index), tree.get_root(), height=4)


class TestTamperSensitivity:
    """Flipping any byte or side bit invalidates an opening."""

    @pytest.fixture
    def setup(self):
        tree = MerkleTree.build_from_height(3, [b"alpha", b"beta", b"gamma", b"delta", b"eps"])
        return tree.get_opening(5), tree.get_root()

    def test_every_sibling_byte(self, setup):
        opening, root = setup
        for level, (digest, side) in enumerate(opening.sibling_path):
            for pos in range(len(digest)):
                mutated = bytearray(digest)
                mutated[pos] ^= 0x01
                path = list(opening.sibling_path)
                path[level] = (bytes(mutated), side)
                forged = Opening(opening.leaf_index, opening.leaf_value, tuple(path))
                assert not verify_opening(forged, root)

    def test_every_side_bit(self, setup):
        opening, root = setup
        for level, (digest, side) in enumerate(opening.sibling_path):
            path = list(opening.sibling_path)
            path[level] = (digest, Side(1 - side))
            forged = Opening(opening.leaf_index, opening.leaf_value, tuple(path))
            assert not verify_opening(forged, root)

    def test_side_bit_without_index_check(self, setup):
        """Swapping a side also changes the recomputed root."""
        opening, root = setup
        path = list(opening.sibling_path)
        digest, side = path[1]
        path[1] = (digest, Side(1 - side))
        flipped_index = opening.leaf_index ^ 0b010
        forged = Opening(flipped_index, opening.leaf_value, tuple(path))
        assert not verify_opening(forged, root)

    def test_leaf_value_bytes(self, setup):
        opening, root = setup
        # padding leaf value is b"" for index 5; test a populated leaf as well
        assert not verify_opening(Opening(5, b"x", opening.sibling_path), root)

        tree = MerkleTree.build_from_height(3, [b"alpha", b"beta"])
        populated = tree.get_opening(1)
        for pos in range(len(populated.leaf_value)):
            mutated = bytearray(populated.leaf_value)
            mutated[pos] ^= 0x01
            forged = Opening(1, bytes(mutated), populated.sibling_path)
            assert not verify_opening(forged, tree.get_root())


class TestBounds:
    """Out-of-range indices are rejected, never wrapped."""

    @pytest.mark.parametrize("index", [-1, -4, 4, 5, 100])
    def test_index_errors(self, index):
        tree = MerkleTree.build_from_height(2, [b"a", b"b"])
        with pytest.raises(IndexOutOfBounds):
            tree.get_value(index)
        with pytest.raises(IndexOutOfBounds):
            tree.insert(index, b"x")
        with pytest.raises(IndexOutOfBounds):
            tree.get_opening(index)

    def test_too_many_leaves(self):
        with pytest.raises(TooManyLeaves):
            MerkleTree.build_from_height(2, [b"a"] * 5)


class TestPadding:
    """Omitted trailing leaves are padded with hash_leaf(b"")."""

    def test_trailing_omission_is_stable(self):
        explicit = MerkleTree.build_from_height(3, [b"a", b"b", b"", b""])
        implicit = MerkleTree.build_from_height(3, [b"a", b"b"])
        assert explicit.get_root() == implicit.get_root()

    def test_height_two_example(self):
        tree = MerkleTree.build_from_height(2, [b"a", b"b"])
        empty = H.hash_leaf(b"")

        assert tree.get_value(2) == empty
        assert tree.get_value(3) == empty
        assert tree.get_root() == H.hash_internal(
            H.hash_internal(H.hash_leaf(b"a"), H.hash_leaf(b"b")),
            H.hash_internal(empty, empty),
        )

    def test_height_one_opening_example(self):
        tree = MerkleTree.build_from_height(1, [b"x", b"y"])
        opening = tree.get_opening(0)

        assert opening.leaf_value == b"x"
        assert opening.sibling_path == ((H.hash_leaf(b"y"), Side.RIGHT),)
        assert verify_opening(opening, tree.get_root())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
