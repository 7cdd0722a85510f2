"""Tests for standard bracket seeding."""

import pytest

from ladder.bracket.seeding import is_power_of_two, next_power_of_two, seeded_order
from ladder.core.exceptions import InvalidInputError


class TestSeededOrder:
    def test_known_orders(self):
        assert seeded_order(2) == [0, 1]
        assert seeded_order(4) == [0, 3, 1, 2]
        assert seeded_order(8) == [0, 7, 3, 4, 1, 6, 2, 5]

    @pytest.mark.parametrize("size", [2, 4, 8, 16, 32, 64])
    def test_is_permutation(self, size):
        assert sorted(seeded_order(size)) == list(range(size))

    @pytest.mark.parametrize("size", [4, 8, 16, 32])
    def test_first_round_pairs_sum_to_last_seed(self, size):
        """Seed i always meets seed size-1-i in round one."""
        order = seeded_order(size)
        for k in range(0, size, 2):
            assert order[k] + order[k + 1] == size - 1

    @pytest.mark.parametrize("size", [4, 8, 16])
    def test_top_two_seeds_in_opposite_halves(self, size):
        order = seeded_order(size)
        half = size // 2
        assert order.index(0) < half
        assert order.index(1) >= half

    @pytest.mark.parametrize("size", [4, 8, 16, 32, 64])
    def test_top_seeds_spread_across_blocks(self, size):
        """The top k seeds sit in k different blocks of size/k slots."""
        order = seeded_order(size)
        k = 1
        while k <= size:
            block = size // k
            blocks = {order.index(seed) // block for seed in range(k)}
            assert len(blocks) == k, f"top {k} seeds share a block"
            k *= 2

    @pytest.mark.parametrize("size", [0, 3, 6, 12])
    def test_rejects_non_power_of_two(self, size):
        with pytest.raises(InvalidInputError):
            seeded_order(size)


def test_power_of_two_helpers():
    assert is_power_of_two(1)
    assert is_power_of_two(16)
    assert not is_power_of_two(0)
    assert not is_power_of_two(12)

    assert next_power_of_two(1) == 2
    assert next_power_of_two(2) == 2
    assert next_power_of_two(5) == 8
    assert next_power_of_two(16) == 16
    assert next_power_of_two(17) == 32
