"""Standard bracket seeding order (1 vs N, 2 vs N-1, ...)."""

from __future__ import annotations

from ladder.core.exceptions import InvalidInputError


def is_power_of_two(n: int) -> bool:
    return n >= 1 and (n & (n - 1)) == 0


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= ``n`` (and >= 2, the smallest bracket)."""
    size = 2
    while size < n:
        size *= 2
    return size


def seeded_order(bracket_size: int) -> list[int]:
    """Slot permutation that places seeds into a standard bracket.

    Entry ``k`` is the seed index (0-based) that occupies slot ``k``. Built
    by mirror-filling: starting from ``[0, 1]``, each doubling replaces every
    seed ``i`` with the pair ``i, 2 * size - 1 - i``. Consecutive slots meet
    in round one, so seed 0 meets the last seed, and the two top seeds sit in
    opposite halves.

    Examples:
        >>> seeded_order(8)
        [0, 7, 3, 4, 1, 6, 2, 5]
    """
    if not is_power_of_two(bracket_size):
        raise InvalidInputError(
            f"Bracket size must be a power of two, got {bracket_size}"
        )
    if bracket_size == 1:
        return [0]

    order = [0, 1]
    size = 2
    while size < bracket_size:
        size *= 2
        order = [
            seed for i in order for seed in (i, size - 1 - i)
        ]
    return order
