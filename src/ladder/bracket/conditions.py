"""Condition (handicap) policies attached to matches as they become ready."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from ladder.core.constants import (
    CONDITION_RATING_SPREAD,
    DEFAULT_RATING,
    MAX_CONDITION_SEVERITY,
    MIN_CONDITION_SEVERITY,
    TRIGGER_MAYHEM,
)
from ladder.core.exceptions import InvalidInputError
from ladder.core.models import Player


@dataclass(frozen=True)
class Condition:
    """A handicap one player must play under, e.g. "Weak hand only"."""

    title: str
    description: str = ""
    severity: int = 5
    trigger: str = TRIGGER_MAYHEM

    def __post_init__(self) -> None:
        if not MIN_CONDITION_SEVERITY <= self.severity <= MAX_CONDITION_SEVERITY:
            raise InvalidInputError(
                f"Condition {self.title!r}: severity must be between "
                f"{MIN_CONDITION_SEVERITY} and {MAX_CONDITION_SEVERITY}, "
                f"got {self.severity}"
            )


class NoConditions:
    """Policy that never assigns anything."""

    def __call__(self, player: Player, opponent: Player) -> Optional[Condition]:
        return None


class RatingWeightedConditionPolicy:
    """Draw a random condition, biased toward harsher ones for stronger players.

    Each candidate's weight is ``exp(tilt * s)`` where ``s`` is its severity
    scaled to [0, 1] and ``tilt = (rating - baseline) / spread``. A player at
    the baseline draws uniformly; every ``spread`` points above it multiplies
    the odds of the harshest condition over the mildest by ``e``.
    """

    def __init__(
        self,
        pool: Iterable[Condition],
        seed: Optional[int] = None,
        baseline: float = DEFAULT_RATING,
        spread: float = CONDITION_RATING_SPREAD,
        trigger: str = TRIGGER_MAYHEM,
    ):
        """Initialize the policy.

        Args:
            pool: All configured conditions; only those with ``trigger`` are drawn
            seed: Random seed for reproducibility
            baseline: Rating at which draws are uniform
            spread: Rating distance for one unit of tilt
            trigger: Trigger type this policy draws from
        """
        if spread <= 0:
            raise InvalidInputError(f"spread must be positive, got {spread}")
        self.candidates = [c for c in pool if c.trigger == trigger]
        self.baseline = baseline
        self.spread = spread
        self.rng = np.random.default_rng(seed)

    def weights(self, rating: float) -> np.ndarray:
        severities = np.array([c.severity for c in self.candidates], dtype=float)
        scaled = (severities - MIN_CONDITION_SEVERITY) / (
            MAX_CONDITION_SEVERITY - MIN_CONDITION_SEVERITY
        )
        tilt = (rating - self.baseline) / self.spread
        raw = np.exp(tilt * scaled)
        return raw / raw.sum()

    def __call__(self, player: Player, opponent: Player) -> Optional[Condition]:
        if not self.candidates:
            return None
        index = self.rng.choice(len(self.candidates), p=self.weights(player.rating))
        return self.candidates[int(index)]
