"""Configuration dataclasses for the rating and tournament engines."""

from dataclasses import dataclass

from ladder.core.constants import (
    DEFAULT_RATING,
    ELO_SCALE,
    ESTABLISHED_K_FACTOR,
    PLACEMENT_MATCHES,
    PROVISIONAL_K_FACTOR,
)


@dataclass(frozen=True)
class RatingConfig:
    """Configuration for Elo rating computation."""

    baseline: float = DEFAULT_RATING
    scale: float = ELO_SCALE

    # Placement period
    placement_matches: int = PLACEMENT_MATCHES
    provisional_k: float = PROVISIONAL_K_FACTOR
    established_k: float = ESTABLISHED_K_FACTOR

    # Scale deltas by ln(|score difference| + 1)
    margin_of_victory: bool = True

    # Integer deltas, as shown on the leaderboard
    round_deltas: bool = True

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")
        if self.placement_matches < 0:
            raise ValueError(
                f"placement_matches must be >= 0, got {self.placement_matches}"
            )
        if self.established_k > self.provisional_k:
            raise ValueError(
                "established_k must not exceed provisional_k "
                f"({self.established_k} > {self.provisional_k})"
            )


@dataclass(frozen=True)
class TournamentConfig:
    """Format options chosen when a tournament is created."""

    # Attach conditions to matches as they become ready ("mayhem mode")
    conditions_enabled: bool = False

    # Play a round-robin group phase before the bracket
    use_group_stage: bool = False

    # Single elimination only
    third_place_match: bool = True


DEFAULT_RATING_CONFIG = RatingConfig()


def merge_configs(*configs: dict) -> dict:
    """
    Merge multiple configuration dictionaries.

    Later configs override earlier ones.
    """
    result = {}
    for config in configs:
        result.update(config)
    return result
