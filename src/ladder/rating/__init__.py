"""Elo rating engine and match-log replay."""

from ladder.rating.elo import (
    compute_rating_delta,
    expected_score,
    margin_multiplier,
    rating_delta,
    round_delta,
    team_rating,
    team_rating_deltas,
    volatility_factor,
)
from ladder.rating.replay import (
    PlayerRating,
    RatingEvent,
    RatingReplay,
    RatingUpdate,
    recalculate_ratings,
    replay_ratings,
)
from ladder.rating.stats import (
    HeadToHead,
    PlayerRecord,
    head_to_head_streak,
    player_record,
)

__all__ = [
    # Elo primitives
    "expected_score",
    "volatility_factor",
    "margin_multiplier",
    "rating_delta",
    "round_delta",
    "compute_rating_delta",
    "team_rating",
    "team_rating_deltas",
    # Replay
    "replay_ratings",
    "recalculate_ratings",
    "RatingReplay",
    "PlayerRating",
    "RatingEvent",
    "RatingUpdate",
    # Statistics
    "player_record",
    "head_to_head_streak",
    "PlayerRecord",
    "HeadToHead",
]
