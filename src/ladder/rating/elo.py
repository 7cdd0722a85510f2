"""Elo rating primitives: expected score, volatility and rating deltas."""

from __future__ import annotations

import math
from typing import Sequence

from ladder.core.config import DEFAULT_RATING_CONFIG, RatingConfig
from ladder.core.exceptions import InvalidInputError
from ladder.core.models import validate_scores


def expected_score(
    rating_a: float, rating_b: float, scale: float = DEFAULT_RATING_CONFIG.scale
) -> float:
    """Probability that a player rated ``rating_a`` beats one rated ``rating_b``.

    Implements: E_A = 1 / (1 + 10 ** ((R_B - R_A) / scale))

    Args:
        rating_a: Rating of the player whose chances are computed
        rating_b: Rating of the opponent
        scale: Rating difference that multiplies the odds by ten

    Returns:
        Probability in [0, 1]; ``expected_score(a, b) == 1 - expected_score(b, a)``
    """
    return 1.0 / (1.0 + math.pow(10.0, (rating_b - rating_a) / scale))


def volatility_factor(
    matches_played: int, config: RatingConfig = DEFAULT_RATING_CONFIG
) -> float:
    """K-factor for a player who has already played ``matches_played`` rated matches.

    Provisional players move faster so their rating converges; once past the
    placement threshold the factor drops and never returns.
    """
    if matches_played < 0:
        raise InvalidInputError(
            f"matches_played must be >= 0, got {matches_played}"
        )
    if matches_played < config.placement_matches:
        return config.provisional_k
    return config.established_k


def margin_multiplier(score_self: int, score_opponent: int) -> float:
    """ln(|score difference| + 1): blowouts move ratings more than close games."""
    return math.log(abs(score_self - score_opponent) + 1)


def rating_delta(
    rating_self: float,
    rating_opponent: float,
    score_self: int,
    score_opponent: int,
    volatility: float,
    config: RatingConfig = DEFAULT_RATING_CONFIG,
) -> float:
    """Signed rating change for one side of a finished match.

    Calling it again with the arguments swapped gives the opponent's change,
    with no shared state between the two calls.

    Args:
        rating_self: Rating (or team rating) of the side being updated
        rating_opponent: Rating (or team rating) of the other side
        score_self: Points scored by this side
        score_opponent: Points scored by the other side
        volatility: K-factor of the player being updated
        config: Rating configuration

    Returns:
        Rating delta, rounded to an integer when ``config.round_deltas`` is set
    """
    validate_scores(score_self, score_opponent)

    actual = 1.0 if score_self > score_opponent else 0.0
    expected = expected_score(rating_self, rating_opponent, config.scale)
    multiplier = (
        margin_multiplier(score_self, score_opponent)
        if config.margin_of_victory
        else 1.0
    )

    delta = volatility * multiplier * (actual - expected)
    if config.round_deltas:
        return round_delta(delta, won=actual == 1.0)
    return delta


def round_delta(delta: float, won: bool) -> float:
    """Round a delta to an integer, with halves rounding up.

    Implements: floor(delta + 0.5), then at least +1 for a win and at most
    -1 for a loss, so a heavy favourite's narrow win still moves both ratings.
    """
    rounded = math.floor(delta + 0.5)
    if won:
        return float(max(1, rounded))
    return float(min(-1, rounded))


def compute_rating_delta(
    rating_self: float,
    rating_opponent: float,
    score_self: int,
    score_opponent: int,
    matches_played_self: int,
    config: RatingConfig = DEFAULT_RATING_CONFIG,
) -> float:
    """Rating change for a singles player, using their own volatility."""
    volatility = volatility_factor(matches_played_self, config)
    return rating_delta(
        rating_self,
        rating_opponent,
        score_self,
        score_opponent,
        volatility,
        config,
    )


def team_rating(ratings: Sequence[float]) -> float:
    """Arithmetic mean of the members' current ratings."""
    if not ratings:
        raise InvalidInputError("A team needs at least one player")
    return sum(ratings) / len(ratings)


def team_rating_deltas(
    team_ratings: Sequence[float],
    opponent_ratings: Sequence[float],
    matches_played: Sequence[int],
    score_self: int,
    score_opponent: int,
    config: RatingConfig = DEFAULT_RATING_CONFIG,
) -> list[float]:
    """Per-teammate deltas for a doubles match.

    Both teammates share the team-vs-team expected score, but each is scaled
    by their own volatility factor.
    """
    if len(team_ratings) != len(matches_played):
        raise InvalidInputError(
            "team_ratings and matches_played must have the same length"
        )

    own = team_rating(team_ratings)
    other = team_rating(opponent_ratings)
    return [
        rating_delta(
            own,
            other,
            score_self,
            score_opponent,
            volatility_factor(played, config),
            config,
        )
        for played in matches_played
    ]
