"""
Full rating recomputation by replaying the match log.

Ratings are never updated incrementally: any edit or deletion in the match
log is handled by replaying the whole log from the baseline. The replay is a
deterministic left fold over matches sorted by timestamp, so running it twice
over the same log gives identical results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

import polars as pl

from ladder.core.config import DEFAULT_RATING_CONFIG, RatingConfig
from ladder.core.exceptions import InvalidInputError
from ladder.core.logging import get_logger, log_timing
from ladder.core.models import Player, RecordedMatch
from ladder.core.protocols import RatingSink
from ladder.rating.elo import rating_delta, team_rating, volatility_factor

logger = get_logger(__name__)


@dataclass(frozen=True)
class RatingEvent:
    """One player's participation in one replayed match."""

    match_index: int
    match_id: str
    timestamp: datetime
    rating_before: float
    rating_after: float
    delta: float
    opponent_ids: tuple[str, ...]
    partner_id: Optional[str]
    result: str  # "W" or "L"

    @property
    def opponent_id(self) -> str:
        """First opponent; the only one in singles."""
        return self.opponent_ids[0]


@dataclass(frozen=True)
class RatingUpdate:
    """What the registry persists for a player after a replay."""

    rating: float
    matches_played: int
    is_qualified: bool


@dataclass
class PlayerRating:
    """Replayed rating state and history for one player."""

    player_id: str
    rating: float
    matches_played: int = 0
    wins: int = 0
    timeline: list[RatingEvent] = field(default_factory=list)
    placement_matches: int = DEFAULT_RATING_CONFIG.placement_matches

    @property
    def losses(self) -> int:
        return self.matches_played - self.wins

    @property
    def is_qualified(self) -> bool:
        """Whether the player has finished the placement period."""
        return self.matches_played >= self.placement_matches

    @property
    def peak_rating(self) -> float:
        if not self.timeline:
            return self.rating
        return max(
            self.timeline[0].rating_before,
            max(event.rating_after for event in self.timeline),
        )

    @property
    def lowest_rating(self) -> float:
        if not self.timeline:
            return self.rating
        return min(
            self.timeline[0].rating_before,
            min(event.rating_after for event in self.timeline),
        )

    def to_update(self) -> RatingUpdate:
        return RatingUpdate(
            rating=self.rating,
            matches_played=self.matches_played,
            is_qualified=self.is_qualified,
        )


@dataclass
class RatingReplay:
    """Result of replaying a match log."""

    players: dict[str, PlayerRating]
    processed_match_ids: list[str] = field(default_factory=list)
    skipped_match_ids: list[str] = field(default_factory=list)

    def __getitem__(self, player_id: str) -> PlayerRating:
        return self.players[player_id]

    def current_ratings(self) -> dict[str, float]:
        return {
            player_id: state.rating for player_id, state in self.players.items()
        }

    def updates(self) -> dict[str, RatingUpdate]:
        return {
            player_id: state.to_update()
            for player_id, state in self.players.items()
        }

    def to_frame(self) -> pl.DataFrame:
        """All timeline events as one DataFrame, in replay order."""
        rows = [
            {
                "player_id": player_id,
                "match_index": event.match_index,
                "match_id": event.match_id,
                "timestamp": event.timestamp,
                "rating_before": event.rating_before,
                "rating_after": event.rating_after,
                "delta": event.delta,
                "opponent_ids": list(event.opponent_ids),
                "partner_id": event.partner_id,
                "result": event.result,
            }
            for player_id, state in self.players.items()
            for event in state.timeline
        ]
        schema = {
            "player_id": pl.Utf8,
            "match_index": pl.Int64,
            "match_id": pl.Utf8,
            "timestamp": pl.Datetime,
            "rating_before": pl.Float64,
            "rating_after": pl.Float64,
            "delta": pl.Float64,
            "opponent_ids": pl.List(pl.Utf8),
            "partner_id": pl.Utf8,
            "result": pl.Utf8,
        }
        return _frame(rows, schema).sort(["match_index", "player_id"])

    def leaderboard(self, include_provisional: bool = False) -> pl.DataFrame:
        """Players ranked by rating.

        Provisional players keep a raw rating but get no official rank; they
        are dropped unless ``include_provisional`` is set, in which case their
        ``rank`` is null.
        """
        rows = [
            {
                "player_id": state.player_id,
                "rating": state.rating,
                "matches_played": state.matches_played,
                "wins": state.wins,
                "losses": state.losses,
                "peak_rating": state.peak_rating,
                "is_qualified": state.is_qualified,
            }
            for state in self.players.values()
        ]
        schema = {
            "player_id": pl.Utf8,
            "rating": pl.Float64,
            "matches_played": pl.Int64,
            "wins": pl.Int64,
            "losses": pl.Int64,
            "peak_rating": pl.Float64,
            "is_qualified": pl.Boolean,
        }
        df = _frame(rows, schema)
        if not include_provisional:
            df = df.filter(pl.col("is_qualified"))

        df = df.sort(
            ["is_qualified", "rating", "player_id"],
            descending=[True, True, False],
        )
        return df.with_columns(
            pl.when(pl.col("is_qualified"))
            .then(pl.col("rating"))
            .otherwise(None)
            .rank(method="min", descending=True)
            .cast(pl.Int64)
            .alias("rank")
        )


def _frame(rows: list[dict], schema: dict) -> pl.DataFrame:
    # Timestamps may carry a timezone, so only pin their dtype when empty
    if not rows:
        return pl.DataFrame(schema=schema)
    overrides = {
        name: dtype for name, dtype in schema.items() if name != "timestamp"
    }
    return pl.DataFrame(rows, schema_overrides=overrides)


def _index_players(
    players: Iterable[Player], config: RatingConfig
) -> dict[str, PlayerRating]:
    states: dict[str, PlayerRating] = {}
    for player in players:
        if player.id in states:
            raise InvalidInputError(f"Duplicate player id: {player.id}")
        states[player.id] = PlayerRating(
            player_id=player.id,
            rating=config.baseline,
            placement_matches=config.placement_matches,
        )
    return states


def _apply_match(
    match: RecordedMatch,
    match_index: int,
    states: dict[str, PlayerRating],
    config: RatingConfig,
) -> None:
    team1 = [states[player_id] for player_id in match.team1]
    team2 = [states[player_id] for player_id in match.team2]

    # Deltas are computed from pre-match ratings for all four players
    team1_rating = team_rating([state.rating for state in team1])
    team2_rating = team_rating([state.rating for state in team2])

    changes = []
    for own, other, own_rating, other_rating, score_self, score_other in (
        (team1, team2, team1_rating, team2_rating, match.score1, match.score2),
        (team2, team1, team2_rating, team1_rating, match.score2, match.score1),
    ):
        for state in own:
            delta = rating_delta(
                own_rating,
                other_rating,
                score_self,
                score_other,
                volatility_factor(state.matches_played, config),
                config,
            )
            partners = [mate.player_id for mate in own if mate is not state]
            changes.append(
                (
                    state,
                    delta,
                    tuple(opponent.player_id for opponent in other),
                    partners[0] if partners else None,
                    score_self > score_other,
                )
            )

    for state, delta, opponent_ids, partner_id, won in changes:
        rating_before = state.rating
        state.rating = rating_before + delta
        state.matches_played += 1
        if won:
            state.wins += 1
        state.timeline.append(
            RatingEvent(
                match_index=match_index,
                match_id=match.id,
                timestamp=match.timestamp,
                rating_before=rating_before,
                rating_after=state.rating,
                delta=delta,
                opponent_ids=opponent_ids,
                partner_id=partner_id,
                result="W" if won else "L",
            )
        )


def replay_ratings(
    players: Iterable[Player],
    matches: Iterable[RecordedMatch],
    config: RatingConfig = DEFAULT_RATING_CONFIG,
) -> RatingReplay:
    """Recompute every player's rating from the baseline.

    Matches are stable-sorted by timestamp, so matches sharing a timestamp
    keep their log order. A match that references a player missing from
    ``players`` (e.g. a deleted account) is skipped and affects nobody.

    Args:
        players: The current roster
        matches: The match log, in any order
        config: Rating configuration

    Returns:
        RatingReplay with per-player ratings and timelines
    """
    states = _index_players(players, config)
    ordered = sorted(matches, key=lambda match: match.timestamp)
    replay = RatingReplay(players=states)

    with log_timing(logger, f"replaying {len(ordered)} matches", level=logging.DEBUG):
        for match_index, match in enumerate(ordered):
            missing = [
                player_id
                for player_id in match.participant_ids
                if player_id not in states
            ]
            if missing:
                logger.debug(
                    f"Skipping match {match.id}: unknown players {missing}"
                )
                replay.skipped_match_ids.append(match.id)
                continue

            _apply_match(match, match_index, states, config)
            replay.processed_match_ids.append(match.id)

    logger.info(
        f"Replayed {len(replay.processed_match_ids)} matches for "
        f"{len(states)} players ({len(replay.skipped_match_ids)} skipped)"
    )
    return replay


def recalculate_ratings(
    players: Iterable[Player],
    matches: Iterable[RecordedMatch],
    sink: RatingSink,
    config: RatingConfig = DEFAULT_RATING_CONFIG,
) -> RatingReplay:
    """Replay the log and hand the resulting ratings to the registry."""
    replay = replay_ratings(players, matches, config)
    sink(replay.updates())
    return replay
