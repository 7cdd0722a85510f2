"""Player and match records shared with the external registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ladder.core.constants import DEFAULT_RATING
from ladder.core.exceptions import InvalidInputError


@dataclass(frozen=True)
class Player:
    """A ladder player as seen by the core.

    The registry owns these records; the engines only read them and hand
    back new ratings for the registry to persist.
    """

    id: str
    name: str = ""
    rating: float = DEFAULT_RATING
    matches_played: int = 0

    @property
    def display_name(self) -> str:
        return self.name or self.id


@dataclass(frozen=True)
class RecordedMatch:
    """A finished match from the match log (singles or doubles)."""

    id: str
    team1: tuple[str, ...]
    team2: tuple[str, ...]
    score1: int
    score2: int
    timestamp: datetime
    conditions: Optional[Mapping[str, Any]] = field(default=None, compare=False)
    tournament_id: Optional[str] = None

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples
        object.__setattr__(self, "team1", tuple(self.team1))
        object.__setattr__(self, "team2", tuple(self.team2))

        if len(self.team1) != len(self.team2) or len(self.team1) not in (1, 2):
            raise InvalidInputError(
                f"Match {self.id}: teams must both have 1 or 2 players, "
                f"got {len(self.team1)} vs {len(self.team2)}"
            )
        if set(self.team1) & set(self.team2):
            raise InvalidInputError(
                f"Match {self.id}: a player cannot be on both sides"
            )
        if len(set(self.team1)) != len(self.team1) or len(set(self.team2)) != len(
            self.team2
        ):
            raise InvalidInputError(
                f"Match {self.id}: duplicate player within a team"
            )
        validate_scores(self.score1, self.score2, context=f"Match {self.id}")

    @classmethod
    def singles(
        cls,
        id: str,
        player1_id: str,
        player2_id: str,
        score1: int,
        score2: int,
        timestamp: datetime,
        **kwargs: Any,
    ) -> "RecordedMatch":
        return cls(id, (player1_id,), (player2_id,), score1, score2, timestamp, **kwargs)

    @classmethod
    def doubles(
        cls,
        id: str,
        team1: tuple[str, str],
        team2: tuple[str, str],
        score1: int,
        score2: int,
        timestamp: datetime,
        **kwargs: Any,
    ) -> "RecordedMatch":
        return cls(id, tuple(team1), tuple(team2), score1, score2, timestamp, **kwargs)

    @property
    def is_doubles(self) -> bool:
        return len(self.team1) == 2

    @property
    def participant_ids(self) -> tuple[str, ...]:
        return self.team1 + self.team2

    @property
    def winner_side(self) -> int:
        """1 if team1 won, 2 if team2 won."""
        return 1 if self.score1 > self.score2 else 2

    def side_of(self, player_id: str) -> int:
        if player_id in self.team1:
            return 1
        if player_id in self.team2:
            return 2
        raise KeyError(player_id)

    def scores_for(self, player_id: str) -> tuple[int, int]:
        """(own score, opponent score) from ``player_id``'s point of view."""
        if self.side_of(player_id) == 1:
            return self.score1, self.score2
        return self.score2, self.score1

    def won(self, player_id: str) -> bool:
        return self.side_of(player_id) == self.winner_side


def validate_scores(score1: Any, score2: Any, context: str = "Match") -> None:
    """Reject negative, non-integer or tied score pairs.

    The game has no draws, so a tie can never be recorded.
    """
    for score in (score1, score2):
        if isinstance(score, bool) or not isinstance(score, int):
            raise InvalidInputError(f"{context}: scores must be integers, got {score!r}")
        if score < 0:
            raise InvalidInputError(f"{context}: scores must be >= 0, got {score}")
    if score1 == score2:
        raise InvalidInputError(
            f"{context}: tied score {score1}-{score2} (draws are not allowed)"
        )
