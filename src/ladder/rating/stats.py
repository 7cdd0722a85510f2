"""Win/loss records, streaks and head-to-head summaries from the match log."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ladder.core.models import RecordedMatch


@dataclass
class HeadToHead:
    wins: int = 0
    losses: int = 0


@dataclass
class PlayerRecord:
    """Aggregate results for one player."""

    player_id: str
    wins: int = 0
    losses: int = 0
    points_for: int = 0
    points_against: int = 0
    streak_length: int = 0
    streak_type: Optional[str] = None  # "W" or "L"
    head_to_head: dict[str, HeadToHead] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        """Percentage of matches won (0-100)."""
        if self.total == 0:
            return 0.0
        return self.wins / self.total * 100.0

    @property
    def point_diff(self) -> int:
        return self.points_for - self.points_against

    @property
    def streak(self) -> str:
        """Current streak as shown on the player card, e.g. ``"3W"``."""
        if self.streak_type is None:
            return "-"
        return f"{self.streak_length}{self.streak_type}"


def player_record(
    player_id: str, matches: Iterable[RecordedMatch]
) -> PlayerRecord:
    """Summarize a player's matches.

    The streak counts back from the most recent match.
    """
    record = PlayerRecord(player_id=player_id)
    played = sorted(
        (match for match in matches if player_id in match.participant_ids),
        key=lambda match: match.timestamp,
    )

    for match in played:
        own, other = match.scores_for(player_id)
        won = match.won(player_id)
        record.points_for += own
        record.points_against += other
        if won:
            record.wins += 1
        else:
            record.losses += 1

        opponents = match.team2 if match.side_of(player_id) == 1 else match.team1
        for opponent_id in opponents:
            versus = record.head_to_head.setdefault(opponent_id, HeadToHead())
            if won:
                versus.wins += 1
            else:
                versus.losses += 1

    for match in reversed(played):
        result = "W" if match.won(player_id) else "L"
        if record.streak_type is None:
            record.streak_type = result
            record.streak_length = 1
        elif result == record.streak_type:
            record.streak_length += 1
        else:
            break

    return record


def head_to_head_streak(
    player_a: str, player_b: str, matches: Iterable[RecordedMatch]
) -> tuple[int, Optional[str]]:
    """Current unbroken winning streak between two singles players.

    Returns:
        ``(streak, winner_id)``; ``(0, None)`` if they have never met
    """
    meetings = sorted(
        (
            match
            for match in matches
            if not match.is_doubles
            and {player_a, player_b} == set(match.participant_ids)
        ),
        key=lambda match: match.timestamp,
        reverse=True,
    )

    streak = 0
    winner_id: Optional[str] = None
    for match in meetings:
        current = player_a if match.won(player_a) else player_b
        if winner_id is None:
            winner_id = current
            streak = 1
        elif current == winner_id:
            streak += 1
        else:
            break

    return streak, winner_id
