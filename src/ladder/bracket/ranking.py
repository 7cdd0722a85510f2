"""Final standings of a finished bracket."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from ladder.bracket.models import Bracket, BracketMatch, TournamentFormat
from ladder.core.exceptions import TournamentNotCompleteError
from ladder.core.logging import get_logger

if TYPE_CHECKING:
    from ladder.tournament import Tournament

logger = get_logger(__name__)


@dataclass(frozen=True)
class Placement:
    player_id: str
    rank: int
    round_reached: str


class _Standings:
    """Accumulates placements using shared competition ranks (1, 2, 3, 3, 5)."""

    def __init__(self) -> None:
        self.placements: list[Placement] = []
        self.placed: set[str] = set()

    def add(self, player_id: str, rank: int, round_reached: str) -> None:
        if player_id in self.placed:
            return
        self.placed.add(player_id)
        self.placements.append(Placement(player_id, rank, round_reached))

    def add_round_losers(self, matches: list[BracketMatch], round_name: str) -> None:
        """Everyone knocked out in one round shares the next open rank."""
        rank = len(self.placements) + 1
        for match in matches:
            loser = match.loser
            if loser is not None:
                self.add(loser.id, rank, round_name)


def _resolve_bracket(source: Union[Bracket, "Tournament"]) -> Bracket:
    if isinstance(source, Bracket):
        return source
    bracket = getattr(source, "bracket", None)
    if bracket is None:
        raise TournamentNotCompleteError(
            "Tournament has no bracket yet; the group stage is still running"
        )
    return bracket


def derive_final_ranking(source: Union[Bracket, "Tournament"]) -> list[Placement]:
    """Derive final placements from a bracket whose terminal match is decided.

    Args:
        source: A Bracket, or a Tournament holding one

    Returns:
        Placements ordered by rank. Tied players share a rank and the next
        rank skips accordingly.

    Raises:
        TournamentNotCompleteError: The terminal match has no winner yet
    """
    bracket = _resolve_bracket(source)
    terminal = bracket.terminal_match
    if not terminal.is_resolved:
        raise TournamentNotCompleteError(
            f"Cannot rank: terminal match {terminal.id} is not resolved"
        )

    terminal_round = bracket.rounds[bracket.terminal_round_index]
    standings = _Standings()
    standings.add(terminal.winner.id, 1, terminal_round.name)
    if terminal.loser is not None:
        standings.add(terminal.loser.id, 2, terminal_round.name)

    if bracket.format is TournamentFormat.DOUBLE_ELIM:
        # LB Final first, then every earlier losers round
        for round_index in reversed(bracket.losers_rounds):
            round_ = bracket.rounds[round_index]
            standings.add_round_losers(round_.matches, round_.name)
    else:
        winners = bracket.winners_rounds
        third_place = bracket.third_place_match
        remaining = winners[:-1]

        if (
            third_place is not None
            and third_place.is_resolved
            and not third_place.is_bye
            and remaining
        ):
            rank = len(standings.placements) + 1
            name = bracket.rounds[third_place.round_index].name
            standings.add(third_place.winner.id, rank, name)
            standings.add(third_place.loser.id, rank + 1, name)
            remaining = remaining[:-1]

        for round_index in reversed(remaining):
            round_ = bracket.rounds[round_index]
            standings.add_round_losers(round_.matches, round_.name)

    logger.debug(
        f"Derived {len(standings.placements)} placements; "
        f"champion {terminal.winner.id}"
    )
    return standings.placements
