"""
In-memory bracket structures.

A Bracket is an ordered list of Rounds; every BracketMatch knows its own
``(round_index, match_index)`` position, and routing between matches is
always computed from those positions rather than from object references.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from ladder.core.exceptions import InvalidInputError
from ladder.core.models import Player


class TournamentFormat(Enum):
    """Supported elimination formats."""

    SINGLE_ELIM = "single_elim"
    DOUBLE_ELIM = "double_elim"


class BracketTag(Enum):
    """Which side of a double-elimination bracket a match belongs to."""

    WINNERS = "winners"
    LOSERS = "losers"
    GRAND_FINAL = "grand_final"


class RoundKind(Enum):
    """Shape of a round, which decides how results flow in and out of it."""

    WINNERS = "winners"
    THIRD_PLACE = "third_place"
    # First losers round: winners-bracket round-one losers play each other
    LOSERS_ENTRY = "losers_entry"
    # Winners-bracket drop-outs meet losers-bracket survivors
    LOSERS_DROPDOWN = "losers_dropdown"
    # Losers-bracket survivors play each other
    LOSERS_SURVIVOR = "losers_survivor"
    LOSERS_FINAL = "losers_final"
    GRAND_FINAL = "grand_final"

    @property
    def bracket(self) -> BracketTag:
        if self in (RoundKind.WINNERS, RoundKind.THIRD_PLACE):
            return BracketTag.WINNERS
        if self is RoundKind.GRAND_FINAL:
            return BracketTag.GRAND_FINAL
        return BracketTag.LOSERS

    @property
    def takes_winners_bracket_losers(self) -> bool:
        return self in (RoundKind.LOSERS_ENTRY, RoundKind.LOSERS_DROPDOWN)


class FeedType(Enum):
    WB_LOSERS = "wb_losers"
    WB_DROP = "wb_drop"


@dataclass(frozen=True)
class FeedsFrom:
    """Which winners round drains into a losers round, and in which order."""

    type: FeedType
    wb_round: int
    reverse: bool = False


@dataclass(frozen=True)
class SlotRef:
    """Address of one player slot: side 0 is ``player1``, side 1 ``player2``."""

    round_index: int
    match_index: int
    side: int


@dataclass
class BracketMatch:
    """One match of a bracket.

    A slot is empty (``None``) until a feeder delivers a player. The winner
    is set when a result is submitted, or automatically when only one slot
    can ever be filled (a bye). A void match can never receive anybody.
    """

    id: str
    round_index: int
    match_index: int
    bracket: BracketTag
    player1: Optional[Player] = None
    player2: Optional[Player] = None
    score1: Optional[int] = None
    score2: Optional[int] = None
    winner: Optional[Player] = None
    is_bye: bool = False
    is_void: bool = False
    feeds_from: Optional[FeedsFrom] = None
    conditions: Optional[dict] = None

    def slot(self, side: int) -> Optional[Player]:
        return self.player1 if side == 0 else self.player2

    def set_slot(self, side: int, player: Player) -> None:
        if side == 0:
            self.player1 = player
        else:
            self.player2 = player

    @property
    def players(self) -> list[Player]:
        return [p for p in (self.player1, self.player2) if p is not None]

    @property
    def is_ready(self) -> bool:
        """Both players known and no result yet."""
        return (
            self.player1 is not None
            and self.player2 is not None
            and self.winner is None
        )

    @property
    def is_resolved(self) -> bool:
        return self.winner is not None

    @property
    def is_settled(self) -> bool:
        """Nothing more will change: either a winner exists or the match is void."""
        return self.winner is not None or self.is_void

    @property
    def loser(self) -> Optional[Player]:
        if self.winner is None or self.is_bye:
            return None
        if self.player1 is not None and self.player1.id == self.winner.id:
            return self.player2
        return self.player1


@dataclass
class Round:
    """A named list of matches sharing one RoundKind."""

    name: str
    kind: RoundKind
    matches: list[BracketMatch] = field(default_factory=list)
    feeds_from: Optional[FeedsFrom] = None

    def __post_init__(self) -> None:
        if self.kind.takes_winners_bracket_losers != (self.feeds_from is not None):
            raise InvalidInputError(
                f"Round {self.name!r} ({self.kind.value}): feeds_from is required "
                "exactly for losers entry and drop-down rounds"
            )

    @property
    def bracket(self) -> BracketTag:
        return self.kind.bracket

    def __len__(self) -> int:
        return len(self.matches)


@dataclass
class Bracket:
    """All rounds of one elimination tournament, in play order."""

    format: TournamentFormat
    size: int
    rounds: list[Round] = field(default_factory=list)

    def __iter__(self) -> Iterator[BracketMatch]:
        for round_ in self.rounds:
            yield from round_.matches

    def match(self, match_id: str) -> BracketMatch:
        for match in self:
            if match.id == match_id:
                return match
        raise InvalidInputError(f"Unknown match id: {match_id}")

    def at(self, round_index: int, match_index: int) -> BracketMatch:
        return self.rounds[round_index].matches[match_index]

    def round_indices(self, *kinds: RoundKind) -> list[int]:
        return [
            index
            for index, round_ in enumerate(self.rounds)
            if round_.kind in kinds
        ]

    @property
    def winners_rounds(self) -> list[int]:
        return self.round_indices(RoundKind.WINNERS)

    @property
    def losers_rounds(self) -> list[int]:
        return self.round_indices(
            RoundKind.LOSERS_ENTRY,
            RoundKind.LOSERS_DROPDOWN,
            RoundKind.LOSERS_SURVIVOR,
            RoundKind.LOSERS_FINAL,
        )

    @property
    def terminal_round_index(self) -> int:
        """The round whose winner is the champion."""
        if self.format is TournamentFormat.DOUBLE_ELIM:
            return self.round_indices(RoundKind.GRAND_FINAL)[0]
        return self.winners_rounds[-1]

    @property
    def terminal_match(self) -> BracketMatch:
        return self.rounds[self.terminal_round_index].matches[0]

    @property
    def third_place_match(self) -> Optional[BracketMatch]:
        indices = self.round_indices(RoundKind.THIRD_PLACE)
        if not indices:
            return None
        return self.rounds[indices[0]].matches[0]

    @property
    def champion(self) -> Optional[Player]:
        return self.terminal_match.winner

    @property
    def is_complete(self) -> bool:
        """Terminal match decided, plus the 3rd place match if there is one."""
        third_place = self.third_place_match
        return self.terminal_match.is_resolved and (
            third_place is None or third_place.is_settled
        )
