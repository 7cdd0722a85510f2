"""
Round-robin group phase played before the bracket.

Players are dealt into one or two groups, every pair inside a group meets
once (circle method), and the final standings reseed the knockout bracket.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from ladder.core.constants import MIN_PLAYERS_FOR_TWO_GROUPS
from ladder.core.exceptions import InvalidInputError
from ladder.core.logging import get_logger
from ladder.core.models import Player, validate_scores

logger = get_logger(__name__)


@dataclass(frozen=True)
class Pairing:
    round_number: int
    player1_id: str
    player2_id: str

    @property
    def key(self) -> frozenset[str]:
        return frozenset((self.player1_id, self.player2_id))


@dataclass
class GroupStanding:
    """Running record of one player inside a group."""

    player: Player
    wins: int = 0
    losses: int = 0
    points_for: int = 0
    points_against: int = 0

    @property
    def matches_played(self) -> int:
        return self.wins + self.losses

    @property
    def point_diff(self) -> int:
        return self.points_for - self.points_against


def rank_standings(standings: Sequence[GroupStanding]) -> list[GroupStanding]:
    """Order by wins, then point differential; ties keep their input order."""
    return sorted(standings, key=lambda s: (-s.wins, -s.point_diff))


def round_robin_pairings(players: Sequence[Player]) -> list[Pairing]:
    """
    Schedule every pair exactly once using the circle method.

    The first player stays fixed while the others rotate. With an odd count a
    ``None`` placeholder is added and whoever draws it sits the round out.

    Parameters
    ----------
    players : Sequence[Player]
        Group members in seed order

    Returns
    -------
    list[Pairing]
        Pairings ordered by round, bye pairings excluded
    """
    slots: list[Optional[Player]] = list(players)
    if len(slots) < 2:
        return []
    if len(slots) % 2 == 1:
        slots.append(None)

    n_slots = len(slots)
    pairings = []
    for round_number in range(1, n_slots):
        for i in range(n_slots // 2):
            if i == 0:
                a_index, b_index = 0, round_number
            else:
                a_index = (round_number + i - 1) % (n_slots - 1) + 1
                b_index = (round_number - i - 1) % (n_slots - 1) + 1

            player_a, player_b = slots[a_index], slots[b_index]
            if player_a is None or player_b is None:
                continue
            pairings.append(Pairing(round_number, player_a.id, player_b.id))
    return pairings


@dataclass
class Group:
    name: str
    players: list[Player]
    standings: dict[str, GroupStanding] = field(default_factory=dict)
    pairings: list[Pairing] = field(default_factory=list)
    completed: set[frozenset[str]] = field(default_factory=set)

    def __post_init__(self) -> None:
        if not self.standings:
            self.standings = {p.id: GroupStanding(p) for p in self.players}
        if not self.pairings:
            self.pairings = round_robin_pairings(self.players)

    @property
    def is_complete(self) -> bool:
        return len(self.completed) == len(self.pairings)

    def pending(self) -> list[Pairing]:
        return [p for p in self.pairings if p.key not in self.completed]

    def record_result(
        self, player1_id: str, player2_id: str, score1: int, score2: int
    ) -> None:
        """Apply one group match to the standings.

        Raises:
            InvalidInputError: The pair is not scheduled in this group, was
                already played, or the scores are invalid or tied
        """
        key = frozenset((player1_id, player2_id))
        if not any(p.key == key for p in self.pairings):
            raise InvalidInputError(
                f"{player1_id} vs {player2_id} is not a pairing in {self.name}"
            )
        if key in self.completed:
            raise InvalidInputError(
                f"{player1_id} vs {player2_id} was already played in {self.name}"
            )
        validate_scores(score1, score2, f"{self.name}: {player1_id} vs {player2_id}")

        first = self.standings[player1_id]
        second = self.standings[player2_id]
        first.points_for += score1
        first.points_against += score2
        second.points_for += score2
        second.points_against += score1
        if score1 > score2:
            first.wins += 1
            second.losses += 1
        else:
            second.wins += 1
            first.losses += 1

        self.completed.add(key)
        logger.debug(
            f"{self.name}: {player1_id} {score1}-{score2} {player2_id} "
            f"({len(self.completed)}/{len(self.pairings)})"
        )

    def ranked(self) -> list[GroupStanding]:
        return rank_standings([self.standings[p.id] for p in self.players])


def partition_into_groups(participants: Sequence[Player]) -> list[Group]:
    """Deal participants into ``Group A`` (and ``Group B`` for even fields of 6+).

    The deal alternates A, B, A, B... so each group receives a spread of the
    input order.
    """
    players = list(participants)
    if len(players) < MIN_PLAYERS_FOR_TWO_GROUPS or len(players) % 2 == 1:
        groups = [Group("Group A", players)]
    else:
        groups = [Group("Group A", players[0::2]), Group("Group B", players[1::2])]

    logger.info(
        "Group stage: "
        + ", ".join(f"{g.name} ({len(g.players)} players)" for g in groups)
    )
    return groups


def reseed_from_groups(groups: Sequence[Group]) -> list[Player]:
    """Bracket seed order from the final group standings.

    One group: its standings order. Two groups: ``A1, B1, A2, B2, ...``; the
    standard seeded placement then matches group winners against the other
    group's lower finishers.

    Raises:
        InvalidInputError: A group still has matches to play
    """
    for group in groups:
        if not group.is_complete:
            raise InvalidInputError(
                f"{group.name} still has {len(group.pending())} matches to play"
            )

    ranked = [[s.player for s in group.ranked()] for group in groups]
    if len(ranked) == 1:
        return ranked[0]

    seeds: list[Player] = []
    for position in range(max(len(r) for r in ranked)):
        for order in ranked:
            if position < len(order):
                seeds.append(order[position])
    return seeds
