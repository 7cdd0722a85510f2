"""
Advancement Engine: carry results through a bracket until nothing changes.

Routing between matches is pure index arithmetic on ``(round, match)``
positions:

* winners round ``r`` -> winners round ``r + 1``, match ``i // 2``, side
  ``i % 2``; the winners final feeds the grand final (``player1``);
* winners-bracket losers drop into the losers round whose ``feeds_from``
  names their winners round: the entry round pairs them up (``i // 2``),
  drop-down rounds take them one per match (``i``) in ``player2``; the
  ``reverse`` flag mirrors the index; the winners-final loser goes to the
  LB Final;
* losers rounds feed the next losers round at ``i`` (``player1``) when both
  rounds have the same size, or at ``i // 2`` / side ``i % 2`` when it halves;
  the LB Final feeds the grand final (``player2``);
* in single elimination the semifinal losers meet in the 3rd place match.

The pass works on a copy and returns it. A worklist replaces a fixed
iteration count: a match is queued once up front and again only when one of
its feeders settles.
"""

from __future__ import annotations

import copy
from collections import deque
from typing import Optional

from ladder.bracket.models import (
    Bracket,
    BracketMatch,
    RoundKind,
    SlotRef,
    TournamentFormat,
)
from ladder.core.exceptions import BracketStateError
from ladder.core.logging import get_logger
from ladder.core.models import Player
from ladder.core.protocols import ConditionPolicy

logger = get_logger(__name__)

WINNER = "winner"
LOSER = "loser"

Position = tuple[int, int]


class BracketRouting:
    """Where each match sends its winner and loser, and who feeds each slot."""

    def __init__(self, bracket: Bracket):
        self.bracket = bracket
        self.double = bracket.format is TournamentFormat.DOUBLE_ELIM
        self.winners = bracket.winners_rounds
        self.losers = bracket.losers_rounds

        grand_final = bracket.round_indices(RoundKind.GRAND_FINAL)
        third_place = bracket.round_indices(RoundKind.THIRD_PLACE)
        self.grand_final: Optional[int] = grand_final[0] if grand_final else None
        self.third_place: Optional[int] = third_place[0] if third_place else None

        # Losers round fed by each winners round, keyed by winners position
        self.drop_rounds: dict[int, int] = {}
        for round_index in self.losers:
            feeds_from = bracket.rounds[round_index].feeds_from
            if feeds_from is not None:
                self.drop_rounds[feeds_from.wb_round] = round_index

        self.feeders: dict[SlotRef, tuple[Position, str]] = {}
        for round_index, round_ in enumerate(bracket.rounds):
            for match_index in range(len(round_.matches)):
                source = (round_index, match_index)
                for outcome, target in (
                    (WINNER, self.winner_target(round_index, match_index)),
                    (LOSER, self.loser_target(round_index, match_index)),
                ):
                    if target is None:
                        continue
                    if target in self.feeders:
                        raise BracketStateError(
                            f"Slot {target} is fed twice",
                            match_id=round_.matches[match_index].id,
                        )
                    self.feeders[target] = (source, outcome)

    def winner_target(self, round_index: int, match_index: int) -> Optional[SlotRef]:
        kind = self.bracket.rounds[round_index].kind

        if kind is RoundKind.WINNERS:
            position = self.winners.index(round_index)
            if position < len(self.winners) - 1:
                return SlotRef(self.winners[position + 1], match_index // 2, match_index % 2)
            if self.double:
                return SlotRef(self.grand_final, 0, 0)
            return None

        if kind is RoundKind.LOSERS_FINAL:
            return SlotRef(self.grand_final, 0, 1)

        if kind in (
            RoundKind.LOSERS_ENTRY,
            RoundKind.LOSERS_DROPDOWN,
            RoundKind.LOSERS_SURVIVOR,
        ):
            position = self.losers.index(round_index)
            next_index = self.losers[position + 1]
            current_size = len(self.bracket.rounds[round_index])
            next_size = len(self.bracket.rounds[next_index])
            if next_size == current_size:
                return SlotRef(next_index, match_index, 0)
            return SlotRef(next_index, match_index // 2, match_index % 2)

        if kind in (RoundKind.THIRD_PLACE, RoundKind.GRAND_FINAL):
            return None

        raise BracketStateError(f"Unhandled round kind: {kind}")

    def loser_target(self, round_index: int, match_index: int) -> Optional[SlotRef]:
        kind = self.bracket.rounds[round_index].kind
        if kind is not RoundKind.WINNERS:
            return None

        position = self.winners.index(round_index)
        is_final = position == len(self.winners) - 1

        if not self.double:
            is_semifinal = position == len(self.winners) - 2
            if is_semifinal and self.third_place is not None:
                return SlotRef(self.third_place, 0, match_index)
            return None

        if is_final:
            return SlotRef(self.losers[-1], 0, 1)

        target_index = self.drop_rounds[position]
        target_round = self.bracket.rounds[target_index]
        size = len(target_round)
        feeds_from = target_round.feeds_from

        if target_round.kind is RoundKind.LOSERS_ENTRY:
            target = match_index // 2
            if feeds_from.reverse:
                target = size - 1 - target
            return SlotRef(target_index, target, match_index % 2)

        target = size - 1 - match_index if feeds_from.reverse else match_index
        return SlotRef(target_index, target, 1)


def _slot_is_dead(
    bracket: Bracket, match: BracketMatch, side: int, routing: BracketRouting
) -> bool:
    """True when an empty slot can never be filled."""
    if match.slot(side) is not None:
        return False
    feeder = routing.feeders.get(
        SlotRef(match.round_index, match.match_index, side)
    )
    if feeder is None:
        return True
    (round_index, match_index), outcome = feeder
    source = bracket.at(round_index, match_index)
    if outcome == WINNER:
        return source.is_void
    return source.is_void or source.is_bye


def _assign_conditions(match: BracketMatch, policy: ConditionPolicy) -> None:
    player1, player2 = match.player1, match.player2
    match.conditions = {
        player1.id: policy(player1, player2),
        player2.id: policy(player2, player1),
    }
    logger.debug(f"Assigned conditions to {match.id}: {match.conditions}")


def _settle(
    bracket: Bracket,
    match: BracketMatch,
    routing: BracketRouting,
    policy: Optional[ConditionPolicy],
) -> None:
    """Resolve byes and voids, and attach conditions to newly ready matches."""
    if match.is_settled:
        return

    if match.player1 is not None and match.player2 is not None:
        if policy is not None and match.conditions is None:
            _assign_conditions(match, policy)
        return

    dead1 = _slot_is_dead(bracket, match, 0, routing)
    dead2 = _slot_is_dead(bracket, match, 1, routing)

    if dead1 and dead2:
        match.is_void = True
        logger.debug(f"Match {match.id} can never be played; marked void")
    elif match.player1 is not None and dead2:
        match.winner = match.player1
        match.is_bye = True
        logger.debug(f"Bye in {match.id}: {match.player1.id} advances")
    elif match.player2 is not None and dead1:
        match.winner = match.player2
        match.is_bye = True
        logger.debug(f"Bye in {match.id}: {match.player2.id} advances")


def _place(
    bracket: Bracket, target: SlotRef, player: Player, source: BracketMatch
) -> None:
    match = bracket.at(target.round_index, target.match_index)
    current = match.slot(target.side)
    if current is None:
        match.set_slot(target.side, player)
        logger.debug(
            f"{player.id} moves from {source.id} into {match.id} "
            f"(player{target.side + 1})"
        )
    elif current.id != player.id:
        raise BracketStateError(
            f"Cannot place {player.id} from {source.id} into {match.id}: "
            f"player{target.side + 1} is already {current.id}",
            match_id=source.id,
        )


def _propagate(
    bracket: Bracket, match: BracketMatch, routing: BracketRouting
) -> list[Position]:
    """Send a settled match's winner and loser on; return the touched matches."""
    touched = []
    for outcome, target, player in (
        (
            WINNER,
            routing.winner_target(match.round_index, match.match_index),
            match.winner,
        ),
        (
            LOSER,
            routing.loser_target(match.round_index, match.match_index),
            match.loser,
        ),
    ):
        if target is None:
            continue
        if player is not None:
            _place(bracket, target, player, match)
        touched.append((target.round_index, target.match_index))
    return touched


def advance(
    bracket: Bracket, policy: Optional[ConditionPolicy] = None
) -> Bracket:
    """Run the bracket to its fixed point.

    Args:
        bracket: Bracket to advance; left untouched
        policy: When given, every match that becomes ready gets one condition
            per player (never re-assigned once attached)

    Returns:
        A new Bracket with byes resolved and every known winner and loser
        placed in its next match

    Raises:
        BracketStateError: A result would overwrite a different player already
            sitting in the target slot. ``match_id`` names the source match.
    """
    bracket = copy.deepcopy(bracket)
    routing = BracketRouting(bracket)

    queue: deque[Position] = deque(
        (round_index, match_index)
        for round_index, round_ in enumerate(bracket.rounds)
        for match_index in range(len(round_.matches))
    )
    queued = set(queue)
    propagated: set[Position] = set()

    while queue:
        position = queue.popleft()
        queued.discard(position)
        match = bracket.at(*position)

        _settle(bracket, match, routing, policy)
        if not match.is_settled or position in propagated:
            continue

        propagated.add(position)
        for touched in _propagate(bracket, match, routing):
            if touched not in queued:
                queue.append(touched)
                queued.add(touched)

    return bracket
