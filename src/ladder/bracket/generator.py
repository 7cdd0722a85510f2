"""
Bracket generation for single- and double-elimination tournaments.

Both generators build the full round skeleton up front: round one is filled
from the seeded participant list (``None`` slots are byes) and every later
match starts empty. The Advancement Engine runs once before the bracket is
returned so first-round byes are already carried forward.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ladder.bracket.advancement import advance
from ladder.bracket.models import (
    Bracket,
    BracketMatch,
    FeedsFrom,
    FeedType,
    Round,
    RoundKind,
    TournamentFormat,
)
from ladder.bracket.seeding import next_power_of_two, seeded_order
from ladder.core.constants import (
    GRAND_FINAL_ID,
    LB_FINAL_ID,
    MIN_PLAYERS_FOR_THIRD_PLACE,
    ROUND_GRAND_FINAL,
    ROUND_LB_FINAL,
    ROUND_QUARTER_FINALS,
    ROUND_SEMI_FINALS,
    ROUND_THIRD_PLACE,
    ROUND_WB_FINAL,
    ROUND_WB_SEMI_FINALS,
    THIRD_PLACE_ID,
)
from ladder.core.exceptions import InvalidInputError
from ladder.core.logging import get_logger
from ladder.core.models import Player
from ladder.core.protocols import ConditionPolicy

logger = get_logger(__name__)

# Single-match rounds addressed by name rather than position
_FIXED_IDS = frozenset({GRAND_FINAL_ID, LB_FINAL_ID, THIRD_PLACE_ID})


def shuffle_participants(
    participants: Sequence[Player], seed: Optional[int] = None
) -> list[Player]:
    """Random draw order for an unseeded tournament."""
    shuffled = list(participants)
    rng = np.random.default_rng(seed)
    rng.shuffle(shuffled)
    return shuffled


def _round_name(match_count: int) -> str:
    """Single-elimination round name from the number of matches in it."""
    if match_count == 1:
        return ROUND_GRAND_FINAL
    if match_count == 2:
        return ROUND_SEMI_FINALS
    if match_count == 4:
        return ROUND_QUARTER_FINALS
    return f"Round of {match_count * 2}"


def _wb_round_name(match_count: int, round_number: int) -> str:
    if match_count == 1:
        return ROUND_WB_FINAL
    if match_count == 2:
        return ROUND_WB_SEMI_FINALS
    return f"WB Round {round_number}"


def _validate_participants(participants: Sequence[Player]) -> None:
    if len(participants) < 2:
        raise InvalidInputError(
            f"A bracket needs at least 2 participants, got {len(participants)}"
        )
    seen: set[str] = set()
    for player in participants:
        if player is None:
            raise InvalidInputError("Participant list must not contain None")
        if player.id in seen:
            raise InvalidInputError(f"Duplicate participant: {player.id}")
        seen.add(player.id)


def _place_participants(
    participants: Sequence[Player], seeding_order: Optional[Sequence[int]]
) -> tuple[int, list[Optional[Player]]]:
    """Bracket size and the participant (or bye) in every first-round slot."""
    _validate_participants(participants)

    size = next_power_of_two(len(participants))
    if seeding_order is None:
        seeding_order = seeded_order(size)
    elif sorted(seeding_order) != list(range(size)):
        raise InvalidInputError(
            f"Seeding order must be a permutation of range({size}), "
            f"got {list(seeding_order)}"
        )

    padded: list[Optional[Player]] = list(participants) + [None] * (
        size - len(participants)
    )
    return size, [padded[index] for index in seeding_order]


def _first_round_matches(
    slots: list[Optional[Player]], id_prefix: str, round_index: int
) -> list[BracketMatch]:
    matches = []
    for i in range(0, len(slots), 2):
        player1, player2 = slots[i], slots[i + 1]
        if player1 is None and player2 is None:
            raise InvalidInputError(
                f"First-round match {i // 2} has no participants; "
                "the seeding order leaves a pair of empty slots"
            )
        match = BracketMatch(
            id=f"{id_prefix}_m{i // 2}",
            round_index=round_index,
            match_index=i // 2,
            bracket=RoundKind.WINNERS.bracket,
            player1=player1,
            player2=player2,
        )
        if player1 is None or player2 is None:
            match.winner = player1 or player2
            match.is_bye = True
        matches.append(match)
    return matches


def _empty_round(
    name: str,
    kind: RoundKind,
    match_count: int,
    round_index: int,
    id_prefix: str,
    feeds_from: Optional[FeedsFrom] = None,
) -> Round:
    return Round(
        name=name,
        kind=kind,
        feeds_from=feeds_from,
        matches=[
            BracketMatch(
                id=id_prefix if id_prefix in _FIXED_IDS else f"{id_prefix}_m{i}",
                round_index=round_index,
                match_index=i,
                bracket=kind.bracket,
                feeds_from=feeds_from,
            )
            for i in range(match_count)
        ],
    )


def _build_winners_rounds(
    slots: list[Optional[Player]], double: bool
) -> list[Round]:
    """Round one from the slots, then empty rounds halving down to one match."""
    prefix = "wb_r" if double else "r"
    name_for = _wb_round_name if double else (lambda count, _: _round_name(count))

    first = _first_round_matches(slots, f"{prefix}1", round_index=0)
    rounds = [
        Round(
            name=name_for(len(first), 1),
            kind=RoundKind.WINNERS,
            matches=first,
        )
    ]

    match_count = len(first) // 2
    while match_count >= 1:
        round_number = len(rounds) + 1
        rounds.append(
            _empty_round(
                name_for(match_count, round_number),
                RoundKind.WINNERS,
                match_count,
                round_index=len(rounds),
                id_prefix=f"{prefix}{round_number}",
            )
        )
        match_count //= 2
    return rounds


def generate_single_elimination(
    participants: Sequence[Player],
    policy: Optional[ConditionPolicy] = None,
    seeding_order: Optional[Sequence[int]] = None,
    third_place_match: bool = True,
) -> Bracket:
    """Generate a single-elimination bracket.

    Args:
        participants: Players in seed order (already shuffled or seeded)
        policy: Condition policy applied to matches as they become ready
        seeding_order: Slot permutation; defaults to the standard seeding
        third_place_match: Add a 3rd place match when 4+ players take part

    Returns:
        Bracket with first-round byes already advanced
    """
    size, slots = _place_participants(participants, seeding_order)
    rounds = _build_winners_rounds(slots, double=False)

    if third_place_match and len(participants) >= MIN_PLAYERS_FOR_THIRD_PLACE:
        rounds.append(
            _empty_round(
                ROUND_THIRD_PLACE,
                RoundKind.THIRD_PLACE,
                1,
                round_index=len(rounds),
                id_prefix=THIRD_PLACE_ID,
            )
        )

    bracket = Bracket(format=TournamentFormat.SINGLE_ELIM, size=size, rounds=rounds)
    logger.info(
        f"Generated single elimination: {len(participants)} players, "
        f"size {size}, {len(rounds)} rounds"
    )
    return advance(bracket, policy)


def generate_double_elimination(
    participants: Sequence[Player],
    policy: Optional[ConditionPolicy] = None,
    seeding_order: Optional[Sequence[int]] = None,
) -> Bracket:
    """Generate a double-elimination bracket.

    The losers bracket opens with the winners round-one losers playing each
    other. Each later winners round (except the final) then drops its losers
    into a drop-down round against the losers-bracket survivors, followed by
    a survivor round that halves the field. The winners-final loser meets the
    last survivor in the LB Final, whose winner faces the winners champion in
    a single Grand Final.

    Drop-down rounds fed from odd winners rounds take their losers in reverse
    order, so players who met early are kept apart in the losers bracket.

    Args:
        participants: Players in seed order (already shuffled or seeded)
        policy: Condition policy applied to matches as they become ready
        seeding_order: Slot permutation; defaults to the standard seeding

    Returns:
        Bracket with first-round byes already advanced
    """
    size, slots = _place_participants(participants, seeding_order)
    rounds = _build_winners_rounds(slots, double=True)
    wb_round_count = len(rounds)

    def add(name, kind, match_count, id_prefix, feeds_from=None):
        rounds.append(
            _empty_round(
                name,
                kind,
                match_count,
                round_index=len(rounds),
                id_prefix=id_prefix,
                feeds_from=feeds_from,
            )
        )

    lb_number = 1
    lb_match_count = size // 4
    if wb_round_count >= 2:
        add(
            f"LB Round {lb_number}",
            RoundKind.LOSERS_ENTRY,
            lb_match_count,
            f"lb_r{lb_number}",
            FeedsFrom(FeedType.WB_LOSERS, wb_round=0, reverse=False),
        )
        lb_number += 1

    for wb_round in range(1, wb_round_count - 1):
        add(
            f"LB Round {lb_number}",
            RoundKind.LOSERS_DROPDOWN,
            lb_match_count,
            f"lb_r{lb_number}",
            FeedsFrom(FeedType.WB_DROP, wb_round=wb_round, reverse=wb_round % 2 == 1),
        )
        lb_number += 1

        if lb_match_count > 1:
            lb_match_count //= 2
            add(
                f"LB Round {lb_number}",
                RoundKind.LOSERS_SURVIVOR,
                lb_match_count,
                f"lb_r{lb_number}",
            )
            lb_number += 1

    add(ROUND_LB_FINAL, RoundKind.LOSERS_FINAL, 1, LB_FINAL_ID)
    add(ROUND_GRAND_FINAL, RoundKind.GRAND_FINAL, 1, GRAND_FINAL_ID)

    bracket = Bracket(format=TournamentFormat.DOUBLE_ELIM, size=size, rounds=rounds)
    logger.info(
        f"Generated double elimination: {len(participants)} players, "
        f"size {size}, {wb_round_count} winners rounds, "
        f"{len(bracket.losers_rounds)} losers rounds"
    )
    return advance(bracket, policy)


def generate_bracket(
    participants: Sequence[Player],
    format: TournamentFormat | str,
    seeding_order: Optional[Sequence[int]] = None,
    policy: Optional[ConditionPolicy] = None,
    third_place_match: bool = True,
) -> Bracket:
    """Generate a bracket in the requested format."""
    format = TournamentFormat(format)
    if format is TournamentFormat.DOUBLE_ELIM:
        return generate_double_elimination(participants, policy, seeding_order)
    return generate_single_elimination(
        participants, policy, seeding_order, third_place_match
    )
