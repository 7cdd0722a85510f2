"""
Tournament lifecycle: creation, result submission and final standings.

Every operation takes a Tournament and returns a new one; the input is never
modified, so a rejected submission leaves the caller's copy exactly as it was.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Sequence

from ladder.bracket.advancement import advance
from ladder.bracket.generator import generate_bracket, shuffle_participants
from ladder.bracket.models import Bracket, TournamentFormat
from ladder.bracket.ranking import Placement, derive_final_ranking
from ladder.core.config import TournamentConfig
from ladder.core.exceptions import InvalidInputError
from ladder.core.logging import get_logger
from ladder.core.models import Player, RecordedMatch, validate_scores
from ladder.core.protocols import ConditionPolicy, MatchSink
from ladder.groups.stage import Group, partition_into_groups, reseed_from_groups

logger = get_logger(__name__)


class TournamentPhase(Enum):
    GROUPS = "groups"
    BRACKET = "bracket"


class TournamentStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass
class Tournament:
    """A tournament and everything needed to continue it."""

    id: str
    name: str
    format: TournamentFormat
    players: list[Player]
    config: TournamentConfig = field(default_factory=TournamentConfig)
    phase: TournamentPhase = TournamentPhase.BRACKET
    status: TournamentStatus = TournamentStatus.ACTIVE
    bracket: Optional[Bracket] = None
    groups: list[Group] = field(default_factory=list)
    winner: Optional[Player] = None

    @property
    def is_complete(self) -> bool:
        return self.status is TournamentStatus.COMPLETED

    def group(self, name: str) -> Group:
        for group in self.groups:
            if group.name == name:
                return group
        raise InvalidInputError(f"Tournament {self.id} has no group named {name!r}")


def _active_policy(
    config: TournamentConfig, policy: Optional[ConditionPolicy]
) -> Optional[ConditionPolicy]:
    return policy if config.conditions_enabled else None


def _build_bracket(
    tournament: Tournament,
    participants: Sequence[Player],
    policy: Optional[ConditionPolicy],
) -> None:
    tournament.bracket = generate_bracket(
        participants,
        tournament.format,
        policy=_active_policy(tournament.config, policy),
        third_place_match=tournament.config.third_place_match,
    )
    tournament.phase = TournamentPhase.BRACKET


def create_tournament(
    tournament_id: str,
    name: str,
    players: Sequence[Player],
    format: TournamentFormat | str = TournamentFormat.SINGLE_ELIM,
    config: Optional[TournamentConfig] = None,
    seed: Optional[int] = None,
    policy: Optional[ConditionPolicy] = None,
    shuffle: bool = True,
) -> Tournament:
    """Create a tournament from a snapshot of the player list.

    Args:
        tournament_id: Identifier carried into every recorded match
        name: Display name
        players: Participants; given order is the seed order when
            ``shuffle`` is False
        format: Single or double elimination
        config: Format options; defaults to ``TournamentConfig()``
        seed: Random seed for the shuffled draw
        policy: Condition policy, used only when ``config.conditions_enabled``
        shuffle: Randomize the draw instead of using the given order

    Returns:
        An active Tournament, in the group phase when
        ``config.use_group_stage`` is set, otherwise with its bracket generated

    Raises:
        InvalidInputError: Fewer than two players or duplicate player ids
    """
    config = config or TournamentConfig()
    snapshot = list(players)
    if len(snapshot) < 2:
        raise InvalidInputError(
            f"A tournament needs at least 2 players, got {len(snapshot)}"
        )
    if len({p.id for p in snapshot}) != len(snapshot):
        raise InvalidInputError("Duplicate player ids in tournament")

    order = shuffle_participants(snapshot, seed) if shuffle else snapshot
    tournament = Tournament(
        id=tournament_id,
        name=name,
        format=TournamentFormat(format),
        players=snapshot,
        config=config,
    )

    if config.use_group_stage:
        tournament.groups = partition_into_groups(order)
        tournament.phase = TournamentPhase.GROUPS
    else:
        _build_bracket(tournament, order, policy)

    logger.info(
        f"Created tournament {tournament_id} ({tournament.format.value}, "
        f"{len(snapshot)} players, phase {tournament.phase.value})"
    )
    return tournament


def submit_group_result(
    tournament: Tournament,
    group_name: str,
    player1_id: str,
    player2_id: str,
    score1: int,
    score2: int,
    policy: Optional[ConditionPolicy] = None,
) -> Tournament:
    """Record one group match; the last one generates the bracket."""
    if tournament.phase is not TournamentPhase.GROUPS:
        raise InvalidInputError(f"Tournament {tournament.id} is not in the group phase")

    updated = copy.deepcopy(tournament)
    updated.group(group_name).record_result(player1_id, player2_id, score1, score2)

    if all(group.is_complete for group in updated.groups):
        seeds = reseed_from_groups(updated.groups)
        _build_bracket(updated, seeds, policy)
        logger.info(
            f"Group phase of {tournament.id} finished; bracket seeded with "
            f"{len(seeds)} players"
        )
    return updated


def submit_result(
    tournament: Tournament,
    match_id: str,
    score1: int,
    score2: int,
    policy: Optional[ConditionPolicy] = None,
    match_sink: Optional[MatchSink] = None,
    recorded_at: Optional[datetime] = None,
) -> Tournament:
    """Record a bracket result and advance the bracket.

    Args:
        tournament: Tournament in its bracket phase
        match_id: Match to record; both players must be known
        score1: Score of ``player1``
        score2: Score of ``player2``
        policy: Condition policy for matches this result makes ready
        match_sink: Receives the finished match as a RecordedMatch
        recorded_at: Timestamp for the recorded match; defaults to now (UTC)

    Returns:
        The updated Tournament, marked completed once the terminal match and
        any 3rd place match are decided

    Raises:
        InvalidInputError: Unknown match, match not ready, or bad scores
        BracketStateError: A player could not be placed in the next match
    """
    if tournament.bracket is None:
        raise InvalidInputError(f"Tournament {tournament.id} has no bracket yet")

    match = tournament.bracket.match(match_id)
    if not match.is_ready:
        raise InvalidInputError(
            f"Match {match_id} is not ready for a result "
            f"(players: {[p.id for p in match.players]}, "
            f"resolved: {match.is_resolved})"
        )
    validate_scores(score1, score2, context=f"Match {match_id}")

    updated = copy.deepcopy(tournament)
    played = updated.bracket.match(match_id)
    played.score1 = score1
    played.score2 = score2
    played.winner = played.player1 if score1 > score2 else played.player2

    updated.bracket = advance(updated.bracket, _active_policy(updated.config, policy))

    if updated.bracket.is_complete:
        updated.status = TournamentStatus.COMPLETED
        updated.winner = updated.bracket.champion
        logger.info(f"Tournament {updated.id} won by {updated.winner.id}")

    logger.debug(
        f"{match_id}: {played.player1.id} {score1}-{score2} {played.player2.id}"
    )

    if match_sink is not None:
        match_sink(
            RecordedMatch.singles(
                id=f"{updated.id}:{match_id}",
                player1_id=played.player1.id,
                player2_id=played.player2.id,
                score1=score1,
                score2=score2,
                timestamp=recorded_at or datetime.now(timezone.utc),
                conditions=played.conditions,
                tournament_id=updated.id,
            )
        )
    return updated


def final_ranking(tournament: Tournament) -> list[Placement]:
    return derive_final_ranking(tournament)
