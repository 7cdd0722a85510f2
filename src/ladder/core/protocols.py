"""Protocol definitions for the collaborators the core talks to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ladder.bracket.conditions import Condition
    from ladder.core.models import Player, RecordedMatch
    from ladder.rating.replay import RatingUpdate


@runtime_checkable
class ConditionPolicy(Protocol):
    """Chooses a handicap for ``player`` when a match against ``opponent`` becomes ready."""

    def __call__(self, player: Player, opponent: Player) -> Condition | None:
        ...


@runtime_checkable
class MatchSink(Protocol):
    """Persists a finished tournament match.

    Fire-and-forget from the core's side; failures belong to the sink.
    """

    def __call__(self, match: RecordedMatch) -> None:
        ...


@runtime_checkable
class RatingSink(Protocol):
    """Persists recomputed ratings keyed by player id."""

    def __call__(self, updates: dict[str, RatingUpdate]) -> None:
        ...
