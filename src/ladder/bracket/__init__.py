"""Single- and double-elimination brackets: generation, advancement, ranking."""

from ladder.bracket.advancement import BracketRouting, advance
from ladder.bracket.conditions import (
    Condition,
    NoConditions,
    RatingWeightedConditionPolicy,
)
from ladder.bracket.generator import (
    generate_bracket,
    generate_double_elimination,
    generate_single_elimination,
    shuffle_participants,
)
from ladder.bracket.models import (
    Bracket,
    BracketMatch,
    BracketTag,
    FeedsFrom,
    FeedType,
    Round,
    RoundKind,
    SlotRef,
    TournamentFormat,
)
from ladder.bracket.ranking import Placement, derive_final_ranking
from ladder.bracket.seeding import is_power_of_two, next_power_of_two, seeded_order

__all__ = [
    # Structures
    "Bracket",
    "BracketMatch",
    "BracketTag",
    "FeedsFrom",
    "FeedType",
    "Round",
    "RoundKind",
    "SlotRef",
    "TournamentFormat",
    # Seeding
    "is_power_of_two",
    "next_power_of_two",
    "seeded_order",
    # Generation
    "generate_bracket",
    "generate_single_elimination",
    "generate_double_elimination",
    "shuffle_participants",
    # Advancement
    "advance",
    "BracketRouting",
    # Ranking
    "derive_final_ranking",
    "Placement",
    # Conditions
    "Condition",
    "NoConditions",
    "RatingWeightedConditionPolicy",
]
