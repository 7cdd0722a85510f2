"""
Ladder: Elo ratings and elimination brackets for a paired-sport ladder.

Subpackages
-----------
core     : records, configuration, errors, logging
rating   : Elo deltas, match-log replay, player statistics
bracket  : seeding, generation, advancement, final ranking, conditions
groups   : round-robin group phase and reseeding
"""

from ladder.bracket import derive_final_ranking, generate_bracket
from ladder.rating import compute_rating_delta, replay_ratings
from ladder.tournament import (
    Tournament,
    TournamentPhase,
    TournamentStatus,
    create_tournament,
    final_ranking,
    submit_group_result,
    submit_result,
)

__version__ = "0.1.0"

__all__ = [
    "compute_rating_delta",
    "replay_ratings",
    "generate_bracket",
    "derive_final_ranking",
    "Tournament",
    "TournamentPhase",
    "TournamentStatus",
    "create_tournament",
    "submit_group_result",
    "submit_result",
    "final_ranking",
]
