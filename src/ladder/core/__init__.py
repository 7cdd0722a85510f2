"""Core components shared by the rating and bracket engines."""

from ladder.core.config import (
    DEFAULT_RATING_CONFIG,
    RatingConfig,
    TournamentConfig,
    merge_configs,
)
from ladder.core.exceptions import (
    BracketStateError,
    InvalidInputError,
    LadderError,
    TournamentNotCompleteError,
)
from ladder.core.logging import get_logger, log_timing, setup_logging
from ladder.core.models import Player, RecordedMatch, validate_scores
from ladder.core.protocols import ConditionPolicy, MatchSink, RatingSink

__all__ = [
    # Configuration
    "RatingConfig",
    "TournamentConfig",
    "DEFAULT_RATING_CONFIG",
    "merge_configs",
    # Errors
    "LadderError",
    "InvalidInputError",
    "TournamentNotCompleteError",
    "BracketStateError",
    # Logging
    "setup_logging",
    "get_logger",
    "log_timing",
    # Records
    "Player",
    "RecordedMatch",
    "validate_scores",
    # Collaborators
    "ConditionPolicy",
    "MatchSink",
    "RatingSink",
]
