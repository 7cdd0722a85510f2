"""
Configuration constants for the rating and bracket engines.

This module centralizes the default parameters so the ladder can be tuned
in one place.
"""

# =============================================================================
# Rating Parameters
# =============================================================================

# Every new player starts here
DEFAULT_RATING: float = 1200.0

# Logistic scale of the expected-score curve (classic Elo)
ELO_SCALE: float = 400.0

# Rated matches needed before a rating is shown as an official rank
PLACEMENT_MATCHES: int = 10

# Volatility (K-factor) during and after the placement period
PROVISIONAL_K_FACTOR: float = 48.0
ESTABLISHED_K_FACTOR: float = 32.0

# =============================================================================
# Bracket Round Names
# =============================================================================

ROUND_GRAND_FINAL = "Grand Final"
ROUND_SEMI_FINALS = "Semi-Finals"
ROUND_QUARTER_FINALS = "Quarter-Finals"
ROUND_THIRD_PLACE = "3rd Place Match"

ROUND_WB_FINAL = "WB Final"
ROUND_WB_SEMI_FINALS = "WB Semi-Finals"
ROUND_LB_FINAL = "LB Final"

# Single elimination needs at least this many real players for a bronze match
MIN_PLAYERS_FOR_THIRD_PLACE: int = 4

# =============================================================================
# Match Ids
# =============================================================================

GRAND_FINAL_ID = "grand_final"
LB_FINAL_ID = "lb_final"
THIRD_PLACE_ID = "third_place"

# =============================================================================
# Conditions
# =============================================================================

TRIGGER_MAYHEM = "mayhem"

MIN_CONDITION_SEVERITY: int = 1
MAX_CONDITION_SEVERITY: int = 10

# Rating distance above the baseline for one unit of severity tilt
CONDITION_RATING_SPREAD: float = 200.0

# =============================================================================
# Group Stage
# =============================================================================

# Below this many players (or with an odd count) everyone plays in one group
MIN_PLAYERS_FOR_TWO_GROUPS: int = 6
