"""Round-robin group phase and bracket reseeding."""

from ladder.groups.stage import (
    Group,
    GroupStanding,
    Pairing,
    partition_into_groups,
    rank_standings,
    reseed_from_groups,
    round_robin_pairings,
)

__all__ = [
    "Group",
    "GroupStanding",
    "Pairing",
    "partition_into_groups",
    "rank_standings",
    "reseed_from_groups",
    "round_robin_pairings",
]
