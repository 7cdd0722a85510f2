"""Tests for the round-robin group phase."""

from collections import Counter
from itertools import combinations

import pytest

from ladder.bracket.generator import generate_single_elimination
from ladder.core.exceptions import InvalidInputError
from ladder.core.models import Player
from ladder.groups.stage import (
    Group,
    GroupStanding,
    partition_into_groups,
    rank_standings,
    reseed_from_groups,
    round_robin_pairings,
)


def make_players(n):
    return [Player(f"p{i}") for i in range(n)]


class TestRoundRobin:
    @pytest.mark.parametrize("n", range(2, 11))
    def test_every_pair_meets_once(self, n):
        players = make_players(n)
        pairings = round_robin_pairings(players)

        met = [frozenset((p.player1_id, p.player2_id)) for p in pairings]
        expected = {frozenset((a.id, b.id)) for a, b in combinations(players, 2)}
        assert len(met) == len(expected)
        assert set(met) == expected

    @pytest.mark.parametrize("n", range(2, 11))
    def test_nobody_plays_twice_in_a_round(self, n):
        pairings = round_robin_pairings(make_players(n))
        rounds = {p.round_number for p in pairings}
        assert len(rounds) == (n - 1 if n % 2 == 0 else n)
        for round_number in rounds:
            seen = Counter()
            for p in pairings:
                if p.round_number == round_number:
                    seen.update([p.player1_id, p.player2_id])
            assert max(seen.values()) == 1

    def test_first_player_fixed(self):
        pairings = round_robin_pairings(make_players(4))
        firsts = [p for p in pairings if "p0" in (p.player1_id, p.player2_id)]
        assert [p.round_number for p in firsts] == [1, 2, 3]

    def test_too_few_players(self):
        assert round_robin_pairings(make_players(1)) == []


class TestPartition:
    @pytest.mark.parametrize("n", [2, 3, 4, 5, 7, 9])
    def test_single_group(self, n):
        groups = partition_into_groups(make_players(n))
        assert [g.name for g in groups] == ["Group A"]
        assert len(groups[0].players) == n

    def test_two_groups_alternate(self):
        groups = partition_into_groups(make_players(8))
        assert [g.name for g in groups] == ["Group A", "Group B"]
        assert [p.id for p in groups[0].players] == ["p0", "p2", "p4", "p6"]
        assert [p.id for p in groups[1].players] == ["p1", "p3", "p5", "p7"]


class TestGroup:
    def setup_method(self):
        self.group = Group("Group A", make_players(3))

    def test_record_result(self):
        self.group.record_result("p1", "p0", 11, 7)

        winner = self.group.standings["p1"]
        loser = self.group.standings["p0"]
        assert (winner.wins, winner.points_for, winner.points_against) == (1, 11, 7)
        assert (loser.losses, loser.point_diff) == (1, -4)
        assert winner.matches_played == 1
        assert len(self.group.pending()) == 2

    def test_rejects_unknown_pairing(self):
        with pytest.raises(InvalidInputError, match="not a pairing"):
            self.group.record_result("p0", "p9", 11, 7)

    def test_rejects_repeat(self):
        self.group.record_result("p0", "p1", 11, 7)
        with pytest.raises(InvalidInputError, match="already played"):
            self.group.record_result("p1", "p0", 11, 7)

    def test_rejects_tie(self):
        with pytest.raises(InvalidInputError):
            self.group.record_result("p0", "p1", 9, 9)
        assert not self.group.completed

    def test_completion(self):
        for pairing in self.group.pairings:
            self.group.record_result(pairing.player1_id, pairing.player2_id, 11, 5)
        assert self.group.is_complete


def test_rank_standings_wins_then_point_diff():
    a, b, c = make_players(3)
    standings = [
        GroupStanding(a, wins=1, points_for=20, points_against=25),
        GroupStanding(b, wins=2, points_for=22, points_against=10),
        GroupStanding(c, wins=1, points_for=21, points_against=15),
    ]
    assert [s.player.id for s in rank_standings(standings)] == ["p1", "p2", "p0"]


class TestReseed:
    def complete(self, group, order):
        """Play the group so that players finish in ``order``."""
        position = {player_id: i for i, player_id in enumerate(order)}
        for pairing in group.pairings:
            first, second = pairing.player1_id, pairing.player2_id
            if position[first] < position[second]:
                group.record_result(first, second, 11, 5)
            else:
                group.record_result(first, second, 5, 11)

    def test_single_group_uses_standings(self):
        (group,) = partition_into_groups(make_players(4))
        self.complete(group, ["p3", "p1", "p0", "p2"])
        assert [p.id for p in reseed_from_groups([group])] == ["p3", "p1", "p0", "p2"]

    def test_two_groups_interleave(self):
        group_a, group_b = partition_into_groups(make_players(6))
        self.complete(group_a, ["p4", "p0", "p2"])
        self.complete(group_b, ["p1", "p5", "p3"])

        seeds = [p.id for p in reseed_from_groups([group_a, group_b])]
        assert seeds == ["p4", "p1", "p0", "p5", "p2", "p3"]

    def test_odd_groups_give_winners_the_byes(self):
        group_a, group_b = partition_into_groups(make_players(6))
        self.complete(group_a, ["p4", "p0", "p2"])
        self.complete(group_b, ["p1", "p5", "p3"])

        bracket = generate_single_elimination(reseed_from_groups([group_a, group_b]))
        first = bracket.rounds[0].matches

        assert {m.winner.id for m in first if m.is_bye} == {"p4", "p1"}
        pairs = {frozenset(p.id for p in m.players) for m in first if not m.is_bye}
        # A2 vs B3 and B2 vs A3
        assert pairs == {frozenset({"p0", "p3"}), frozenset({"p5", "p2"})}

    def test_incomplete_group_rejected(self):
        (group,) = partition_into_groups(make_players(4))
        with pytest.raises(InvalidInputError, match="still has"):
            reseed_from_groups([group])
