"""Tests for the tournament lifecycle."""

from datetime import datetime, timezone

import pytest

from ladder.bracket.conditions import Condition, RatingWeightedConditionPolicy
from ladder.bracket.models import TournamentFormat
from ladder.core.config import TournamentConfig
from ladder.core.exceptions import (
    BracketStateError,
    InvalidInputError,
    TournamentNotCompleteError,
)
from ladder.core.models import Player
from ladder.tournament import (
    TournamentPhase,
    TournamentStatus,
    create_tournament,
    final_ranking,
    submit_group_result,
    submit_result,
)


def make_players(n):
    return [Player(f"p{i}", rating=1200.0 + 10 * i) for i in range(n)]


def play_all(tournament, **kwargs):
    """Submit 11-5 for player1 in every ready match until completion."""
    while not tournament.is_complete:
        match = next(m for m in tournament.bracket if m.is_ready)
        tournament = submit_result(tournament, match.id, 11, 5, **kwargs)
    return tournament


class TestCreateTournament:
    def test_unshuffled_keeps_seed_order(self):
        tournament = create_tournament("t1", "Friday", make_players(4), shuffle=False)

        assert tournament.phase is TournamentPhase.BRACKET
        assert tournament.status is TournamentStatus.ACTIVE
        first = tournament.bracket.rounds[0].matches[0]
        assert (first.player1.id, first.player2.id) == ("p0", "p3")

    def test_seeded_shuffle_is_reproducible(self):
        first = create_tournament("t1", "Friday", make_players(8), seed=3)
        second = create_tournament("t1", "Friday", make_players(8), seed=3)
        assert [m.player1.id for m in first.bracket.rounds[0].matches] == [
            m.player1.id for m in second.bracket.rounds[0].matches
        ]

    def test_player_snapshot(self):
        players = make_players(4)
        tournament = create_tournament("t1", "Friday", players)
        players.append(Player("late"))
        assert len(tournament.players) == 4

    def test_rejects_bad_rosters(self):
        with pytest.raises(InvalidInputError):
            create_tournament("t1", "Empty", make_players(1))
        with pytest.raises(InvalidInputError):
            create_tournament("t1", "Dupes", [Player("a"), Player("a")])

    def test_group_stage_start(self):
        config = TournamentConfig(use_group_stage=True)
        tournament = create_tournament("t1", "Groups", make_players(6), config=config)

        assert tournament.phase is TournamentPhase.GROUPS
        assert tournament.bracket is None
        assert [g.name for g in tournament.groups] == ["Group A", "Group B"]


class TestSubmitResult:
    def setup_method(self):
        self.tournament = create_tournament(
            "t1", "Friday", make_players(4), shuffle=False
        )

    def test_returns_new_tournament(self):
        updated = submit_result(self.tournament, "r1_m0", 11, 5)

        assert updated.bracket.match("r1_m0").winner.id == "p0"
        assert updated.bracket.match("r2_m0").player1.id == "p0"
        # Input untouched
        assert self.tournament.bracket.match("r1_m0").winner is None

    def test_score_recorded(self):
        updated = submit_result(self.tournament, "r1_m1", 4, 11)
        match = updated.bracket.match("r1_m1")
        assert (match.score1, match.score2) == (4, 11)
        assert match.winner.id == "p2"

    def test_unknown_match(self):
        with pytest.raises(InvalidInputError, match="Unknown match"):
            submit_result(self.tournament, "nope", 11, 5)

    def test_match_not_ready(self):
        with pytest.raises(InvalidInputError, match="not ready"):
            submit_result(self.tournament, "r2_m0", 11, 5)

    def test_match_already_played(self):
        updated = submit_result(self.tournament, "r1_m0", 11, 5)
        with pytest.raises(InvalidInputError, match="not ready"):
            submit_result(updated, "r1_m0", 11, 5)

    @pytest.mark.parametrize("scores", [(7, 7), (-2, 11), (11, None)])
    def test_bad_scores(self, scores):
        with pytest.raises(InvalidInputError):
            submit_result(self.tournament, "r1_m0", *scores)

    def test_completion_waits_for_third_place(self):
        tournament = submit_result(self.tournament, "r1_m0", 11, 5)
        tournament = submit_result(tournament, "r1_m1", 11, 5)
        tournament = submit_result(tournament, "r2_m0", 11, 5)
        assert tournament.status is TournamentStatus.ACTIVE

        tournament = submit_result(tournament, "third_place", 11, 5)
        assert tournament.status is TournamentStatus.COMPLETED
        assert tournament.winner.id == "p0"

    def test_match_sink_receives_recorded_match(self):
        recorded = []
        when = datetime(2024, 6, 1, tzinfo=timezone.utc)
        submit_result(
            self.tournament,
            "r1_m0",
            11,
            5,
            match_sink=recorded.append,
            recorded_at=when,
        )

        (match,) = recorded
        assert match.id == "t1:r1_m0"
        assert match.team1 == ("p0",)
        assert match.team2 == ("p3",)
        assert (match.score1, match.score2) == (11, 5)
        assert match.timestamp == when
        assert match.tournament_id == "t1"

    def test_sink_not_called_on_conflict(self):
        recorded = []
        self.tournament.bracket.match("r2_m0").player1 = Player("intruder")
        with pytest.raises(BracketStateError):
            submit_result(self.tournament, "r1_m0", 11, 5, match_sink=recorded.append)
        assert recorded == []


class TestLifecycle:
    def test_double_elimination_end_to_end(self):
        tournament = create_tournament(
            "t2", "Monthly", make_players(6), format="double_elim", shuffle=False
        )
        tournament = play_all(tournament)

        assert tournament.format is TournamentFormat.DOUBLE_ELIM
        assert tournament.winner.id == "p0"
        ranking = final_ranking(tournament)
        assert len(ranking) == 6
        assert ranking[0].player_id == "p0"

    def test_ranking_before_completion(self):
        tournament = create_tournament("t1", "Friday", make_players(4), shuffle=False)
        with pytest.raises(TournamentNotCompleteError):
            final_ranking(tournament)

    def test_group_stage_then_bracket(self):
        config = TournamentConfig(use_group_stage=True, third_place_match=False)
        tournament = create_tournament(
            "t3", "League", make_players(4), config=config, shuffle=False
        )
        (group,) = tournament.groups

        with pytest.raises(InvalidInputError):
            submit_result(tournament, "r1_m0", 11, 5)
        with pytest.raises(TournamentNotCompleteError):
            final_ranking(tournament)

        for pairing in group.pairings:
            # Lower index always wins
            first, second = pairing.player1_id, pairing.player2_id
            score = (11, 3) if first < second else (3, 11)
            tournament = submit_group_result(
                tournament, "Group A", first, second, *score
            )

        assert tournament.phase is TournamentPhase.BRACKET
        first_round = tournament.bracket.rounds[0].matches
        assert (first_round[0].player1.id, first_round[0].player2.id) == ("p0", "p3")

        with pytest.raises(InvalidInputError, match="group phase"):
            submit_group_result(tournament, "Group A", "p0", "p1", 11, 3)

        tournament = play_all(tournament)
        assert [p.player_id for p in final_ranking(tournament)][:2] == ["p0", "p1"]

    def test_conditions_only_when_enabled(self):
        pool = [Condition("Off hand", severity=5)]
        policy = RatingWeightedConditionPolicy(pool, seed=1)
        plain = create_tournament(
            "t4", "Plain", make_players(4), shuffle=False, policy=policy
        )
        mayhem = create_tournament(
            "t5",
            "Mayhem",
            make_players(4),
            config=TournamentConfig(conditions_enabled=True),
            shuffle=False,
            policy=policy,
        )

        assert plain.bracket.match("r1_m0").conditions is None
        conditions = mayhem.bracket.match("r1_m0").conditions
        assert conditions == {"p0": pool[0], "p3": pool[0]}

        mayhem = submit_result(mayhem, "r1_m0", 11, 5, policy=policy)
        mayhem = submit_result(mayhem, "r1_m1", 11, 5, policy=policy)
        assert set(mayhem.bracket.match("r2_m0").conditions) == {"p0", "p1"}
