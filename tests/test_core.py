"""Tests for core records, configuration, errors and logging."""

import logging
from datetime import datetime

import pytest

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
from ladder.core.models import Player, RecordedMatch

WHEN = datetime(2024, 1, 1)


class TestRecordedMatch:
    def test_singles(self):
        match = RecordedMatch.singles("m1", "a", "b", 11, 7, WHEN)
        assert not match.is_doubles
        assert match.participant_ids == ("a", "b")
        assert match.winner_side == 1
        assert match.scores_for("b") == (7, 11)
        assert match.won("a") and not match.won("b")

    def test_doubles_accepts_lists(self):
        match = RecordedMatch("m1", ["a", "b"], ["c", "d"], 5, 11, WHEN)
        assert match.team1 == ("a", "b")
        assert match.is_doubles
        assert match.side_of("d") == 2

    @pytest.mark.parametrize(
        "team1, team2",
        [
            (("a",), ("b", "c")),
            ((), ()),
            (("a", "b", "c"), ("d", "e", "f")),
            (("a",), ("a",)),
            (("a", "a"), ("b", "c")),
        ],
    )
    def test_rejects_bad_teams(self, team1, team2):
        with pytest.raises(InvalidInputError):
            RecordedMatch("m1", team1, team2, 11, 5, WHEN)

    def test_rejects_draw(self):
        with pytest.raises(InvalidInputError, match="draws"):
            RecordedMatch.singles("m1", "a", "b", 11, 11, WHEN)

    def test_conditions_do_not_affect_equality(self):
        plain = RecordedMatch.singles("m1", "a", "b", 11, 5, WHEN)
        tagged = RecordedMatch.singles("m1", "a", "b", 11, 5, WHEN, conditions={"a": None})
        assert plain == tagged


def test_player_defaults():
    player = Player("p1")
    assert player.rating == 1200.0
    assert player.display_name == "p1"
    assert Player("p1", name="Sam").display_name == "Sam"


class TestConfig:
    def test_defaults(self):
        assert DEFAULT_RATING_CONFIG.baseline == 1200.0
        assert DEFAULT_RATING_CONFIG.placement_matches == 10
        assert TournamentConfig().third_place_match is True

    def test_validation(self):
        with pytest.raises(ValueError):
            RatingConfig(scale=0)
        with pytest.raises(ValueError):
            RatingConfig(placement_matches=-1)
        with pytest.raises(ValueError):
            RatingConfig(provisional_k=16, established_k=32)

    def test_merge_configs_later_wins(self):
        merged = merge_configs({"baseline": 1000.0, "scale": 400.0}, {"baseline": 1500.0})
        assert RatingConfig(**merged) == RatingConfig(baseline=1500.0)


def test_exception_hierarchy():
    assert issubclass(InvalidInputError, ValueError)
    assert issubclass(TournamentNotCompleteError, InvalidInputError)
    assert issubclass(BracketStateError, RuntimeError)
    assert issubclass(BracketStateError, LadderError)

    error = BracketStateError("slot taken", match_id="r1_m0")
    assert error.match_id == "r1_m0"
    assert str(error) == "slot taken"


class TestLogging:
    def teardown_method(self):
        root = logging.getLogger("ladder")
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.propagate = True
        root.setLevel(logging.NOTSET)
        for name in ("bracket.advancement", "rating.replay"):
            get_logger(name).setLevel(logging.NOTSET)

    def test_get_logger_namespaces(self):
        assert get_logger("ladder.rating.replay").name == "ladder.rating.replay"
        assert get_logger("scripts").name == "ladder.scripts"
        assert get_logger("ladder").name == "ladder"

    def test_setup_logging_file(self, tmp_path):
        log_file = tmp_path / "ladder.log"
        logger = setup_logging("DEBUG", log_file=log_file, format_style="simple")

        with log_timing(get_logger("test"), "unit of work"):
            pass
        for handler in logger.handlers:
            handler.flush()

        content = log_file.read_text()
        assert "Starting unit of work" in content
        assert "Completed unit of work" in content

    def test_log_timing_reraises(self):
        with pytest.raises(KeyError):
            with log_timing(get_logger("test"), "failing"):
                raise KeyError("boom")

    def test_component_levels(self):
        setup_logging("DEBUG", component_levels={"rating.replay": "WARNING"})

        assert get_logger("bracket.advancement").getEffectiveLevel() == logging.INFO
        assert get_logger("rating.replay").getEffectiveLevel() == logging.WARNING
        assert get_logger("bracket.generator").getEffectiveLevel() == logging.DEBUG

    def test_component_override_of_default(self):
        setup_logging("INFO", component_levels={"bracket.advancement": logging.DEBUG})
        assert get_logger("bracket.advancement").isEnabledFor(logging.DEBUG)

    def test_unknown_format_style(self):
        with pytest.raises(ValueError, match="format_style"):
            setup_logging(format_style="xml")
