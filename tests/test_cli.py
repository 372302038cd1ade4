"""Tests for active.cli — the seed/erase/count entry point."""

from unittest.mock import patch

import pytest

from active.cli import build_parser, main
from active.ports.store_port import StoreError


class TestParser:
    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_seed_options(self):
        args = build_parser().parse_args(["seed", "--habits", "4", "--days", "10"])
        assert args.command == "seed"
        assert args.habits == 4
        assert args.days == 10
        assert args.base_only is False

    @pytest.mark.parametrize(
        "option, value", [("--days", "-2"), ("--days", "0"), ("--habits", "0"),
                          ("--habits", "-1"), ("--habits", "many")],
    )
    def test_rejects_non_positive_counts(self, option, value, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["seed", option, value])
        assert exc_info.value.code == 2
        assert option in capsys.readouterr().err


class TestMain:
    def test_base_seed_prints_summary(self, tmp_db_path, capsys):
        assert main(["--db", tmp_db_path, "seed", "--base-only"]) == 0
        out = capsys.readouterr().out
        assert "User: 1, Habit: 0, HabitDay: 0, Notification: 0, Day: 0" in out

    def test_development_seed(self, tmp_db_path, capsys):
        assert main(["--db", tmp_db_path, "seed", "--habits", "2", "--days", "4"]) == 0
        out = capsys.readouterr().out
        assert "Habit: 2" in out
        assert "HabitDay: 8" in out

    def test_explicit_habit_count_is_honored_without_days(self, tmp_db_path, capsys):
        assert main(["--db", tmp_db_path, "seed", "--habits", "1"]) == 0
        assert "Habit: 1," in capsys.readouterr().out

    def test_negative_days_is_a_usage_error(self, tmp_db_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--db", tmp_db_path, "seed", "--days", "-2"])
        assert exc_info.value.code == 2
        assert "must be a positive integer" in capsys.readouterr().err

    def test_zero_habits_is_a_usage_error(self, tmp_db_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["--db", tmp_db_path, "seed", "--habits", "0"])
        assert exc_info.value.code == 2

    def test_failed_save_exits_with_one(self, tmp_db_path, capsys):
        with patch("active.data.db.Transaction.save", side_effect=StoreError("disk full")):
            assert main(["--db", tmp_db_path, "seed", "--base-only"]) == 1
        # Nothing was committed.
        assert "User: 0" in capsys.readouterr().out

    def test_failed_step_exits_with_one(self, tmp_db_path, capsys):
        with patch(
            "active.core.seed_steps.HabitsSeedStep.apply",
            side_effect=StoreError("insert failed"),
        ):
            assert main(["--db", tmp_db_path, "seed", "--habits", "1", "--days", "2"]) == 1
        assert "User: 1, Habit: 0" in capsys.readouterr().out

    def test_erase_then_count(self, tmp_db_path, capsys):
        main(["--db", tmp_db_path, "seed", "--habits", "1", "--days", "3"])
        capsys.readouterr()

        assert main(["--db", tmp_db_path, "erase"]) == 0
        assert main(["--db", tmp_db_path, "count"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert "User: 0" in lines
        assert "Day: 0" in lines
