"""Tests for the shutbox.py command-line advisor and ai_benchmark.py."""
import io

import pytest

import ai_benchmark
from ai import BestMoveStrategy, RandomStrategy
from game_engine import OneDieRule
from settings import DEFAULTS, load_settings
from shutbox import advise, main, parse_args


def run(argv, settings=None):
    out = io.StringIO()
    status = advise(parse_args(argv), settings or dict(DEFAULTS), out=out)
    return status, out.getvalue()


# ── parse_args ───────────────────────────────────────────────────────────────

class TestParseArgs:

    def test_defaults(self):
        args = parse_args([])
        assert args.tiles is None
        assert args.roll is None
        assert args.rule is None
        assert not args.probability

    @pytest.mark.parametrize("argv", [
        ["--roll", "1", "2", "3"],
        ["--roll", "7"],
        ["--roll", "0", "1"],
        ["--tiles", "0", "1"],
        ["--tiles", "4", "4"],
        ["--tiles", "57"],
        ["--max-tile", "0"],
        ["--max-tile", "57"],
        ["--rule", "sometimes"],
    ])
    def test_invalid_input_exits(self, argv):
        with pytest.raises(SystemExit) as excinfo:
            parse_args(argv)
        assert excinfo.value.code == 2

    def test_rule_help_describes_each_rule(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            parse_args(["--help"])
        assert excinfo.value.code == 0
        out = " ".join(capsys.readouterr().out.split())
        for rule in OneDieRule:
            assert f"{rule.value}: {rule.help_text}" in out


# ── advise ───────────────────────────────────────────────────────────────────

class TestAdvise:

    def test_lists_moves(self):
        status, output = run(["--tiles", "1", "2", "3", "4", "5", "6", "--roll", "6"])
        assert status == 0
        assert "  1 + 2 + 3" in output
        assert "  6" in output
        assert "Hinted tiles: 1, 2, 3, 4, 5, 6" in output
        assert "Best move: 1, 2, 3" in output

    def test_bust(self):
        _, output = run(["--tiles", "5", "6", "--roll", "1", "1"])
        assert "bust" in output

    def test_default_board_from_settings(self):
        settings = dict(DEFAULTS, max_tile=9)
        _, output = run([], settings)
        assert "Board: 1 2 3 4 5 6 7 8 9 (remainder 45)" in output

    def test_rigged(self):
        _, output = run(["--rigged"])
        assert "Rigged roll: 6 + 6 = 12" in output

    def test_probability(self):
        _, output = run(["--tiles", "1", "--rule", "never", "--probability"])
        assert "0.00%" in output

    def test_probability_refused_over_limit(self):
        settings = dict(DEFAULTS, probability_tile_limit=3)
        status, output = run(["--probability"], settings)
        assert status == 1
        assert "Chance" not in output

    def test_main_reads_settings_file(self, tmp_path, capsys):
        path = tmp_path / "settings.json"
        path.write_text('{"max_tile": 4}')
        assert main(["--settings", str(path)]) == 0
        assert "Board: 1 2 3 4" in capsys.readouterr().out

    def test_max_tile_overrides_settings(self):
        _, output = run(["--max-tile", "5"], dict(DEFAULTS, max_tile=9))
        assert "Board: 1 2 3 4 5 (remainder 15)" in output

    def test_save_settings(self, tmp_path, capsys):
        path = tmp_path / "settings.json"
        path.write_text('{"probability_tile_limit": 10}')
        assert main(["--settings", str(path), "--save-settings",
                     "--rule", "never", "--max-tile", "9"]) == 0
        assert "Saved settings (Never, tiles 1-9)" in capsys.readouterr().out
        saved = load_settings(str(path))
        assert saved["one_die_rule"] == "never"
        assert saved["max_tile"] == 9
        assert saved["probability_tile_limit"] == 10


# ── ai_benchmark ─────────────────────────────────────────────────────────────

class TestBenchmark:

    def test_benchmark_strategy(self):
        scores, shut_count, elapsed = ai_benchmark.benchmark_strategy(BestMoveStrategy(), 20)
        assert len(scores) == 20
        assert 0 <= shut_count <= 20
        assert shut_count == scores.count(0)
        assert elapsed >= 0

    def test_seeded_runs_repeat(self):
        first = ai_benchmark.benchmark_strategy(RandomStrategy(), 15)[0]
        second = ai_benchmark.benchmark_strategy(RandomStrategy(), 15)[0]
        assert first == second

    def test_rigged_turns_always_shut(self):
        scores, shut_count, _ = ai_benchmark.benchmark_strategy(
            BestMoveStrategy(), 5, rule=OneDieRule.AFTER_TOP_TILES_SHUT, max_tile=3, rigged=True)
        assert scores == [0] * 5
        assert shut_count == 5

    def test_rigged_rolls_setting_applied(self, tmp_path, capsys):
        path = tmp_path / "settings.json"
        path.write_text('{"rigged_rolls": true, "max_tile": 3}')
        ai_benchmark.main(["--turns", "4", "--csv", "--strategy", "first", "--settings", str(path)])
        row = capsys.readouterr().out.strip().splitlines()[1].split(",")
        assert row[0] == "FirstCombo"
        assert row[7] == "1.0000"

    def test_rigged_flag(self, tmp_path, capsys):
        ai_benchmark.main(["--turns", "3", "--rigged", "--max-tile", "3",
                           "--settings", str(tmp_path / "missing.json")])
        assert "rigged" in capsys.readouterr().out

    def test_csv_output(self, tmp_path, capsys):
        ai_benchmark.main(["--turns", "5", "--csv", "--strategy", "best",
                           "--settings", str(tmp_path / "missing.json")])
        lines = capsys.readouterr().out.strip().splitlines()
        assert lines[0].startswith("strategy,turns,")
        assert lines[1].startswith("BestMove,5,")

    def test_table_output(self, tmp_path, capsys):
        ai_benchmark.main(["--turns", "5", "--verbose", "--rule", "never",
                           "--settings", str(tmp_path / "missing.json")])
        out = capsys.readouterr().out
        for name in ("Random", "FirstCombo", "BestMove"):
            assert name in out
        assert "stdev=" in out
