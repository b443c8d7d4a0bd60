"""
Settings Test Suite

Tests for persistent settings load/save.

Sections:
    1. Load — missing file, corrupt file, partial, unknown keys
    2. Save — round-trip, bad path
    3. Atomic Writes
    4. Rule Resolution
"""
import json

from game_engine import OneDieRule
from settings import DEFAULTS, load_settings, resolve_rule, save_settings

# ── 1. Load ──────────────────────────────────────────────────────────────────


def test_load_missing_file_returns_defaults(tmp_path):
    """Loading from a nonexistent file returns DEFAULTS."""
    path = tmp_path / "no_such_file.json"
    result = load_settings(path=path)
    assert result == DEFAULTS


def test_load_corrupt_file_returns_defaults(tmp_path):
    """Loading from a corrupt (non-JSON) file returns DEFAULTS."""
    path = tmp_path / "bad.json"
    path.write_text("not json at all {{{")
    result = load_settings(path=path)
    assert result == DEFAULTS


def test_load_non_object_returns_defaults(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]")
    assert load_settings(path=path) == DEFAULTS


def test_partial_file_fills_missing_keys(tmp_path):
    """A file with only some keys gets missing ones filled from DEFAULTS."""
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"max_tile": 9}))
    result = load_settings(path=path)
    assert result["max_tile"] == 9
    assert result["one_die_rule"] == DEFAULTS["one_die_rule"]
    assert result["rigged_rolls"] == DEFAULTS["rigged_rolls"]
    assert result["probability_tile_limit"] == DEFAULTS["probability_tile_limit"]


def test_unknown_keys_ignored(tmp_path):
    """Unknown keys in the file are dropped, not passed through."""
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"rigged_rolls": True, "theme": "neon"}))
    result = load_settings(path=path)
    assert "theme" not in result
    assert result["rigged_rolls"] is True


def test_defaults_are_copied():
    """Mutating a loaded dict must not leak into DEFAULTS."""
    result = load_settings(path="/nonexistent/dir/settings.json")
    result["max_tile"] = 56
    assert DEFAULTS["max_tile"] == 12


# ── 2. Save ──────────────────────────────────────────────────────────────────


def test_save_load_round_trip(tmp_path):
    """Settings survive a save/load round trip."""
    path = tmp_path / "settings.json"
    settings = {"max_tile": 10, "one_die_rule": "never", "rigged_rolls": True,
                "probability_tile_limit": 12}
    save_settings(settings, path=path)
    assert load_settings(path=path) == settings


def test_save_to_bad_path_does_not_raise(tmp_path):
    """Writing to an invalid path silently fails."""
    bad_path = tmp_path / "nonexistent_dir" / "nested" / "settings.json"
    # Should not raise
    save_settings({"max_tile": 12}, path=bad_path)
    assert not bad_path.exists()


# ── 3. Atomic Writes ────────────────────────────────────────────────────────


def test_atomic_write_preserves_existing_settings(tmp_path):
    """Existing settings survive even if a .tmp file is left over from a crash."""
    path = tmp_path / "settings.json"
    save_settings({"max_tile": 9, "one_die_rule": "never"}, path=path)

    # Simulate a crashed partial write
    tmp_file = tmp_path / "settings.json.tmp"
    tmp_file.write_text("corrupted garbage")

    # Original should still load correctly
    loaded = load_settings(path=path)
    assert loaded["max_tile"] == 9
    assert loaded["one_die_rule"] == "never"


def test_save_leaves_no_temp_file(tmp_path):
    path = tmp_path / "settings.json"
    save_settings(dict(DEFAULTS), path=path)
    assert not (tmp_path / "settings.json.tmp").exists()


# ── 4. Rule Resolution ──────────────────────────────────────────────────────


def test_resolve_rule_default():
    assert resolve_rule(DEFAULTS) == OneDieRule.AFTER_TOP_TILES_SHUT


def test_resolve_rule_each_value():
    for rule in OneDieRule:
        assert resolve_rule({"one_die_rule": rule.value}) == rule


def test_resolve_rule_unknown_falls_back():
    assert resolve_rule({"one_die_rule": "sometimes"}) == OneDieRule.AFTER_TOP_TILES_SHUT
    assert resolve_rule({}) == OneDieRule.AFTER_TOP_TILES_SHUT
