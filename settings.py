"""Persistent engine settings for Shut the Box.

Stores options in ~/.shutbox_settings.json.
No UI dependency — loaded by the web API and the command-line tools.
"""

import json
import os
from pathlib import Path

from game_engine import OneDieRule

DEFAULTS = {
    "max_tile": 12,
    "one_die_rule": OneDieRule.AFTER_TOP_TILES_SHUT.value,
    "rigged_rolls": False,
    "probability_tile_limit": 16,
}


def _default_path():
    """Return the default path for the settings file."""
    return Path.home() / ".shutbox_settings.json"


def load_settings(path=None):
    """Load settings from JSON file. Returns DEFAULTS on missing/corrupt.

    Merges with DEFAULTS so missing keys get default values.
    Unknown keys are ignored.
    """
    if path is None:
        path = _default_path()
    path = Path(path)
    try:
        data = json.loads(path.read_text())
        if not isinstance(data, dict):
            return dict(DEFAULTS)
        # Merge: only keep known keys, fill missing from defaults
        result = dict(DEFAULTS)
        for key in DEFAULTS:
            if key in data:
                result[key] = data[key]
        return result
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return dict(DEFAULTS)


def save_settings(settings, path=None):
    """Write settings dict to JSON atomically. Silently ignores write errors."""
    if path is None:
        path = _default_path()
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_text(json.dumps(settings, indent=2))
        os.replace(tmp_path, path)
    except OSError:
        pass


def resolve_rule(settings):
    """Map the stored one_die_rule string to OneDieRule, defaulting on unknown values."""
    try:
        return OneDieRule(settings.get("one_die_rule"))
    except ValueError:
        return OneDieRule(DEFAULTS["one_die_rule"])
