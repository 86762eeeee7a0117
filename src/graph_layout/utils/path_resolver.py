"""Path resolver for the engine's on-disk data.

All persisted data (snapshots and settings) lives under one data directory:
- $GRAPH_LAYOUT_HOME when set
- otherwise ~/.graph_layout
"""

import os
from pathlib import Path

from graph_layout.constants import POSITION_HISTORY_DIR, SETTINGS_FILE_NAME


def get_base_dir() -> Path:
    """Get the base data directory.

    Returns:
        Path: Data directory (not created here)
    """
    override = os.environ.get('GRAPH_LAYOUT_HOME')
    if override:
        return Path(override).expanduser()
    return Path.home() / ".graph_layout"


def get_position_history_dir(base_dir=None) -> Path:
    """Get the folder holding one JSON file per position snapshot.

    Args:
        base_dir: Optional data directory overriding get_base_dir()
    """
    base = Path(base_dir) if base_dir else get_base_dir()
    return base / POSITION_HISTORY_DIR


def get_settings_file(base_dir=None) -> Path:
    """Get path to the settings JSON file."""
    base = Path(base_dir) if base_dir else get_base_dir()
    return base / SETTINGS_FILE_NAME
