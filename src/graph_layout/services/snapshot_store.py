"""
Graph Layout Engine - Snapshot Store

Durable, keyed position snapshots. Each snapshot is one JSON file in the
position-history folder whose content is the node-id-sorted mapping of
{x, y}. Saving merges with the caller's active snapshot so that nodes which
are not currently loaded in the graph view keep their stored positions.
"""

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Mapping, Optional

from graph_layout.constants import (
    NULL_SNAPSHOT_KEY,
    RESERVED_KEY_CHARACTERS,
    SNAPSHOT_FILE_SUFFIX,
    SNAPSHOT_LABEL_FORMAT,
)
from graph_layout.models.position import (
    PositionSnapshot,
    Vec2,
    coordinate_from_entry,
    snapshot_from_dict,
    snapshot_to_dict,
)

logger = logging.getLogger(__name__)

_TIMESTAMP_KEY_RE = re.compile(r'^(\d{4}-\d{2}-\d{2})T(\d{2})_(\d{2})_(\d{2})\.(\d{3})Z$')


class SnapshotStoreError(Exception):
    """The snapshot folder could not be created or written"""


# ========================================
# Key handling
# ========================================

def _format_timestamp(dt: datetime) -> str:
    dt = dt.astimezone(timezone.utc)
    return dt.strftime('%Y-%m-%dT%H:%M:%S') + f'.{dt.microsecond // 1000:03d}Z'


def _parse_timestamp(text: str) -> Optional[datetime]:
    text = text.strip()
    if not text:
        return None
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def normalize_key(key) -> str:
    """Turn a snapshot key into a storage identifier.

    Keys that parse as ISO-8601 timestamps are rewritten in one canonical UTC
    form; reserved path characters are then replaced with '_'. An empty key
    becomes 'null'. Applying it twice gives the same result.
    """
    text = '' if key is None else str(key)

    dt = _parse_timestamp(text)
    if dt is not None:
        text = _format_timestamp(dt)

    text = re.sub(RESERVED_KEY_CHARACTERS, '_', text)
    return text or NULL_SNAPSHOT_KEY


def timestamp_key(now: Optional[datetime] = None) -> str:
    """Storage key for a snapshot taken now (or at the given time)"""
    return normalize_key(_format_timestamp(now or datetime.now(timezone.utc)))


def snapshot_label(key: str) -> str:
    """Human-readable label for a history menu.

    Timestamp keys render as local date and time; other keys are returned
    unchanged.
    """
    match = _TIMESTAMP_KEY_RE.match(key or '')
    if not match:
        return key
    date, hh, mm, ss, ms = match.groups()
    dt = datetime.fromisoformat(f'{date}T{hh}:{mm}:{ss}.{ms}+00:00')
    return dt.astimezone().strftime(SNAPSHOT_LABEL_FORMAT)


def _coerce_positions(positions: Mapping) -> PositionSnapshot:
    """Accept Vec2, {x, y} dicts or node-like objects as snapshot values"""
    result = {}
    for node_id, value in positions.items():
        if isinstance(value, Vec2):
            result[node_id] = Vec2(float(value.x), float(value.y))
        elif isinstance(value, Mapping):
            result[node_id] = coordinate_from_entry(node_id, value)
        else:
            result[node_id] = Vec2(float(value.x), float(value.y))
    return result


# ========================================
# Store
# ========================================

class SnapshotStore:
    """Folder of position snapshots, one JSON file per key"""

    def __init__(self, folder):
        """
        Args:
            folder: Directory holding the snapshot files (created on first use)
        """
        self._logger = logging.getLogger('SnapshotStore')
        self.folder = Path(folder)

    def _ensure_folder(self):
        """Create the snapshot folder if missing

        Raises:
            SnapshotStoreError: If the folder cannot be created
        """
        if self.folder.is_dir():
            return
        try:
            self.folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SnapshotStoreError(f"Cannot create snapshot folder {self.folder}: {e}") from e
        self._logger.debug(f"Created snapshot folder {self.folder}")

    def path_for(self, key) -> Path:
        return self.folder / f"{normalize_key(key)}{SNAPSHOT_FILE_SUFFIX}"

    def save(self, key, positions: Mapping, previous_key=None) -> str:
        """Write a snapshot, filling gaps from the previous active snapshot

        Args:
            key: Snapshot key (normalized before use)
            positions: Mapping of node id -> Vec2 / {x, y} / node
            previous_key: Key of the currently active snapshot; ids it holds
                that are missing from positions are carried over

        Returns:
            The storage key written

        Raises:
            SnapshotStoreError: If the folder cannot be created or the file written
        """
        storage_key = normalize_key(key)
        merged = _coerce_positions(positions)

        if previous_key is not None:
            filled = 0
            for node_id, pos in self.load(previous_key).items():
                if node_id not in merged:
                    merged[node_id] = pos
                    filled += 1
            if filled:
                self._logger.debug(f"Filled {filled} positions from previous snapshot '{previous_key}'")

        self._ensure_folder()
        path = self.folder / f"{storage_key}{SNAPSHOT_FILE_SUFFIX}"
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(snapshot_to_dict(merged), f, indent=2)
        except OSError as e:
            raise SnapshotStoreError(f"Cannot write snapshot {path}: {e}") from e

        self._logger.debug(f"Saved snapshot '{storage_key}' ({len(merged)} nodes)")
        return storage_key

    def add_snapshot(self, positions: Mapping, previous_key=None) -> str:
        """Save positions under a fresh timestamp key

        Returns:
            The new key
        """
        return self.save(timestamp_key(), positions, previous_key=previous_key)

    def load(self, key) -> PositionSnapshot:
        """Load a snapshot

        Returns:
            Mapping of node id -> Vec2; empty if the key is unknown, the
            record is malformed, or the folder cannot be created
        """
        try:
            self._ensure_folder()
        except SnapshotStoreError as e:
            self._logger.warning(str(e))
            return {}

        path = self.path_for(key)
        if not path.is_file():
            return {}

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return snapshot_from_dict(data)
        except (OSError, ValueError) as e:
            self._logger.warning(f"Skipping malformed snapshot {path.name}: {e}")
            return {}

    def list_keys(self) -> List[str]:
        """All stored snapshot keys, in no particular order"""
        try:
            self._ensure_folder()
        except SnapshotStoreError as e:
            self._logger.warning(str(e))
            return []

        keys = []
        for entry in self.folder.iterdir():
            if entry.is_file() and entry.name.endswith(SNAPSHOT_FILE_SUFFIX):
                keys.append(entry.name[:-len(SNAPSHOT_FILE_SUFFIX)])
        return keys

    def history_menu_keys(self) -> List[str]:
        """Keys newest first, without the placeholder 'null' key"""
        return sorted((k for k in self.list_keys() if k and k != NULL_SNAPSHOT_KEY), reverse=True)

    def exists(self, key) -> bool:
        return self.path_for(key).is_file()
