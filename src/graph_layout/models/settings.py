"""Per-plugin settings for graph views.

Settings are an explicit object handed to each graph view at construction.
Writes go through update(), which notifies listeners registered with
add_listener(); persisting is left to the save callback the owner supplies.
"""
import logging
from dataclasses import dataclass, field, fields
from typing import Callable, List, Optional

from graph_layout.constants import (
    DEFAULT_INNER_RING_SUBSTRINGS,
    DEFAULT_MAX_ARRANGE_CIRCLE_RADIUS,
    DEFAULT_SELECTION_WIDTH,
    DEFAULT_TRACKED_METADATA_KEYS,
)

logger = logging.getLogger(__name__)


@dataclass
class LayoutSettings:
    """Settings shared by every graph view of one plugin instance"""
    show_grid: bool = False
    snap_to_grid: bool = False
    current_positions_history_key: Optional[str] = None
    automatically_restore_node_positions: bool = False
    label_regex: str = ''
    frontmatter_field: str = ''
    selection_width: int = DEFAULT_SELECTION_WIDTH
    max_arrange_circle_radius: float = DEFAULT_MAX_ARRANGE_CIRCLE_RADIUS
    search_selection_mode: bool = False
    inner_ring_substrings: List[str] = field(default_factory=lambda: list(DEFAULT_INNER_RING_SUBSTRINGS))
    tracked_metadata_keys: List[str] = field(default_factory=lambda: list(DEFAULT_TRACKED_METADATA_KEYS))
    _listeners: List[Callable] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls) if not f.name.startswith('_')]

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'LayoutSettings':
        """Build settings from saved data, ignoring unknown keys"""
        data = data or {}
        known = set(cls.field_names())
        unknown = sorted(set(data) - known)
        if unknown:
            logger.debug(f"Ignoring unknown settings: {unknown}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in self.field_names()}

    def update(self, **changes):
        """Apply setting changes and notify listeners of each changed value

        Raises:
            AttributeError: If a name is not a known setting
        """
        known = set(self.field_names())
        for name, value in changes.items():
            if name not in known:
                raise AttributeError(f"Unknown setting '{name}'")
            if getattr(self, name) == value:
                continue
            setattr(self, name, value)
            self._notify_listeners(name, value)

    def add_listener(self, callback: Callable[[str, object], None]):
        """Register callback(name, value), called after each changed setting"""
        self._listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self, name, value):
        for callback in list(self._listeners):
            try:
                callback(name, value)
            except Exception as e:
                logger.error(f"Error notifying settings listener for '{name}': {e}")
