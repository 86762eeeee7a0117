"""
Graph Layout Engine - Graph View Controller

One controller per open graph view. It owns the view's selection, undo
history and arrangement engine, and wires them to the shared snapshot store
and settings. The host forwards keyboard, pointer and drag events and calls
on_data_reloaded() whenever the renderer reloads its graph data.
"""

import logging

from graph_layout.actions.clipboard_actions import ClipboardActions
from graph_layout.main.config_mixin import ConfigMixin
from graph_layout.main.event_mixin import EventMixin
from graph_layout.main.history_mixin import HistoryMixin
from graph_layout.models.settings import LayoutSettings
from graph_layout.services.arrangement import ArrangementEngine
from graph_layout.services.geometry import ArrangementSpec, substring_classifier
from graph_layout.services.selection import SelectionManager
from graph_layout.services.snapshot_store import SnapshotStoreError, normalize_key, snapshot_label
from graph_layout.utils.history_manager import HistoryManager
from graph_layout.utils.logger import notify


class GraphLayoutController(EventMixin, ConfigMixin, HistoryMixin):
    """Layout state for one graph view"""

    def __init__(self, gateway, store, settings=None, save_settings=None, config_file=None, clipboard=None):
        """
        Args:
            gateway: RendererGateway of the view
            store: SnapshotStore shared by all views
            settings: LayoutSettings shared by all views (defaults if None)
            save_settings: Callable(settings) persisting settings; takes
                precedence over config_file
            config_file: JSON settings file to load from and save to
            clipboard: Object with text()/setText() replacing the Qt clipboard
        """
        self._logger = logging.getLogger('GraphLayoutController')
        self.gateway = gateway
        self.store = store
        self.settings = settings if settings is not None else LayoutSettings()

        self._save_settings_callback = save_settings
        self.config_file = config_file
        self._load_config()

        # Flag to prevent saving state during undo/redo
        self._is_applying_history = False
        self.can_undo = False
        self.can_redo = False
        self.status_left = "Ready"
        self.status_right = ""

        # Rectangle selection state
        self._rect_armed = False
        self._rect_start = None
        self._alt_pressed = False

        self.selection = SelectionManager(gateway)
        self.selection.add_listener(self._on_selection_changed)

        self.history_manager = HistoryManager(capture=self._capture_current_state)
        self.history_manager.add_listener(self._on_history_changed)

        self.engine = ArrangementEngine(gateway, self.history_manager)
        self.clipboard_actions = ClipboardActions(self, clipboard=clipboard)

        self.settings.add_listener(self._on_setting_changed)

        # History starts at the active persisted snapshot
        self.history_manager.save_state(self.current_positions(), "Load positions")

    # ========================================
    # Persisted snapshots
    # ========================================

    @property
    def active_snapshot_key(self):
        return self.settings.current_positions_history_key

    def current_positions(self):
        """Positions of the active persisted snapshot ({} when none)"""
        key = self.active_snapshot_key
        if not key:
            return {}
        return self.store.load(key)

    def save_positions(self):
        """Persist live positions as a new snapshot and make it active

        Returns:
            The new snapshot key, or None if nothing was saved
        """
        positions = self.gateway.get_positions()
        if not positions:
            notify("Could not save positions. No nodes or renderer found.")
            return None

        try:
            key = self.store.add_snapshot(positions, previous_key=self.active_snapshot_key)
        except SnapshotStoreError as e:
            self._logger.error(f"Saving positions failed: {e}")
            notify("Could not save positions.")
            return None

        self.settings.update(current_positions_history_key=key)
        self._save_config()
        notify("Positions saved")
        return key

    def restore_positions(self, key=None):
        """Restore the active snapshot, or the snapshot at key and make it active

        Returns:
            True if positions were restored
        """
        target = normalize_key(key) if key is not None else self.active_snapshot_key
        positions = self.store.load(target) if target else {}
        if not positions:
            notify("No positions found for this timestamp.")
            return False

        self._restore_state(positions)
        self.save_state_debounced("Restore positions")

        if key is not None and target != self.active_snapshot_key:
            self.settings.update(current_positions_history_key=target)
            self._save_config()
        notify("Positions restored")
        return True

    def history_menu(self):
        """Entries for the snapshot history menu, newest first

        Returns:
            List of (key, label, is_active)
        """
        active = self.active_snapshot_key
        return [(key, snapshot_label(key), key == active) for key in self.store.history_menu_keys()]

    def on_data_reloaded(self):
        """Re-pin the current history entry after the renderer reloads its data"""
        if not self.settings.automatically_restore_node_positions:
            return False
        state = self.history_manager.current()
        if not state:
            return False
        self._restore_state(state)
        return True

    # ========================================
    # Selection
    # ========================================

    def _on_selection_changed(self, ids):
        self._logger.debug(f"Selection changed: {len(ids)} nodes")
        self._update_status_bar()

    def select_by_regex(self, pattern):
        return self.selection.select_by_regex(pattern)

    def select_related(self, depth=1):
        return self.selection.select_related(depth)

    def select_by_position_type(self, fixed=True):
        """Select nodes that are (fixed) or are not in the current history entry"""
        return self.selection.select_by_position_type(fixed, self.history_manager.current())

    def set_search_selection_mode(self, enabled):
        self.settings.update(search_selection_mode=bool(enabled))
        self._save_config()

    # ========================================
    # Arrangement
    # ========================================

    def move_selected(self, dx, dy):
        return self.engine.move(self.selection.ids, dx, dy)

    def scale_selected(self, ratio):
        return self.engine.scale_around_centroid(self.selection.ids, ratio)

    def align_selected(self, axis, extremum):
        return self.engine.align_selected(self.selection.ids, axis, extremum)

    def arrange_selected_in_rings(self, radius=None):
        """Arrange the selection in rings; radius defaults to the configured maximum"""
        if radius is None:
            radius = self.settings.max_arrange_circle_radius
        spec = ArrangementSpec(
            ring_classifier=substring_classifier(self.settings.inner_ring_substrings),
            radius=radius or None,
        )
        return self.engine.arrange_in_rings(self.selection.ids, spec)

    def unlock_selected(self):
        return self.engine.unlock(self.selection.ids)

    def run_simulation(self):
        self.engine.run_simulation()
        notify("Graph simulation running.")

    def stop_simulation(self):
        self.engine.stop_simulation()
        notify("Graph simulation stopped.")

    # ========================================
    # Clipboard
    # ========================================

    def copy_layout_prompt(self):
        return self.clipboard_actions.copy_selection(include_prompt=True)

    def paste_positions(self):
        return self.clipboard_actions.paste_positions()

    # ========================================
    # Teardown
    # ========================================

    def dispose(self):
        """Stop timers and drop listeners; the controller must not be used afterwards"""
        self.history_manager.dispose()
        self.settings.remove_listener(self._on_setting_changed)
        self.selection.remove_listener(self._on_selection_changed)
        self._rect_start = None
        self._logger.debug("Graph view controller disposed")
