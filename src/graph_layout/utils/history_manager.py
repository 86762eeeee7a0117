"""
Undo/Redo History Manager for graph layouts

Keeps an in-memory, linear history of node position snapshots, independent
of the snapshots persisted by SnapshotStore. Bursts of commits (a drag, a
batch of position commands) are coalesced by a single-shot QTimer into one
undo step.
"""

import copy
import logging

from PyQt5.QtCore import QTimer

from graph_layout.constants import HISTORY_DEBOUNCE_MS, HISTORY_MAX_ENTRIES


class HistoryManager:
    """Manages undo/redo history with position snapshots"""

    def __init__(self, max_history=HISTORY_MAX_ENTRIES, debounce_ms=HISTORY_DEBOUNCE_MS, capture=None):
        """
        Initialize the history manager

        Args:
            max_history: Maximum number of snapshots to keep in history
            debounce_ms: Quiet period before a debounced commit is recorded
            capture: Optional callable returning the current snapshot, used
                when commit() is called without one
        """
        self._logger = logging.getLogger('HistoryManager')
        self.max_history = max_history
        self.debounce_ms = debounce_ms
        self.history = []  # List of {'data': snapshot, 'description': str}
        self.current_index = -1  # Current position in history (-1 means no states)
        self._listeners = []  # Callbacks to notify on state changes
        self._capture = capture

        self._pending_snapshot = None
        self._pending_description = None
        self._has_pending = False
        self._disposed = False

        self._commit_timer = QTimer()
        self._commit_timer.setSingleShot(True)
        self._commit_timer.timeout.connect(self._on_commit_timeout)

    # ========================================
    # Recording
    # ========================================

    def commit(self, snapshot=None, description=""):
        """
        Schedule a snapshot to be recorded after the debounce delay.

        Every call restarts the delay; only the last snapshot of a burst is
        recorded. With no snapshot, the capture callable is evaluated when
        the timer fires.

        Args:
            snapshot: Mapping of node id -> Vec2, or None to capture on fire
            description: Optional description of the change
        """
        if self._disposed:
            return

        self._pending_snapshot = copy.deepcopy(snapshot) if snapshot is not None else None
        self._pending_description = description
        self._has_pending = True

        self._commit_timer.stop()
        self._commit_timer.start(self.debounce_ms)

    @property
    def has_pending_commit(self):
        return self._has_pending

    def flush(self):
        """Record a pending debounced commit immediately

        Returns:
            True if a snapshot was recorded
        """
        if not self._has_pending:
            return False
        self._commit_timer.stop()
        return self._on_commit_timeout()

    def _on_commit_timeout(self):
        """Called by timer to record the pending commit (debounced)"""
        if self._disposed or not self._has_pending:
            return False

        snapshot = self._pending_snapshot
        description = self._pending_description
        self._cancel_pending()

        if snapshot is None:
            if self._capture is None:
                self._logger.warning("Debounced commit without snapshot or capture callable ignored")
                return False
            snapshot = self._capture()

        self._push(snapshot, description)
        return True

    def save_state(self, snapshot, description=""):
        """
        Record a snapshot immediately

        A direct save supersedes any pending debounced commit.

        Args:
            snapshot: Mapping of node id -> Vec2
            description: Optional description of the change
        """
        if self._disposed:
            return
        self._commit_timer.stop()
        self._cancel_pending()
        self._push(snapshot, description)

    def _cancel_pending(self):
        self._pending_snapshot = None
        self._pending_description = None
        self._has_pending = False

    def _push(self, snapshot, description):
        # Not at the end of history: drop the redo branch
        if self.current_index < len(self.history) - 1:
            self.history = self.history[:self.current_index + 1]

        self.history.append({
            'data': copy.deepcopy(snapshot),
            'description': description
        })
        self.current_index = len(self.history) - 1

        # Evict oldest entries beyond capacity
        while len(self.history) > self.max_history:
            self.history.pop(0)
            self.current_index -= 1

        self._notify_listeners()

        self._logger.debug(f"State saved: {description} (index: {self.current_index}, total: {len(self.history)})")

    # ========================================
    # Navigation
    # ========================================

    def undo(self):
        """
        Move back one snapshot in history

        At the oldest entry the pointer stays put and that entry is returned
        again, so callers re-apply it.

        Returns:
            The snapshot at the new position, or None if history is empty
        """
        if self.current_index < 0:
            self._logger.debug("Cannot undo - history is empty")
            return None

        self.current_index = self.current_index - 1 if self.current_index > 0 else 0
        entry = self.history[self.current_index]

        self._notify_listeners()

        self._logger.debug(f"Undo to: {entry['description']} (index: {self.current_index})")
        return copy.deepcopy(entry['data'])

    def redo(self):
        """
        Move forward one snapshot in history

        Returns:
            The next snapshot, or None if at end
        """
        if not self.can_redo():
            self._logger.debug("Cannot redo - at end of history")
            return None

        self.current_index += 1
        entry = self.history[self.current_index]

        self._notify_listeners()

        self._logger.debug(f"Redo to: {entry['description']} (index: {self.current_index})")
        return copy.deepcopy(entry['data'])

    def current(self):
        """Copy of the snapshot at the current position, or None"""
        if 0 <= self.current_index < len(self.history):
            return copy.deepcopy(self.history[self.current_index]['data'])
        return None

    def can_undo(self):
        """Check if undo would move to an earlier entry"""
        return self.current_index > 0

    def can_redo(self):
        """Check if redo is available"""
        return self.current_index < len(self.history) - 1

    def clear(self):
        """Clear all history"""
        self._commit_timer.stop()
        self._cancel_pending()
        self.history = []
        self.current_index = -1
        self._notify_listeners()
        self._logger.debug("History cleared")

    def dispose(self):
        """Stop the debounce timer so no late commit reaches a torn-down view"""
        self._commit_timer.stop()
        self._cancel_pending()
        self._listeners = []
        self._disposed = True

    def __len__(self):
        return len(self.history)

    # ========================================
    # Listeners
    # ========================================

    def add_listener(self, callback):
        """
        Add a listener to be notified when history state changes

        Args:
            callback: Function to call when history changes (receives can_undo, can_redo)
        """
        self._listeners.append(callback)

    def remove_listener(self, callback):
        """Remove a listener"""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self):
        """Notify all listeners of history state change"""
        for callback in self._listeners:
            try:
                callback(self.can_undo(), self.can_redo())
            except Exception as e:
                self._logger.error(f"Error notifying listener: {e}")

    def get_current_description(self):
        """Get the description of the current state"""
        if 0 <= self.current_index < len(self.history):
            return self.history[self.current_index]['description']
        return ""
