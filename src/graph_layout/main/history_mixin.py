"""History management and undo/redo for GraphLayoutController"""

from graph_layout.utils.logger import loggerRaise


class HistoryMixin:
    """Undo/redo system, state management, and status text updates"""

    def _capture_current_state(self):
        """Capture the current node positions for history"""
        return self.gateway.get_positions()

    def _restore_state(self, state):
        """Pin nodes at a snapshot taken from history or the store"""
        if not state:
            return 0

        self._is_applying_history = True
        try:
            return self.engine.restore_positions(state)
        except Exception as e:
            loggerRaise(e, "Error restoring history state")
        finally:
            self._is_applying_history = False
            # Update status after state is fully restored
            self._update_status_bar()

    def _save_state(self, description):
        """Save current positions to history immediately"""
        if self._is_applying_history:
            return  # Don't save state during undo/redo

        self.history_manager.save_state(self._capture_current_state(), description)

    def save_state_debounced(self, description):
        """
        Schedule the current positions to be saved after the debounce delay.
        This keeps a drag or a burst of commands to one undo step.
        """
        if self._is_applying_history:
            return
        self.history_manager.commit(description=description)

    def _on_history_changed(self, can_undo, can_redo):
        """Called when history state changes to update UI"""
        self.can_undo = can_undo
        self.can_redo = can_redo
        # Update status with current action
        self._update_status_bar()

    def _update_status_bar(self):
        """Update status text with current action and selection stats"""
        # Left side: Last action
        current_desc = self.history_manager.get_current_description()
        if current_desc:
            self.status_left = f"Last action: {current_desc}"
        else:
            self.status_left = "Ready"

        # Right side: Selection stats
        self.status_right = self.selection.summary(self.settings.tracked_metadata_keys).status_text()

    def undo(self):
        """Undo the last action"""
        # A pending debounced commit is the newest state; record it first
        self.history_manager.flush()
        state = self.history_manager.undo()
        if state:
            self._restore_state(state)
        return state

    def redo(self):
        """Redo the last undone action"""
        # An edit made after undo starts a new branch; record it so redo has nothing to re-apply
        self.history_manager.flush()
        state = self.history_manager.redo()
        if state:
            self._restore_state(state)
        return state
