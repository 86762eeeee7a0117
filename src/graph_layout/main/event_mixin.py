"""Graph view event handlers for GraphLayoutController"""

from PyQt5.QtCore import Qt

from graph_layout.services.selection import Rect


class EventMixin:
	"""Keyboard, pointer and drag handlers forwarded by the host view

	Key handlers take anything with key() and modifiers(), such as a
	QKeyEvent. Pointer positions are world coordinates.
	"""

	def on_key_down(self, event):
		"""Handle keyboard shortcuts and modifier state

		Returns:
			True if the event was consumed
		"""
		key = event.key()
		modifiers = event.modifiers()

		# Shift arms rectangle selection
		if modifiers & Qt.ShiftModifier or key == Qt.Key_Shift:
			self._rect_armed = True
		self._alt_pressed = bool(modifiers & Qt.AltModifier) or key == Qt.Key_Alt

		# Ctrl+Z for undo, Ctrl+Shift+Z for redo (Qt maps Cmd to Control on macOS)
		if key == Qt.Key_Z and modifiers & Qt.ControlModifier:
			if modifiers & Qt.ShiftModifier:
				self.redo()
			else:
				self.undo()
			return True

		return False

	def on_key_up(self, event):
		"""Track released modifiers; releasing Shift cancels a pending rectangle"""
		key = event.key()
		modifiers = event.modifiers()

		if key == Qt.Key_Shift or not modifiers & Qt.ShiftModifier:
			self._rect_armed = False
			self._rect_start = None
		self._alt_pressed = bool(modifiers & Qt.AltModifier) and key != Qt.Key_Alt
		return False

	def on_pointer_down(self, pos):
		"""Start a selection rectangle when armed

		Returns:
			True if the pointer event was consumed
		"""
		if not self._rect_armed:
			self._rect_start = None
			return False
		self._rect_start = pos
		return True

	def on_pointer_up(self, pos):
		"""Finish a selection rectangle; Alt removes instead of adds

		Returns:
			The selected ids, or None if no rectangle was being drawn
		"""
		start = self._rect_start
		self._rect_start = None
		if start is None:
			return None

		rect = Rect.from_corners(start, pos)
		ids = self.selection.select_by_region(rect, additive=True, subtractive=self._alt_pressed)
		self._update_status_bar()
		return ids

	def on_node_dragged(self, node_id, start):
		"""Handle the end of a node drag

		Moves the rest of the selection by the same delta and records one
		history step for the gesture. With snap-to-grid on, the dropped node is
		snapped first and the selection follows the snapped delta.

		Args:
			node_id: The dragged node, already at its drop position
			start: Vec2 where the node was when the drag began
		"""
		if self.settings.snap_to_grid:
			self.engine.snap_to_grid(node_id)
		moved = False
		if len(self.selection):
			moved = self.engine.drag_co_selected(self.selection.ids, node_id, start)
		if not moved:
			self.save_state_debounced("Drag node")
		return moved
