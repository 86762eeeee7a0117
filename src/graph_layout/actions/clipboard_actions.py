"""Clipboard operations - copy node layouts out, paste positions back in"""
import json
import logging
import math

from PyQt5.QtWidgets import QApplication

from graph_layout.constants import LAYOUT_PROMPT, PULSE_ALPHA_IMPORT
from graph_layout.models.position import coordinate_from_entry
from graph_layout.utils.logger import notify


class ClipboardFormatError(ValueError):
    """Clipboard text is not a {node_id: {x, y}} JSON object"""
    pass


class ClipboardActions:
    """Handles clipboard interchange for one graph view"""

    def __init__(self, controller, clipboard=None):
        """Initialize with reference to the graph view controller

        Args:
            controller: The GraphLayoutController owning this view
            clipboard: Object with text()/setText(); defaults to the Qt
                application clipboard
        """
        self._logger = logging.getLogger('ClipboardActions')
        self.controller = controller
        self._clipboard = clipboard

    @property
    def clipboard(self):
        if self._clipboard is not None:
            return self._clipboard
        return QApplication.clipboard()

    # ========================================
    # Export
    # ========================================

    def export_layout(self, node_ids):
        """Build the exported structure for node_ids

        Returns:
            {id: {x, y, color, metadata, links: {forward, reverse}}} with
            integer (floored) coordinates and links limited to exported ids
        """
        gateway = self.controller.gateway
        tracked_keys = self.controller.settings.tracked_metadata_keys

        nodes = [n for n in (gateway.get_node(i) for i in node_ids) if n is not None]
        exported_ids = {n.id for n in nodes}

        layout = {}
        for node in nodes:
            frontmatter = gateway.get_node_metadata(node.id) or {}
            metadata = {key: frontmatter[key] for key in tracked_keys if frontmatter.get(key)}

            adjacency = gateway.get_adjacency(node.id)
            layout[node.id] = {
                'x': math.floor(node.x),
                'y': math.floor(node.y),
                'color': node.color,
                'metadata': metadata,
                'links': {
                    'forward': sorted(i for i in adjacency.forward if i in exported_ids),
                    'reverse': sorted(i for i in adjacency.reverse if i in exported_ids),
                },
            }
        return layout

    def export_text(self, node_ids, include_prompt=False):
        text = json.dumps(self.export_layout(node_ids))
        if include_prompt:
            return LAYOUT_PROMPT + text
        return text

    def copy_selection(self, include_prompt=True):
        """Copy the selected nodes (as a layout prompt by default) to the clipboard

        Returns:
            The copied text, or None when nothing is selected
        """
        node_ids = self.controller.selection.ids
        if not node_ids:
            notify("No nodes selected")
            return None

        text = self.export_text(node_ids, include_prompt=include_prompt)
        self.clipboard.setText(text)

        notify("Prompt copied to clipboard" if include_prompt else f"{len(node_ids)} node(s) copied to clipboard")
        return text

    # ========================================
    # Import
    # ========================================

    def _iter_positions(self, text):
        """Yield (node_id, Vec2) pairs from clipboard JSON, validating as it goes

        Raises:
            ClipboardFormatError: On invalid JSON or a malformed entry
        """
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise ClipboardFormatError(f"Clipboard is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ClipboardFormatError(f"Expected a JSON object keyed by node id, got {type(data).__name__}")

        for node_id, entry in data.items():
            try:
                yield node_id, coordinate_from_entry(node_id, entry)
            except ValueError as e:
                raise ClipboardFormatError(str(e)) from e

    def import_text(self, text):
        """Pin every node listed in text at its {x, y}, then pulse and commit

        Entries before a malformed one have already been sent when the
        error is raised.

        Returns:
            True if at least one position was applied

        Raises:
            ClipboardFormatError: On invalid JSON or a malformed entry
        """
        return self.controller.engine.apply_positions(
            self._iter_positions(text),
            alpha=PULSE_ALPHA_IMPORT,
            description="Paste positions",
        )

    def paste_positions(self):
        """Apply node positions from the clipboard"""
        try:
            applied = self.import_text(self.clipboard.text())
        except ClipboardFormatError as e:
            self._logger.warning(f"Clipboard import failed: {e}")
            notify("Clipboard doesn't contain valid JSON.")
            return False

        notify("JSON read from clipboard.")
        return applied
