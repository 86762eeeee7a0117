"""Configuration management for GraphLayoutController"""

import os
import json
import logging

from graph_layout.models.settings import LayoutSettings
from graph_layout.utils.logger import loggerRaise

logger = logging.getLogger(__name__)


def read_settings(config_file):
	"""Load settings from a JSON file, falling back to defaults"""
	if not config_file or not os.path.exists(config_file):
		return LayoutSettings()
	try:
		with open(config_file, 'r', encoding='utf-8') as f:
			data = json.load(f)
		if not isinstance(data, dict):
			raise ValueError("settings must be a JSON object")
		return LayoutSettings.from_dict(data)
	except (OSError, ValueError, TypeError) as e:
		logger.warning(f"Ignoring unreadable settings file {config_file}: {e}")
		return LayoutSettings()


def write_settings(settings, config_file):
	"""Save settings to a JSON file, creating its directory if needed"""
	config_dir = os.path.dirname(os.fspath(config_file))
	if config_dir:
		os.makedirs(config_dir, exist_ok=True)
	with open(config_file, 'w', encoding='utf-8') as f:
		json.dump(settings.to_dict(), f, indent=2)


class ConfigMixin:
	"""Settings persistence and reaction to settings changes"""

	def _load_config(self):
		"""Apply saved settings from the config file onto the current settings"""
		if not self.config_file:
			return
		saved = read_settings(self.config_file)
		self.settings.update(**saved.to_dict())

	def _save_config(self):
		"""Persist settings through the owner's save callback or the config file"""
		try:
			if self._save_settings_callback is not None:
				self._save_settings_callback(self.settings)
			elif self.config_file:
				write_settings(self.settings, self.config_file)
		except Exception as e:
			loggerRaise(e, "Error saving settings")

	def _on_setting_changed(self, name, value):
		"""Called by LayoutSettings after a value changed"""
		self._logger.debug(f"Setting changed: {name} = {value!r}")

		if name == 'automatically_restore_node_positions' and value:
			# Pin the view to the current history entry straight away
			self.on_data_reloaded()
		elif name in ('inner_ring_substrings', 'tracked_metadata_keys'):
			self._update_status_bar()
