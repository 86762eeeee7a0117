"""
Shared fixtures for graph layout engine tests.

Provides a headless renderer loaded with a small sample graph, a temporary
snapshot store, settings, and a graph view controller wired to all of them.
"""
import sys
import os
import pytest

# Qt timers need an application; run it without a display
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

# Ensure src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))


# ── Sample graph ────────────────────────────────────────────────────────

API = 'services/api.md'
AUTH = 'services/auth.md'
POSTGRES = 'db/postgres.md'
RABBIT = 'queue/rabbit.md'
README = 'docs/readme.md'
MISSING = 'missing.md'

SAMPLE_GRAPH = {
    'nodes': [
        {'id': API, 'x': 0, 'y': 0, 'weight': 5, 'color': 1,
         'metadata': {'cluster': 'eu', 'service': 'api'}},
        {'id': AUTH, 'x': 100, 'y': 0, 'weight': 2, 'color': 1,
         'metadata': {'cluster': 'eu', 'namespace': 'auth'}},
        {'id': POSTGRES, 'x': 0, 'y': 100, 'weight': 1, 'color': 2,
         'metadata': {'cluster': 'us'}},
        {'id': RABBIT, 'x': -100, 'y': 0, 'weight': 1, 'color': 2},
        {'id': README, 'x': 300, 'y': 300, 'weight': 0},
    ],
    'links': [
        [API, AUTH],
        [API, POSTGRES],
        [API, RABBIT],
        [API, MISSING],
        [AUTH, POSTGRES],
        [README, API],
    ],
}


class FakeClipboard:
    """Minimal stand-in for QClipboard: just text()/setText()."""

    def __init__(self, text=""):
        self._text = text

    def text(self):
        return self._text

    def setText(self, text):
        self._text = text


@pytest.fixture
def renderer():
    """Headless renderer loaded with the sample graph"""
    from graph_layout.services.headless_renderer import HeadlessRenderer
    return HeadlessRenderer.from_graph_data(SAMPLE_GRAPH)


@pytest.fixture
def store(tmp_path):
    """Snapshot store in a temporary folder"""
    from graph_layout.services.snapshot_store import SnapshotStore
    return SnapshotStore(tmp_path / 'position-history')


@pytest.fixture
def settings():
    from graph_layout.models.settings import LayoutSettings
    return LayoutSettings()


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def notices():
    """Collect user-facing notices instead of logging them"""
    from graph_layout.utils.logger import set_notice_handler
    received = []
    set_notice_handler(received.append)
    yield received
    set_notice_handler(None)


@pytest.fixture
def history(qapp):
    """History manager with a short debounce"""
    from graph_layout.utils.history_manager import HistoryManager
    hm = HistoryManager(debounce_ms=50)
    yield hm
    hm.dispose()


@pytest.fixture
def saved_settings():
    """Records every settings object passed to the save callback"""
    return []


@pytest.fixture
def controller(qapp, renderer, store, settings, clipboard, saved_settings):
    """Graph view controller over the sample graph"""
    from graph_layout.graph_view import GraphLayoutController
    ctrl = GraphLayoutController(
        renderer, store, settings,
        save_settings=lambda s: saved_settings.append(s.to_dict()),
        clipboard=clipboard,
    )
    yield ctrl
    ctrl.dispose()
