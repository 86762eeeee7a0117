"""
Graph Layout Engine - Services

Snapshot storage, selection queries, arrangement geometry and the renderer
adapter contract.
"""

from .renderer_gateway import RendererGateway
from .headless_renderer import HeadlessRenderer
from .snapshot_store import SnapshotStore, SnapshotStoreError
from .selection import SelectionManager, Rect
from .arrangement import ArrangementEngine

__all__ = [
    'RendererGateway', 'HeadlessRenderer',
    'SnapshotStore', 'SnapshotStoreError',
    'SelectionManager', 'Rect',
    'ArrangementEngine',
]
