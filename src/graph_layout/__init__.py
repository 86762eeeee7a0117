"""
Graph Layout Engine

Position snapshots, undo history, node selection and geometric arrangement
for interactive node-link graph views.
"""

__version__ = "1.0.0"
