"""
Graph Layout Engine - Constants and Configuration

This module contains all constant values used throughout the engine:
- Snapshot storage naming
- Undo/redo history limits and debounce timing
- Arrangement geometry defaults (ring radii, triangle side)
- Simulation pulse strengths sent to the renderer
- Default settings for a graph view
"""

# ======================================================================
# SNAPSHOT STORAGE
# ======================================================================

# Folder (relative to the storage root) holding one JSON file per snapshot
POSITION_HISTORY_DIR = 'position-history'
SNAPSHOT_FILE_SUFFIX = '.json'

# Key used when a snapshot key normalizes to an empty string
NULL_SNAPSHOT_KEY = 'null'

# Characters that may not appear in a storage identifier
RESERVED_KEY_CHARACTERS = r'[/\\:*?"<>|, ]'

# Display format for timestamp keys in a history menu
SNAPSHOT_LABEL_FORMAT = '%Y-%m-%d %H:%M:%S'

# ======================================================================
# UNDO / REDO HISTORY
# ======================================================================

HISTORY_MAX_ENTRIES = 100
HISTORY_DEBOUNCE_MS = 300

# ======================================================================
# ARRANGEMENT GEOMETRY
# ======================================================================

# Equilateral triangle used for 3-node arrangements
DEFAULT_TRIANGLE_SIDE = 150.0
TRIANGLE_ANGLE_OFFSET_DEG = -30.0
TRIANGLE_ANGLE_STEP_DEG = 60.0

# Concentric rings
DEFAULT_MIN_OUTER_RADIUS = 100.0
DEFAULT_MIN_INNER_RADIUS = 50.0
DEFAULT_INNER_RADIUS_RATIO = 0.6
ABSOLUTE_MIN_RADIUS = 10.0
RING_RADIUS_GAP = max(ABSOLUTE_MIN_RADIUS, 20.0)

# Points closer than this to the center are ignored when estimating a radius
MIN_RADIUS_SAMPLE_DISTANCE = 0.0001
# Rings with a radius below this are left untouched
MIN_DISTRIBUTABLE_RADIUS = 0.001

INNER_RING_START_ANGLE_DEG = -90.0
OUTER_RING_START_ANGLE_DEG = 0.0

# Drags smaller than this on both axes do not move co-selected nodes
DRAG_DEADZONE = 0.1

# Dropped nodes snap to multiples of this when snap-to-grid is on
GRID_SIZE = 500.0

# ======================================================================
# SIMULATION PULSES
# ======================================================================
# Alpha values sent with {run: True, alpha_target: 0} after a mutation

PULSE_ALPHA_DEFAULT = 1.0
PULSE_ALPHA_DRAG = 0.3
PULSE_ALPHA_IMPORT = 0.1
PULSE_ALPHA_RUN = 2.0
PULSE_ALPHA_DECAY_RUN = 0.0228
PULSE_ALPHA_STOP = 0.0

# ======================================================================
# DEFAULT SETTINGS
# ======================================================================

DEFAULT_INNER_RING_SUBSTRINGS = ['rabbit', 'redis', 'rmq', 'postg']
DEFAULT_TRACKED_METADATA_KEYS = ['cluster', 'namespace', 'service']
DEFAULT_SELECTION_WIDTH = 100
DEFAULT_MAX_ARRANGE_CIRCLE_RADIUS = 200

SETTINGS_FILE_NAME = 'settings.json'

# ======================================================================
# CLIPBOARD
# ======================================================================

LAYOUT_PROMPT = """
You will receive a JSON object describing nodes in a graph.

Each key is a node ID (e.g., "nodes/service-A.md").
Each value contains:
\t- x, y: coordinates of the node on a 2D canvas.
\t- color: it is the group color the node belongs to.
\t- links: relationships with other nodes (forward and reverse).
\t- metadata: additional meta info.

Your task:
\t1. Analyze the positions and link structure of all nodes.
\t2. Rearrange the nodes to improve clarity of the layout.
\t3. Try to group related nodes closer together, but avoid placing more than two connected nodes in a straight line, as this causes overlapping or confusing link lines.

Constraints:
\t- Preserve relative groupings.
\t- Prioritize minimal edge crossings against node proximity.
\t- Keep the new positions within the current bounding box of all nodes. You may extend the box by up to +/-500 units if necessary.
\t- Do not remove or modify any fields other than the x and y values.
\t- Your response must be a JSON object in the same structure, with only updated x and y values for each node.
\t- Do not include any explanation, just return the modified JSON.
\t- Return only x and y fields.

"""
