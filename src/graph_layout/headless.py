"""Headless graph layout tool - CLI entry point.

Inspects and edits a folder of position snapshots without a graph view.
Arrangements run against an in-memory renderer built from a graph file.

Usage:
    python -m graph_layout.headless [--folder DIR] list
    python -m graph_layout.headless [--folder DIR] show <key>
    python -m graph_layout.headless [--folder DIR] import <positions.json> [--previous KEY]
    python -m graph_layout.headless [--folder DIR] arrange <graph.json> [--key KEY] [--select REGEX] [--radius R]

Examples:
    python -m graph_layout.headless list
    python -m graph_layout.headless --folder history/ arrange graph.json --select "^services/" --radius 300
"""

import sys
import os
import json
import argparse
import logging

from graph_layout.models.position import snapshot_from_dict, snapshot_to_dict
from graph_layout.services.arrangement import ArrangementEngine
from graph_layout.services.geometry import ArrangementSpec, substring_classifier
from graph_layout.services.headless_renderer import HeadlessRenderer
from graph_layout.services.selection import SelectionManager
from graph_layout.services.snapshot_store import SnapshotStore, SnapshotStoreError, snapshot_label
from graph_layout.main.config_mixin import read_settings
from graph_layout.utils.path_resolver import get_position_history_dir, get_settings_file
from graph_layout.constants import DEFAULT_INNER_RING_SUBSTRINGS


def _latest_key(store):
    keys = store.history_menu_keys()
    return keys[0] if keys else None


def _cmd_list(store, args):
    keys = store.history_menu_keys()
    if not keys:
        print("No snapshots found.")
        return 0
    # settings.json sits next to the position-history folder
    active = read_settings(get_settings_file(store.folder.parent)).current_positions_history_key
    for key in keys:
        marker = "*" if key == active else " "
        print(f"{marker} {key}  {snapshot_label(key)}  ({len(store.load(key))} nodes)")
    return 0


def _cmd_show(store, args):
    if not store.exists(args.key):
        print(f"Error: No snapshot named {args.key}")
        return 1
    print(json.dumps(snapshot_to_dict(store.load(args.key)), indent=2))
    return 0


def _cmd_import(store, args):
    input_path = os.path.abspath(args.positions_file)
    if not os.path.isfile(input_path):
        print(f"Error: Input file not found: {input_path}")
        return 1

    try:
        with open(input_path, 'r', encoding='utf-8') as f:
            positions = snapshot_from_dict(json.load(f))
    except ValueError as e:
        print(f"Error: {input_path} is not a positions file: {e}")
        return 1

    key = store.add_snapshot(positions, previous_key=args.previous)
    print(f"Imported {len(positions)} position(s) as {key}")
    return 0


def _cmd_arrange(store, args):
    graph_path = os.path.abspath(args.graph_file)
    if not os.path.isfile(graph_path):
        print(f"Error: Graph file not found: {graph_path}")
        return 1

    try:
        renderer = HeadlessRenderer.from_graph_file(graph_path)
    except ValueError as e:
        print(f"Error: {graph_path} is not a graph file: {e}")
        return 1

    engine = ArrangementEngine(renderer)

    # Start from a stored layout so the arrangement builds on it
    base_key = args.key or _latest_key(store)
    if base_key:
        restored = engine.restore_positions(store.load(base_key))
        print(f"Restored {restored} position(s) from {base_key}")

    selection = SelectionManager(renderer)
    if args.select:
        selection.select_by_regex(args.select)
    else:
        selection.replace(n.id for n in renderer.get_live_nodes())

    if not len(selection):
        print("No nodes matched the selection.")
        return 1

    spec = ArrangementSpec(
        ring_classifier=substring_classifier(args.inner or DEFAULT_INNER_RING_SUBSTRINGS),
        radius=args.radius,
    )
    if not engine.arrange_in_rings(selection.ids, spec):
        print(f"Nothing to arrange for {len(selection)} node(s).")
        return 1

    key = store.add_snapshot(renderer.get_positions(), previous_key=base_key)
    print(f"Arranged {len(selection)} node(s), saved as {key}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Inspect and edit graph position snapshots (headless).',
    )
    parser.add_argument(
        '-f', '--folder',
        default=None,
        help='Snapshot folder (one <key>.json per snapshot; default: the position-history folder of the data directory).',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging.',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('list', help='List snapshots, newest first.')

    show_parser = subparsers.add_parser('show', help='Print a snapshot as JSON.')
    show_parser.add_argument('key', help='Snapshot key.')

    import_parser = subparsers.add_parser('import', help='Save a {id: {x, y}} JSON file as a new snapshot.')
    import_parser.add_argument('positions_file', help='Path to the positions JSON file.')
    import_parser.add_argument(
        '--previous',
        default=None,
        help='Snapshot whose positions fill in ids missing from the file.',
    )

    arrange_parser = subparsers.add_parser('arrange', help='Arrange nodes in rings and save a new snapshot.')
    arrange_parser.add_argument('graph_file', help='Path to the graph JSON file.')
    arrange_parser.add_argument(
        '-k', '--key',
        default=None,
        help='Snapshot to start from (default: newest).',
    )
    arrange_parser.add_argument(
        '-s', '--select',
        default=None,
        help='Regex over node ids selecting the nodes to arrange (default: all).',
    )
    arrange_parser.add_argument(
        '-r', '--radius',
        type=float,
        default=None,
        help='Outer ring radius (default: derived from the current layout).',
    )
    arrange_parser.add_argument(
        '--inner',
        action='append',
        default=None,
        help='Substring putting matching ids on the inner ring (repeatable).',
    )

    args = parser.parse_args(argv)

    # Logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    folder = os.path.expanduser(args.folder) if args.folder else get_position_history_dir()
    store = SnapshotStore(os.path.abspath(folder))
    commands = {
        'list': _cmd_list,
        'show': _cmd_show,
        'import': _cmd_import,
        'arrange': _cmd_arrange,
    }

    try:
        return commands[args.command](store, args)
    except SnapshotStoreError as e:
        print(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
