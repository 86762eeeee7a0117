"""
Tests for SnapshotStore and snapshot keys.

Covers:
- Save/load round trip and merge with the previous active snapshot
- On-disk format (node-id sorted {x, y}, one file per key)
- Missing and malformed snapshots
- Folder auto-creation and failure
- Key normalization, timestamp keys and menu labels
"""
import json
import re
import pytest

from graph_layout.models.position import GraphNode, Vec2
from graph_layout.services.snapshot_store import (
    SnapshotStore, SnapshotStoreError, normalize_key, snapshot_label, timestamp_key,
)


# ══════════════════════════════════════════════════════════════════════════
# Save / load
# ══════════════════════════════════════════════════════════════════════════

class TestSaveLoad:

    def test_round_trip(self, store):
        positions = {'a': Vec2(1, 2), 'b': Vec2(-3.5, 4.25)}
        key = store.save('first', positions)
        assert key == 'first'
        assert store.load('first') == positions

    def test_merge_fills_from_previous(self, store):
        store.save('prev', {'a': Vec2(1, 1), 'b': Vec2(2, 2)})
        store.save('next', {'a': Vec2(9, 9)}, previous_key='prev')
        assert store.load('next') == {'a': Vec2(9, 9), 'b': Vec2(2, 2)}

    def test_merge_does_not_touch_previous(self, store):
        store.save('prev', {'a': Vec2(1, 1), 'b': Vec2(2, 2)})
        store.save('next', {'a': Vec2(9, 9)}, previous_key='prev')
        assert store.load('prev') == {'a': Vec2(1, 1), 'b': Vec2(2, 2)}

    def test_merge_with_unknown_previous(self, store):
        store.save('next', {'a': Vec2(9, 9)}, previous_key='does-not-exist')
        assert store.load('next') == {'a': Vec2(9, 9)}

    def test_accepts_dicts_and_nodes(self, store):
        store.save('mixed', {
            'a': {'x': 1, 'y': 2},
            'b': GraphNode(id='b', x=3, y=4),
        })
        assert store.load('mixed') == {'a': Vec2(1, 2), 'b': Vec2(3, 4)}

    def test_file_is_sorted_and_indented(self, store):
        store.save('sorted', {'c': Vec2(3, 3), 'a': Vec2(1, 1), 'b': Vec2(2, 2)})
        text = store.path_for('sorted').read_text(encoding='utf-8')
        data = json.loads(text)
        assert list(data) == ['a', 'b', 'c']
        assert data['a'] == {'x': 1.0, 'y': 1.0}
        assert '\n  "a"' in text

    def test_add_snapshot_uses_timestamp_key(self, store):
        key = store.add_snapshot({'a': Vec2(0, 0)})
        assert re.match(r'^\d{4}-\d{2}-\d{2}T\d{2}_\d{2}_\d{2}\.\d{3}Z$', key)
        assert store.exists(key)


# ══════════════════════════════════════════════════════════════════════════
# Missing / malformed data
# ══════════════════════════════════════════════════════════════════════════

class TestMissingAndMalformed:

    def test_load_missing_returns_empty(self, store):
        assert store.load('nothing') == {}

    def test_load_malformed_json(self, store, caplog):
        store.save('good', {'a': Vec2(1, 1)})
        store.path_for('broken').write_text('{not json', encoding='utf-8')
        assert store.load('broken') == {}
        assert 'malformed' in caplog.text

    def test_load_malformed_entry(self, store):
        store.save('good', {'a': Vec2(1, 1)})
        store.path_for('bad').write_text(json.dumps({'a': {'x': 'one', 'y': 2}}), encoding='utf-8')
        assert store.load('bad') == {}

    def test_folder_created_on_save(self, tmp_path):
        folder = tmp_path / 'nested' / 'position-history'
        store = SnapshotStore(folder)
        store.save('k', {'a': Vec2(0, 0)})
        assert folder.is_dir()
        assert (folder / 'k.json').is_file()

    def test_folder_creation_failure(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('not a folder', encoding='utf-8')
        store = SnapshotStore(blocker / 'position-history')

        with pytest.raises(SnapshotStoreError):
            store.save('k', {'a': Vec2(0, 0)})
        assert store.load('k') == {}
        assert store.list_keys() == []


# ══════════════════════════════════════════════════════════════════════════
# Keys
# ══════════════════════════════════════════════════════════════════════════

class TestKeys:

    def test_iso_timestamp_is_canonical(self):
        assert normalize_key('2024-01-02T03:04:05.678Z') == '2024-01-02T03_04_05.678Z'

    def test_offset_timestamp_converted_to_utc(self):
        assert normalize_key('2024-01-02T03:04:05+02:00') == '2024-01-02T01_04_05.000Z'

    def test_reserved_characters_replaced(self):
        assert normalize_key('a/b:c d') == 'a_b_c_d'

    def test_empty_key_is_null(self):
        assert normalize_key('') == 'null'
        assert normalize_key(None) == 'null'

    @pytest.mark.parametrize('key', [
        '2024-01-02T03:04:05.678Z', 'plain', 'a/b\\c', '', '2024-01-02',
    ])
    def test_normalize_is_idempotent(self, key):
        once = normalize_key(key)
        assert normalize_key(once) == once

    def test_equivalent_timestamps_share_a_file(self, store):
        store.save('2024-01-02T03:04:05.000Z', {'a': Vec2(1, 1)})
        assert store.load('2024-01-02T05:04:05+02:00') == {'a': Vec2(1, 1)}

    def test_timestamp_key_is_normalized(self):
        key = timestamp_key()
        assert normalize_key(key) == key

    def test_label_for_timestamp_key(self):
        label = snapshot_label('2024-01-02T03_04_05.678Z')
        assert re.match(r'^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$', label)

    def test_label_for_plain_key(self):
        assert snapshot_label('my-layout') == 'my-layout'

    def test_history_menu_keys_newest_first(self, store):
        store.save('2024-01-01T00:00:00.000Z', {'a': Vec2(0, 0)})
        store.save('2024-03-01T00:00:00.000Z', {'a': Vec2(0, 0)})
        store.save('', {'a': Vec2(0, 0)})  # stored as 'null'
        assert store.history_menu_keys() == [
            '2024-03-01T00_00_00.000Z',
            '2024-01-01T00_00_00.000Z',
        ]
        assert 'null' in store.list_keys()
