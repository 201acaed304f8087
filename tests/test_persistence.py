# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for the record codec, PersistenceController and SettingsStore."""

import json
import os
import stat
import uuid

import pytest

from appmenu import AppItem, AppStore, FolderItem, codec
from appmenu.exceptions import CodecError, PersistenceError
from appmenu.persistence import PersistenceController, SettingsStore, atomic_write_text


@pytest.fixture
def sample_tree():
    safari = AppItem('Safari', '/Applications/Safari.app')
    vim = AppItem('Vïm', '/usr/bin/vim')
    nested = FolderItem('Nested', [vim, FolderItem('Empty')])
    return (FolderItem('Browsers', [safari]), nested, AppItem('Mail', '/Applications/Mail.app'))


def deep_record_text(depth):
    """JSON text of a folder chain nested depth levels deep."""
    opening = ''.join(
        '{"type": "folder", "folder": {"id": "%s", "name": "f", "children": [' % uuid.uuid4()
        for _ in range(depth)
    )
    return '[' + opening + ']}}' * depth + ']'


def deep_folder(depth):
    item = FolderItem('leaf')
    for _ in range(depth):
        item = FolderItem('f', [item])
    return item


class TestCodec:
    """Tests for the tagged-union record format."""

    def test_app_record_shape(self):
        """Test the discriminant plus single payload layout."""
        app = AppItem('Safari', '/Applications/Safari.app')
        assert codec.item_to_dict(app) == {
            'type': 'app',
            'app': {'id': str(app.id), 'name': 'Safari', 'location': '/Applications/Safari.app'},
        }

    def test_folder_record_shape(self):
        """Test that folder children are encoded recursively."""
        app = AppItem('Safari', '/Applications/Safari.app')
        folder = FolderItem('Browsers', [app])
        record = codec.item_to_dict(folder)
        assert record['type'] == 'folder'
        assert set(record) == {'type', 'folder'}
        assert record['folder']['children'] == [codec.item_to_dict(app)]

    def test_round_trip(self, sample_tree):
        """Test that ids, names, locations, nesting and order survive."""
        assert codec.loads(codec.dumps(sample_tree)) == sample_tree

    def test_round_trip_after_store_operations(self):
        """Test a tree built through the store API."""
        with AppStore.in_memory(items=(), debounce=0) as store:
            a = store.add_folder('A')
            b = store.add_folder('B')
            x = store.add_app('/A/x.app', parent_id=a.id)
            store.add_app('/A/y.app', parent_id=a.id, index=0)
            store.move(b.id, a.id, 1)
            store.rename(x.id, 'Ex')
            store.delete(store.add_folder('Gone').id)
            assert codec.loads(codec.dumps(store.items)) == store.items

    def test_missing_children_defaults_to_empty(self):
        """Test that a folder without children decodes as empty."""
        folder_id = uuid.uuid4()
        item = codec.item_from_dict({'type': 'folder', 'folder': {'id': str(folder_id), 'name': 'F'}})
        assert item == FolderItem('F', id=folder_id)

    @pytest.mark.parametrize('record', [
        [],
        {'type': 'widget', 'widget': {}},
        {'type': 'app'},
        {'type': 'app', 'app': {'id': 'not-a-uuid', 'name': 'x', 'location': '/x'}},
        {'type': 'app', 'app': {'id': str(uuid.uuid4()), 'name': 3, 'location': '/x'}},
        {'type': 'folder', 'folder': {'id': str(uuid.uuid4()), 'name': 'F', 'children': {}}},
    ])
    def test_invalid_records(self, record):
        """Test that malformed records raise CodecError."""
        with pytest.raises(CodecError):
            codec.item_from_dict(record)

    def test_loads_invalid_json(self):
        """Test that broken JSON raises CodecError."""
        with pytest.raises(CodecError):
            codec.loads('[{"type": ')
        with pytest.raises(CodecError):
            codec.loads('{"type": "app"}')

    def test_loads_too_deep(self):
        """Test that a record deeper than the recursion limit raises CodecError."""
        with pytest.raises(CodecError):
            codec.loads(deep_record_text(3000))

    def test_loads_duplicate_ids(self):
        """Test that an id used twice, at any depth, is rejected."""
        shared = uuid.uuid4()
        siblings = [
            {'type': 'folder', 'folder': {'id': str(shared), 'name': 'a', 'children': []}},
            {'type': 'folder', 'folder': {'id': str(shared), 'name': 'b', 'children': []}},
        ]
        with pytest.raises(CodecError, match='duplicate'):
            codec.loads(json.dumps(siblings))
        nested = [{'type': 'folder', 'folder': {'id': str(shared), 'name': 'a', 'children': [
            {'type': 'app', 'app': {'id': str(shared), 'name': 'x', 'location': '/x'}},
        ]}}]
        with pytest.raises(CodecError, match='duplicate'):
            codec.loads(json.dumps(nested))

    def test_item_to_dict_rejects_other_types(self):
        """Test encoding a non-item."""
        with pytest.raises(TypeError):
            codec.item_to_dict('Safari')


class TestPersistenceController:
    """Tests for the file-backed adapter."""

    def test_save_and_load(self, tmp_path, sample_tree):
        """Test the durable round trip."""
        controller = PersistenceController(tmp_path / 'appMenu' / 'items.json')
        controller.save(sample_tree)
        assert controller.load() == sample_tree

    def test_file_is_utf8_json(self, tmp_path, sample_tree):
        """Test the on-disk format."""
        path = tmp_path / 'items.json'
        PersistenceController(path).save(sample_tree)
        data = json.loads(path.read_text(encoding='utf-8'))
        assert [record['type'] for record in data] == ['folder', 'folder', 'app']
        assert 'Vïm' in path.read_text(encoding='utf-8')

    def test_load_missing_file(self, tmp_path):
        """Test that no file means no data."""
        assert PersistenceController(tmp_path / 'items.json').load() is None

    def test_load_corrupt_file(self, tmp_path):
        """Test that unparsable data is reported as absent."""
        path = tmp_path / 'items.json'
        path.write_text('{not json', encoding='utf-8')
        assert PersistenceController(path).load() is None

    def test_load_invalid_bytes(self, tmp_path):
        """Test that non UTF-8 content is reported as absent."""
        path = tmp_path / 'items.json'
        path.write_bytes(b'\xff\xfe\x00garbage')
        assert PersistenceController(path).load() is None

    def test_in_memory_mode(self, tmp_path, sample_tree):
        """Test that in-memory mode never touches disk."""
        controller = PersistenceController(tmp_path / 'items.json', in_memory=True)
        controller.save(sample_tree)
        assert controller.load() is None
        assert not (tmp_path / 'items.json').exists()
        assert PersistenceController().in_memory is True

    def test_save_replaces_atomically(self, tmp_path, sample_tree):
        """Test that no temporary files are left behind."""
        path = tmp_path / 'items.json'
        controller = PersistenceController(path)
        controller.save(sample_tree)
        controller.save(sample_tree[:1])
        assert controller.load() == sample_tree[:1]
        assert os.listdir(tmp_path) == ['items.json']

    def test_failed_write_keeps_previous_record(self, tmp_path, sample_tree, monkeypatch):
        """Test that an interrupted save leaves the old file readable."""
        path = tmp_path / 'items.json'
        controller = PersistenceController(path)
        controller.save(sample_tree)

        def broken_replace(src, dst):
            raise OSError("interrupted")

        monkeypatch.setattr(os, 'replace', broken_replace)
        with pytest.raises(PersistenceError):
            controller.save(sample_tree[:1])
        monkeypatch.undo()

        assert controller.load() == sample_tree
        assert os.listdir(tmp_path) == ['items.json']

    def test_unwritable_directory(self, tmp_path):
        """Test that a path below a regular file cannot be written."""
        blocker = tmp_path / 'blocker'
        blocker.write_text('x')
        with pytest.raises(PersistenceError):
            atomic_write_text(blocker / 'items.json', '[]')

    def test_load_too_deep_record(self, tmp_path):
        """Test that an over-nested file is reported as absent."""
        path = tmp_path / 'items.json'
        path.write_text(deep_record_text(3000), encoding='utf-8')
        assert PersistenceController(path).load() is None

    def test_save_too_deep_tree(self, tmp_path):
        """Test that an unencodable tree raises PersistenceError and writes nothing."""
        path = tmp_path / 'items.json'
        with pytest.raises(PersistenceError):
            PersistenceController(path).save((deep_folder(3000),))
        assert not path.exists()

    @pytest.mark.skipif(os.name == 'nt', reason='POSIX permission bits')
    def test_new_file_is_world_readable(self, tmp_path, sample_tree):
        """Test the mode of a freshly created record."""
        path = tmp_path / 'items.json'
        PersistenceController(path).save(sample_tree)
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o644

    @pytest.mark.skipif(os.name == 'nt', reason='POSIX permission bits')
    def test_existing_mode_is_kept(self, tmp_path, sample_tree):
        """Test that a rewrite keeps the previous permission bits."""
        path = tmp_path / 'items.json'
        controller = PersistenceController(path)
        controller.save(sample_tree)
        os.chmod(path, 0o640)
        controller.save(sample_tree[:1])
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o640

    def test_persistence_error_is_oserror(self):
        """Test that PersistenceError can be caught as OSError."""
        assert issubclass(PersistenceError, OSError)


class TestSettingsStore:
    """Tests for the persisted flags."""

    def test_in_memory_settings(self):
        """Test flags without a file."""
        settings = SettingsStore()
        assert settings.get_bool('did_seed_apps') is False
        settings.set_bool('did_seed_apps', True)
        assert settings.get_bool('did_seed_apps') is True

    def test_flag_survives_reload(self, tmp_path):
        """Test that flags are written to disk."""
        path = tmp_path / 'settings.json'
        SettingsStore(path).set_bool('did_seed_apps', True)
        assert SettingsStore(path).get_bool('did_seed_apps') is True
        assert json.loads(path.read_text()) == {'did_seed_apps': True}

    def test_corrupt_settings_ignored(self, tmp_path):
        """Test that unreadable settings start empty."""
        path = tmp_path / 'settings.json'
        path.write_text('[1, 2]')
        assert SettingsStore(path).get_bool('did_seed_apps') is False
        path.write_text('{oops')
        assert SettingsStore(path).get_bool('did_seed_apps') is False


class TestStoreWithFiles:
    """Tests for a store backed by real files."""

    def test_store_persists_and_reloads(self, tmp_path):
        """Test that a second store sees the first store's tree."""
        items_path = tmp_path / 'items.json'
        settings_path = tmp_path / 'settings.json'
        with AppStore(PersistenceController(items_path), SettingsStore(settings_path),
                      seed=False, debounce=60) as store:
            folder = store.add_folder('Tools')
            store.add_app('/Applications/Terminal.app', parent_id=folder.id)
            expected = store.items

        with AppStore(PersistenceController(items_path), SettingsStore(settings_path),
                      seed=False) as reloaded:
            assert reloaded.items == expected

    def test_corrupt_file_falls_back_to_sample_data(self, tmp_path):
        """Test that a failed load does not break startup."""
        items_path = tmp_path / 'items.json'
        items_path.write_text('garbage')
        with AppStore(PersistenceController(items_path), seed=False) as store:
            assert [i.name for i in store.items] == ['Browsers', 'Editors']

    def test_too_deep_file_falls_back_to_sample_data(self, tmp_path):
        """Test that an over-nested record does not break startup."""
        items_path = tmp_path / 'items.json'
        items_path.write_text(deep_record_text(3000), encoding='utf-8')
        with AppStore(PersistenceController(items_path), seed=False) as store:
            assert [i.name for i in store.items] == ['Browsers', 'Editors']

    def test_unencodable_tree_does_not_break_mutations(self, tmp_path):
        """Test that a failed encode is logged and the tree stays in memory."""
        items_path = tmp_path / 'items.json'
        notified = []
        with AppStore(PersistenceController(items_path), items=(deep_folder(3000),),
                      seed=False, debounce=0) as store:
            store.subscribe('menu', notified.append)
            folder = store.add_folder('Tools')
            assert folder.id in [i.id for i in store.items]
            assert notified == [store]
        assert not items_path.exists()
