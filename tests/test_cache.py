import json

import pytest

from wiki_lib.cache import CacheStore
from wiki_lib.errors import CacheCorruptError
from wiki_lib.models import ModDatabase, ModInfo


def sample_db():
    mod = ModInfo(
        name='Cryptid',
        description='An expansive content mod with Jokers 🃏',
        author='MathIsFun_',
        version='0.5.2',
        github_url='https://github.com/MathIsFun0/Cryptid',
        wiki_url='https://balatromods.miraheze.org/wiki/Cryptid',
        category='Content Mods',
        dependencies=['Talisman'],
    )
    return ModDatabase(mods={'Cryptid': mod}, categories={'Content Mods': ['Cryptid'], 'API Mods': []},
                       last_updated='2026-10-19T12:00:00+00:00')


def test_load_or_create_without_file_returns_empty(tmp_path):
    store = CacheStore(tmp_path / 'missing' / 'mods.json')
    db = store.load_or_create()
    assert db.mods == {}
    assert db.categories == {}
    assert db.last_updated


def test_save_creates_directories_and_loads_back(tmp_path):
    store = CacheStore(tmp_path / 'nested' / 'dir' / 'mods.json')
    store.save(sample_db())

    loaded = store.load_or_create()
    assert loaded.to_dict() == sample_db().to_dict()
    assert list(loaded.categories) == ['Content Mods', 'API Mods']


def test_saved_file_is_readable_json(tmp_path):
    store = CacheStore(tmp_path / 'mods.json')
    store.save(sample_db())

    text = store.path.read_text(encoding='utf-8')
    assert '\n  "mods": {' in text
    assert '🃏' in text
    data = json.loads(text)
    assert set(data) == {'mods', 'categories', 'last_updated'}
    assert data['mods']['Cryptid']['github_url'] == 'https://github.com/MathIsFun0/Cryptid'


def test_save_overwrites_and_leaves_no_temp_files(tmp_path):
    store = CacheStore(tmp_path / 'mods.json')
    store.save(sample_db())
    store.save(ModDatabase(last_updated='2026-10-20T00:00:00+00:00'))

    assert store.load_or_create().mods == {}
    assert [p.name for p in tmp_path.iterdir()] == ['mods.json']


@pytest.mark.parametrize('content', [
    '{not json',
    '[]',
    '{"mods": {}, "categories": {}}',
    '{"mods": [], "categories": {}, "last_updated": "x"}',
    '{"mods": {}, "categories": {"Joker Mods": ["Ghost"]}, "last_updated": "x"}',
])
def test_corrupt_cache_raises(tmp_path, content):
    path = tmp_path / 'mods.json'
    path.write_text(content, encoding='utf-8')

    with pytest.raises(CacheCorruptError) as excinfo:
        CacheStore(path).load_or_create()
    assert excinfo.value.path == path
    # The corrupt file is left in place for inspection
    assert path.read_text(encoding='utf-8') == content


def test_cache_with_mismatched_category_is_corrupt(tmp_path):
    data = sample_db().to_dict()
    data['categories'] = {'Joker Mods': ['Cryptid']}
    path = tmp_path / 'mods.json'
    path.write_text(json.dumps(data), encoding='utf-8')

    with pytest.raises(CacheCorruptError):
        CacheStore(path).load_or_create()


def test_unopenable_cache_raises(tmp_path):
    path = tmp_path / 'mods.json'
    path.mkdir()

    with pytest.raises(CacheCorruptError) as excinfo:
        CacheStore(path).load_or_create()
    assert isinstance(excinfo.value.cause, OSError)
