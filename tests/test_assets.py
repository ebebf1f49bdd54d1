"""
Unit tests for packer/assets.py - Asset and AssetStore.
"""
import pytest
from pydantic import ValidationError

from packer.assets import Asset, AssetStore


class RecordingScheduler:
    """Stands in for the Scheduler and remembers what was scheduled."""

    def __init__(self):
        self.tasks = []

    def schedule(self, task):
        self.tasks.append(task)


@pytest.fixture
def scheduler():
    return RecordingScheduler()


@pytest.fixture
def store(scheduler):
    processed = []

    async def process(asset):
        processed.append(asset)

    return AssetStore(scheduler, process)


class TestAsset:
    """Tests for the Asset record."""

    def test_new_asset_is_unprocessed(self):
        """Code and dependencies are empty until attached."""
        asset = Asset(id=0, path='/src/main.py')
        assert asset.processed is False
        assert asset.dependency_map == {}

    def test_attach_once(self):
        """attach() records results exactly once."""
        asset = Asset(id=0, path='/src/main.py')
        asset.attach('x = 1', {'.a': 1}, ['annotations'])
        assert asset.processed is True
        assert asset.dependency_map == {'.a': 1}
        assert asset.future_features == ['annotations']
        with pytest.raises(RuntimeError):
            asset.attach('x = 2', {})

    def test_negative_id_rejected(self):
        """Ids are non-negative."""
        with pytest.raises(ValidationError):
            Asset(id=-1, path='/src/main.py')


class TestAssetStore:
    """Tests for id assignment and deduplication."""

    def test_first_asset_is_zero(self, store):
        """The first created asset gets id 0."""
        assert store.get_or_create('/src/main.py').id == 0

    def test_ids_increase_in_creation_order(self, store):
        """Each new path gets the next id."""
        ids = [store.get_or_create(f'/src/{name}.py').id for name in 'abc']
        assert ids == [0, 1, 2]

    def test_creation_schedules_processing(self, store, scheduler):
        """Creating an asset schedules exactly one task."""
        store.get_or_create('/src/main.py')
        assert len(scheduler.tasks) == 1

    def test_repeat_path_returns_existing(self, store, scheduler):
        """A known path returns the same asset and schedules nothing."""
        first = store.get_or_create('/src/main.py')
        second = store.get_or_create('/src/main.py')
        assert first is second
        assert len(store) == 1
        assert len(scheduler.tasks) == 1

    def test_lookup_helpers(self, store):
        """get, by_id, membership and iteration agree."""
        a = store.get_or_create('/src/a.py')
        b = store.get_or_create('/src/b.py')
        assert store.get('/src/b.py') is b
        assert store.get('/src/missing.py') is None
        assert store.by_id(0) is a
        assert '/src/a.py' in store
        assert list(store) == [a, b]

    def test_frozen_store_rejects_new_paths(self, store):
        """After freeze() only existing paths can be looked up."""
        existing = store.get_or_create('/src/a.py')
        store.freeze()
        assert store.frozen
        assert store.get_or_create('/src/a.py') is existing
        with pytest.raises(RuntimeError):
            store.get_or_create('/src/b.py')
