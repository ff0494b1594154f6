"""
Unit tests for the layered settings store.

Tests cascade merging and the snapshot stream. Changes are signalled through
notify_changed() directly so the tests do not depend on filesystem event
timing.
"""

import asyncio

import pytest

from codestats.services.settings_store import LayeredSettingsStore, SettingsChangeHandler


class FakeEvent:
    def __init__(self, src_path, is_directory=False, dest_path=None):
        self.src_path = str(src_path)
        self.dest_path = str(dest_path) if dest_path else None
        self.is_directory = is_directory


class TestLayeredSettingsStore:
    """Test the LayeredSettingsStore class."""

    @pytest.mark.unit
    def test_later_layers_override_earlier_ones(self, settings_files, write_settings):
        global_file, org_file, user_file = settings_files
        write_settings(global_file, {"codeStatsInsights.query": "repo:global", "a": 1})
        write_settings(user_file, {"codeStatsInsights.query": "repo:user"})

        snapshot = LayeredSettingsStore(settings_files).get()

        assert dict(snapshot) == {"codeStatsInsights.query": "repo:user", "a": 1}

    @pytest.mark.unit
    def test_snapshot_is_read_only(self, settings_files, write_settings):
        write_settings(settings_files[0], {"a": 1})
        snapshot = LayeredSettingsStore(settings_files).get()

        with pytest.raises(TypeError):
            snapshot["a"] = 2

    @pytest.mark.unit
    def test_invalid_layers_count_as_empty(self, settings_files, write_settings):
        settings_files[0].write_text("{not json", encoding="utf-8")
        settings_files[1].write_text("[1, 2, 3]", encoding="utf-8")
        write_settings(settings_files[2], {"b": 2})

        assert dict(LayeredSettingsStore(settings_files).get()) == {"b": 2}

    @pytest.mark.unit
    def test_missing_files_give_empty_snapshot(self, settings_files):
        assert dict(LayeredSettingsStore(settings_files).get()) == {}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stream_starts_empty_then_current(self, settings_files, write_settings):
        write_settings(settings_files[0], {"a": 1})
        store = LayeredSettingsStore(settings_files, debounce=0)
        stream = store.snapshots()

        assert dict(await stream.__anext__()) == {}
        assert dict(await stream.__anext__()) == {"a": 1}

        store.stop()
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stream_emits_changes(self, settings_files, write_settings):
        write_settings(settings_files[0], {"a": 1})
        store = LayeredSettingsStore(settings_files, debounce=0)
        stream = store.snapshots()
        await stream.__anext__()
        await stream.__anext__()

        write_settings(settings_files[2], {"b": 2})
        store.notify_changed()

        snapshot = await asyncio.wait_for(stream.__anext__(), timeout=2)
        assert dict(snapshot) == {"a": 1, "b": 2}
        store.stop()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stream_skips_unchanged_cascade(self, settings_files, write_settings):
        write_settings(settings_files[0], {"a": 1})
        store = LayeredSettingsStore(settings_files, debounce=0)
        stream = store.snapshots()
        await stream.__anext__()
        await stream.__anext__()

        pending = asyncio.ensure_future(stream.__anext__())
        store.notify_changed()
        await asyncio.sleep(0.05)
        assert not pending.done()

        write_settings(settings_files[0], {"a": 2})
        store.notify_changed()

        snapshot = await asyncio.wait_for(pending, timeout=2)
        assert dict(snapshot) == {"a": 2}
        store.stop()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_start_and_stop_watcher(self, settings_files, write_settings):
        write_settings(settings_files[0], {"a": 1})
        store = LayeredSettingsStore(settings_files)

        store.start()
        assert store.is_running is True
        store.stop()

        assert store.is_running is False


class TestSettingsChangeHandler:
    """Test filtering of filesystem events."""

    @pytest.mark.unit
    def test_only_cascade_files_trigger_changes(self, settings_files, temp_dir):
        calls = []
        store = LayeredSettingsStore(settings_files)
        store.notify_changed = lambda: calls.append(True)
        handler = SettingsChangeHandler(store)

        handler.on_modified(FakeEvent(settings_files[1]))
        handler.on_created(FakeEvent(temp_dir / "unrelated.json"))
        handler.on_deleted(FakeEvent(temp_dir, is_directory=True))
        handler.on_moved(FakeEvent(temp_dir / "user.json.tmp", dest_path=settings_files[2]))

        assert len(calls) == 2
