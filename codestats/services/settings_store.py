"""
Layered settings store.

Merges a cascade of JSON settings files (global -> org -> user, later files
win key by key) and streams a fresh snapshot whenever one of them changes.
File changes are picked up with watchdog.
"""

import asyncio
import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from codestats.config import settings

logger = logging.getLogger(__name__)

_STOP = object()


class SettingsChangeHandler(FileSystemEventHandler):
    """Forwards changes of the cascade's files to the store."""

    def __init__(self, store: "LayeredSettingsStore"):
        self.store = store

    def _handle(self, path: str) -> None:
        if Path(path).resolve() in self.store.watched_files:
            logger.debug(f"[SettingsWatcher] Settings file changed: {path}")
            self.store.notify_changed()

    def on_modified(self, event):
        if not event.is_directory:
            self._handle(event.src_path)

    def on_created(self, event):
        if not event.is_directory:
            self._handle(event.src_path)

    def on_deleted(self, event):
        if not event.is_directory:
            self._handle(event.src_path)

    def on_moved(self, event):
        if not event.is_directory:
            self._handle(event.src_path)
            self._handle(event.dest_path)


class LayeredSettingsStore:
    """Settings cascade backed by JSON files, lowest precedence first."""

    def __init__(self, files: Optional[Sequence[Path]] = None, debounce: float = settings.SETTINGS_WATCH_DEBOUNCE):
        """
        Initialize the store.

        Args:
            files: Settings files to merge, lowest precedence first
            debounce: Seconds to wait for a burst of file events to settle
        """
        self.files: List[Path] = [Path(f) for f in (files if files is not None else settings.get_settings_cascade())]
        self.debounce = debounce
        self.observer = None
        self.is_running = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._changes: Optional[asyncio.Queue] = None

    @property
    def watched_files(self) -> set:
        return {f.resolve() for f in self.files}

    def _read_layer(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"[SettingsWatcher] Could not read settings from {path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"[SettingsWatcher] Settings file {path} must contain a JSON object")
            return {}
        return data

    def get(self) -> Mapping[str, Any]:
        """Read and merge the cascade into a read-only snapshot."""
        merged: Dict[str, Any] = {}
        for path in self.files:
            merged.update(self._read_layer(path))
        return MappingProxyType(merged)

    def _ensure_queue(self) -> asyncio.Queue:
        if self._changes is None:
            self._loop = asyncio.get_running_loop()
            self._changes = asyncio.Queue()
        return self._changes

    def notify_changed(self) -> None:
        """Signal that the cascade may have changed. Safe to call from any thread."""
        if self._changes is None or self._loop is None:
            return
        self._loop.call_soon_threadsafe(self._changes.put_nowait, None)

    def start(self) -> None:
        """Start watching the settings files for changes."""
        if self.is_running:
            return

        self._ensure_queue()
        self.observer = Observer()
        handler = SettingsChangeHandler(self)

        watch_dirs = {f.resolve().parent for f in self.files}
        for watch_dir in watch_dirs:
            if watch_dir.exists():
                logger.info(f"[SettingsWatcher] Watching directory: {watch_dir}")
                self.observer.schedule(handler, str(watch_dir), recursive=False)
            else:
                logger.warning(f"[SettingsWatcher] Settings directory does not exist: {watch_dir}")

        self.observer.start()
        self.is_running = True

    def stop(self) -> None:
        """Stop watching and end any running snapshot stream."""
        if self.is_running:
            self.observer.stop()
            self.observer.join()
            self.is_running = False
            logger.info("[SettingsWatcher] Settings watcher stopped")

        if self._changes is not None and self._loop is not None:
            self._loop.call_soon_threadsafe(self._changes.put_nowait, _STOP)

    async def snapshots(self) -> AsyncIterator[Mapping[str, Any]]:
        """
        Stream configuration snapshots.

        Emits an empty snapshot first ("nothing observed yet"), then the
        current cascade, then a new snapshot after each change that alters it.
        """
        changes = self._ensure_queue()

        yield MappingProxyType({})

        last = self.get()
        yield last

        while True:
            item = await changes.get()
            if item is _STOP:
                return

            # Let a burst of writes settle, then read once
            await asyncio.sleep(self.debounce)
            stop = False
            while not changes.empty():
                if changes.get_nowait() is _STOP:
                    stop = True
            if stop:
                return

            current = self.get()
            if dict(current) == dict(last):
                continue
            last = current
            yield current
