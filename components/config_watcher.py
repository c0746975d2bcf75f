"""Notice edits to the config file while the supervisor is running."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class ConfigFileEventHandler(FileSystemEventHandler):
    """Forward changes to a single file back to the asyncio loop."""

    def __init__(
        self,
        path: Path,
        loop: asyncio.AbstractEventLoop,
        callback: Callable[[], None],
    ) -> None:
        super().__init__()
        self.path = path.resolve()
        self.loop = loop
        self.callback = callback

    def on_created(self, event):
        if not event.is_directory:
            self._handle_event(event.src_path)

    def on_modified(self, event):
        if not event.is_directory:
            self._handle_event(event.src_path)

    def on_moved(self, event):
        # Editors that save through a temp file show up as a move onto the target.
        if not event.is_directory:
            self._handle_event(getattr(event, "dest_path", None) or event.src_path)

    def _handle_event(self, raw_path) -> None:
        if not raw_path:
            return
        if isinstance(raw_path, bytes):
            raw_path = raw_path.decode(errors="replace")
        try:
            resolved = Path(raw_path).expanduser().resolve()
        except OSError:
            return
        if resolved != self.path:
            return
        if self.loop.is_closed():
            return
        logger.debug("Config file changed: %s", resolved)
        self.loop.call_soon_threadsafe(self.callback)


class ConfigWatcher:
    """Run a watchdog observer on the directory holding the config file."""

    def __init__(self, path: Path, callback: Callable[[], None]) -> None:
        self.path = Path(path).expanduser().resolve()
        self.callback = callback
        self._observer: Optional[Observer] = None

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        if self._observer is not None:
            return
        loop = loop or asyncio.get_running_loop()
        directory = self.path.parent
        if not directory.is_dir():
            logger.warning("Cannot watch config outside an existing directory: %s", self.path)
            return

        handler = ConfigFileEventHandler(self.path, loop, self.callback)
        observer = Observer()
        observer.schedule(handler, str(directory), recursive=False)
        observer.start()
        self._observer = observer
        logger.info("Watching %s for changes", self.path)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=1)
        self._observer = None
