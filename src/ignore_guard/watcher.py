"""
Watchdog monitor for .gitignore files

Watches workspace folders for pattern file creation, modification, deletion
and moves. Observer threads hand each event to the asyncio loop, where the
guard debounces it and drops cached ignore decisions.
"""

import asyncio
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .constants import PATTERN_FILENAME
from .utils import get_logger

logger = get_logger(__name__)


class PatternFileHandler(FileSystemEventHandler):
    """
    Forwards pattern file events to a callback on the event loop
    """

    def __init__(self, loop: asyncio.AbstractEventLoop,
                 on_change_callback: Callable[[str], None],
                 pattern_filename: str = PATTERN_FILENAME):
        """
        Args:
            loop: Event loop that runs the callback
            on_change_callback: Called with the changed pattern file path
            pattern_filename: File name to react to
        """
        super().__init__()
        self.loop = loop
        self.on_change_callback = on_change_callback
        self.pattern_filename = pattern_filename

    def _is_pattern_file(self, path) -> bool:
        return Path(str(path)).name == self.pattern_filename

    def _should_process_event(self, event: FileSystemEvent) -> bool:
        return not event.is_directory and self._is_pattern_file(event.src_path)

    def _dispatch(self, path, action: str):
        path = str(path)
        logger.info(f"Detected {action} of {self.pattern_filename}: {path}")
        if self.loop.is_closed():
            logger.debug(f"Event loop closed, dropping event for {path}")
            return
        self.loop.call_soon_threadsafe(self.on_change_callback, path)

    def on_created(self, event: FileSystemEvent):
        if self._should_process_event(event):
            self._dispatch(event.src_path, "creation")

    def on_modified(self, event: FileSystemEvent):
        if self._should_process_event(event):
            self._dispatch(event.src_path, "change")

    def on_deleted(self, event: FileSystemEvent):
        if self._should_process_event(event):
            self._dispatch(event.src_path, "deletion")

    def on_moved(self, event: FileSystemEvent):
        if event.is_directory:
            return
        dest_path = getattr(event, 'dest_path', None)
        if self._is_pattern_file(event.src_path):
            self._dispatch(event.src_path, "move")
        if dest_path and dest_path != event.src_path and self._is_pattern_file(dest_path):
            self._dispatch(dest_path, "move")


class PatternFileMonitor:
    """
    Owns the watchdog observer for the workspace folders
    """

    def __init__(self, on_change_callback: Callable[[str], None],
                 recursive: bool = True,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        self.on_change_callback = on_change_callback
        self.recursive = recursive
        self.loop = loop
        self._observer: Optional[Observer] = None
        self._handler: Optional[PatternFileHandler] = None
        self._watched_paths: Set[Path] = set()

    def start(self, paths: Iterable):
        """
        Start monitoring for changes

        Args:
            paths: Directories to watch
        """
        if self._observer is not None:
            logger.warning("Monitor already running")
            return

        loop = self.loop or asyncio.get_running_loop()
        self._handler = PatternFileHandler(loop, self.on_change_callback)
        self._observer = Observer()

        for path in paths:
            path_obj = Path(path).resolve()
            if path_obj.is_dir():
                self._observer.schedule(self._handler, str(path_obj), recursive=self.recursive)
                self._watched_paths.add(path_obj)
                logger.info(f"Watching directory: {path_obj}")
            else:
                logger.warning(f"Path does not exist or is not a directory: {path}")

        self._observer.start()
        logger.info("Pattern file monitor started")

    def stop(self):
        """Stop monitoring for changes"""
        if self._observer is None:
            logger.debug("Monitor not running")
            return

        self._observer.stop()
        self._observer.join()
        self._observer = None
        self._handler = None
        self._watched_paths.clear()
        logger.info("Pattern file monitor stopped")

    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def get_watched_paths(self) -> List[str]:
        return [str(p) for p in self._watched_paths]

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
