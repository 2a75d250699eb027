"""Watching a file or a directory for files closed after writing."""

from __future__ import annotations

import logging
import os
import queue
import threading
from typing import Callable

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

log = logging.getLogger(__name__)

# pause before trying to set a watch again
_RETRY_DELAY = 0.001
# how long to wait for an event before checking the stop flag
_POLL_INTERVAL = 0.05


class _ClosedHandler(FileSystemEventHandler):
    def __init__(self, accept: Callable[[str], str | None], events: queue.Queue) -> None:
        super().__init__()
        self._accept = accept
        self._events = events

    def on_closed(self, event) -> None:
        if event.is_directory:
            return
        path = self._accept(os.fsdecode(event.src_path))
        if path is not None:
            self._events.put(path)


def _start_observer(directory: str, handler: _ClosedHandler):
    observer = Observer()
    observer.schedule(handler, directory, recursive=False)
    observer.start()
    return observer


def _watch(directory: str, accept, process, stop_event) -> int:
    stop = stop_event if stop_event is not None else threading.Event()
    events: queue.Queue = queue.Queue()
    handler = _ClosedHandler(accept, events)
    observer = None
    processed = 0
    try:
        while not stop.is_set():
            if observer is None or not observer.is_alive():
                if observer is not None:
                    observer.stop()
                    observer = None
                try:
                    observer = _start_observer(directory, handler)
                except OSError as exc:
                    log.debug("can't watch %s: %s", directory, exc)
                    stop.wait(_RETRY_DELAY)
                    continue
            try:
                path = events.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            if process is not None:
                process(path)
            processed += 1
    finally:
        if observer is not None:
            observer.stop()
            observer.join()
    return processed


def watch_file(name, process, stop_event=None) -> int:
    """Call `process(name)` each time the file is closed after writing.

    Runs until `stop_event` is set and returns the amount of changes handled.
    """
    if not name:
        raise ValueError("Need filename")
    name = os.fspath(name)
    target = os.path.abspath(name)
    directory = os.path.dirname(target) or os.curdir

    def accept(path: str) -> str | None:
        return name if os.path.abspath(path) == target else None

    return _watch(directory, accept, process, stop_event)


def watch_directory(name, process, stop_event=None) -> int:
    """Call `process(path)` for each file closed after writing in the directory.

    The path handed over is the directory name joined with the file name.
    Runs until `stop_event` is set and returns the amount of files handled.
    """
    if not name:
        raise ValueError("Need directory name")
    name = os.fspath(name)
    if len(name) > 1 and name.endswith("/"):
        name = name[:-1]
    directory = os.path.abspath(name)

    def accept(path: str) -> str | None:
        if os.path.dirname(os.path.abspath(path)) != directory:
            return None
        return f"{name}/{os.path.basename(path)}"

    return _watch(directory, accept, process, stop_event)