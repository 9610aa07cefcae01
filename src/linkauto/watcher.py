"""Watchdog-based daemon that re-links input documents when they change."""

from __future__ import annotations

import logging
import signal
import threading
import time
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .config import Config
from .engine import run_link
from .link_state import LinkState

log = logging.getLogger(__name__)

_DEBOUNCE_SECONDS = 2.0


class _InputEventHandler(FileSystemEventHandler):
    """Watches for created or modified JSON input documents."""

    def __init__(
        self,
        config: Config,
        state: LinkState,
        inputs: list[Path],
        *,
        dry_run: bool = False,
    ):
        super().__init__()
        self._config = config
        self._state = state
        self._inputs = inputs
        self._dry_run = dry_run
        self._files = {p.resolve() for p in inputs if not p.is_dir()}
        self._dirs = {p.resolve() for p in inputs if p.is_dir()}
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def _is_input(self, src_path: str) -> bool:
        path = Path(src_path).resolve()
        if path in self._files:
            return True
        return path.suffix == ".json" and path.parent in self._dirs

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if not self._is_input(str(event.src_path)):
            return

        log.debug("%s changed, scheduling link pass in %.1fs", event.src_path, _DEBOUNCE_SECONDS)
        self._schedule_link()

    on_created = on_modified

    def _schedule_link(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(_DEBOUNCE_SECONDS, self._do_link)
            self._timer.daemon = True
            self._timer.start()

    def _do_link(self) -> None:
        try:
            run_link(self._config, self._state, self._inputs, dry_run=self._dry_run)
        except Exception:
            log.error("Link pass failed", exc_info=True)


def watch(
    config: Config,
    state: LinkState,
    inputs: list[Path],
    *,
    dry_run: bool = False,
) -> None:
    """Link the inputs, then keep re-linking on change. Blocks until interrupted."""
    watch_dirs = sorted({(p if p.is_dir() else p.parent).resolve() for p in inputs})
    missing = [d for d in watch_dirs if not d.exists()]
    if not watch_dirs or missing:
        log.error("Input directory does not exist: %s", ", ".join(map(str, missing)) or "(none)")
        raise SystemExit(1)

    # Initial pass on startup
    log.info("Running initial link pass...")
    run_link(config, state, inputs, dry_run=dry_run)

    handler = _InputEventHandler(config, state, inputs, dry_run=dry_run)
    observer = Observer()
    for directory in watch_dirs:
        observer.schedule(handler, str(directory), recursive=False)

    stop_event = threading.Event()

    def _shutdown(signum: int, frame: object) -> None:
        sig_name = signal.Signals(signum).name
        log.info("Received %s, shutting down...", sig_name)
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    observer.start()
    log.info("Watching %d director(ies) for changes (Ctrl+C to stop)", len(watch_dirs))

    try:
        while not stop_event.is_set():
            time.sleep(1)
    finally:
        observer.stop()
        observer.join()
        log.info("Watcher stopped")
