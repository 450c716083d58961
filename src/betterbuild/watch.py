# watch.py
from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from .executor import Executor
from .files import resolve_globs
from .model import ExecutionResult


class Trigger(Protocol):
    """Source of change notifications."""

    def start(self, callback: Callable[[], None]) -> None:
        ...

    def stop(self) -> None:
        ...


# ----------------------------------------------------------------------
# File polling trigger
# ----------------------------------------------------------------------

class PollingTrigger:
    """Fires the callback whenever the watched file set or any mtime/size changes."""

    def __init__(self, patterns: List[str], root: str | Path = ".", interval: float = 0.5):
        self.patterns = list(patterns)
        self.root = Path(root).resolve()
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def snapshot(self) -> Dict[str, Tuple[int, int]]:
        snap: Dict[str, Tuple[int, int]] = {}
        for f in resolve_globs(self.root, self.patterns):
            try:
                st = f.stat()
            except FileNotFoundError:
                # removed between glob and stat
                continue
            snap[str(f.relative_to(self.root))] = (st.st_mtime_ns, st.st_size)
        return snap

    def start(self, callback: Callable[[], None]) -> None:
        last = self.snapshot()

        def poll() -> None:
            nonlocal last
            while not self._stop.wait(self.interval):
                current = self.snapshot()
                if current != last:
                    last = current
                    callback()

        self._stop.clear()
        self._thread = threading.Thread(target=poll, name="betterbuild-poll", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None


# ----------------------------------------------------------------------
# Watcher
# ----------------------------------------------------------------------

class Watcher:
    """
    Re-runs one task on every notification.

    Runs happen one at a time on a single worker thread. Notifications that
    arrive while a run is in flight collapse into a single pending re-run.
    """

    def __init__(
        self,
        executor: Executor,
        name: str,
        trigger: Optional[Trigger] = None,
        *,
        on_result: Optional[Callable[[ExecutionResult], None]] = None,
    ):
        self.executor = executor
        self.name = name
        self.trigger = trigger
        self.on_result = on_result
        self.runs = 0
        self._cond = threading.Condition()
        self._pending = False
        self._running = False
        self._stopping = False
        self._thread: Optional[threading.Thread] = None

    def start(self, initial: bool = True) -> None:
        if self._thread is not None:
            raise RuntimeError(f"Watcher for '{self.name}' already started")
        with self._cond:
            self._pending = initial
            self._stopping = False
        self._thread = threading.Thread(target=self._loop, name=f"betterbuild-watch-{self.name}", daemon=True)
        self._thread.start()
        if self.trigger is not None:
            self.trigger.start(self.notify)

    def notify(self) -> None:
        with self._cond:
            self._pending = True
            self._cond.notify_all()

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no run is in flight or pending."""
        with self._cond:
            return self._cond.wait_for(lambda: not (self._running or self._pending), timeout)

    def join(self) -> None:
        if self._thread is not None:
            self._thread.join()

    def stop(self) -> None:
        if self.trigger is not None:
            self.trigger.stop()
        with self._cond:
            self._stopping = True
            self._pending = False
            self._cond.notify_all()
        self.join()
        self._thread = None

    def _loop(self) -> None:
        console = self.executor.console
        while True:
            with self._cond:
                while not (self._pending or self._stopping):
                    self._cond.wait()
                if self._stopping:
                    return
                self._pending = False
                self._running = True

            if self.runs:
                console.print_watch_trigger(self.name)
            try:
                result = self.executor.run(self.name)
                if not result.ok:
                    console.print_info(f"Run of '{self.name}' failed at '{result.failed_task}', waiting for changes...")
                if self.on_result is not None:
                    self.on_result(result)
            except Exception as e:
                # keep watching; the next change gets another attempt
                console.print_exception(e)
            finally:
                with self._cond:
                    self.runs += 1
                    self._running = False
                    self._cond.notify_all()
