from __future__ import annotations

import threading

import pytest

from betterbuild.ui.console import Console, set_console


class Recorder:
    """Collects action calls from worker threads."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def action(self, name, fail=None):
        def run():
            with self._lock:
                self.calls.append(name)
            if fail is not None:
                raise fail
        return run


@pytest.fixture(autouse=True)
def console():
    c = Console(debug=False)
    set_console(c)
    return c


@pytest.fixture
def recorder():
    return Recorder()
