# steps/serve.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .. import process
from ..config import DEFAULT_PID_FILE
from ..ui.console import get_console


@dataclass(frozen=True)
class ServeStep:
    """Start a dev server in the background; `betterbuild stop` ends it."""
    argv: Tuple[str, ...]
    pid_file: str = DEFAULT_PID_FILE
    name: str = "serve"
    cwd: str | None = None

    def execute(self) -> None:
        proc = process.start(list(self.argv), self.pid_file, cwd=self.cwd)
        get_console().print_step(f"{self.name}: started pid {proc.pid} ({self.pid_file})")


@dataclass(frozen=True)
class StopServeStep:
    pid_file: str = DEFAULT_PID_FILE
    name: str = "stop-serve"

    def execute(self) -> None:
        pid = process.stop(self.pid_file)
        get_console().print_step(f"{self.name}: stopped pid {pid}")
