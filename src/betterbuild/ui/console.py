"""Console output formatting utilities for betterbuild."""

from __future__ import annotations

import sys
import threading
from typing import List, Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug
        # tasks report from worker threads
        self._lock = threading.Lock()

    def _out(self, *lines: str, err: bool = False) -> None:
        stream = sys.stderr if err else sys.stdout
        with self._lock:
            for line in lines:
                print(line, file=stream)

    def print_header(self, title: str) -> None:
        """Print a section header."""
        self._out(f"\n{title}", "-" * len(title))

    def print_run_started(self, buildfile: str, task: str, task_count: int) -> None:
        """Print run start information."""
        self._out("\nRUN STARTED", f"Buildfile: {buildfile}", f"Task: {task}", f"Tasks: {task_count}", "")

    def print_plan(self, levels: List[List[str]]) -> None:
        """Print the execution stages."""
        for idx, level in enumerate(levels):
            self._out(f"=== Stage {idx + 1}: {level} ===")

    def print_task_start(self, name: str) -> None:
        self._out(f"TASK STARTED: {name}")

    def print_task_done(self, name: str, duration: Optional[float] = None) -> None:
        if duration is None:
            self._out(f"✓ {name}")
        else:
            self._out(f"✓ {name} ({duration:.2f}s)")

    def print_step(self, name: str) -> None:
        """Print step start message."""
        self._out(f"STEP: {name}")

    def print_failure(
        self,
        name: str,
        reason: str,
        exit_code: Optional[int] = None,
        hint: Optional[str] = None,
    ) -> None:
        """
        Print failure message.

        Args:
            name: Task name
            reason: Failure reason/error message
            exit_code: Optional exit code
            hint: Optional hint for user
        """
        lines = [f"✗ TASK FAILED: {name}"]
        if exit_code is not None:
            lines.append(f"Exit code: {exit_code}")
        if hint:
            lines.append(f"Hint: {hint}")
        if self.debug:
            lines.append(f"Error details: {reason}")
        else:
            # first line only outside debug mode
            lines.append(f"Error: {reason.splitlines()[0] if reason else 'Unknown error'}")
        self._out(*lines, err=True)

    def print_size(self, path: str, size: int, gzip_size: int) -> None:
        """Print artifact size (raw and gzipped)."""
        self._out(f"SIZE: {path} {_human(size)} (gzip {_human(gzip_size)})")

    def print_results(self, results: dict[str, str]) -> None:
        """Print final results summary."""
        lines = ["", "=" * 40, "RESULTS", "=" * 40]
        for task, status in results.items():
            status_display = status.upper() if status != "ok" else "SUCCESS"
            lines.append(f"  {task}: {status_display}")
        self._out(*lines)

    def print_watch_started(self, task: str, patterns: List[str]) -> None:
        self._out("\nWATCHING", f"Task: {task}", f"Paths: {', '.join(patterns)}", "")

    def print_watch_trigger(self, task: str) -> None:
        self._out(f"\nCHANGE DETECTED: re-running {task}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        lines = [f"\nERROR: {title}", message]
        for detail in details or []:
            lines.append(f"  {detail}")
        if suggestion:
            lines.append(f"\n{suggestion}")
        self._out(*lines, err=True)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            with self._lock:
                traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            self._out(f"Error: {exc}", err=True)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        self._out(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            self._out(f"[DEBUG] {message}", err=True)


def _human(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    return f"{size / 1024:.2f} kB"


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
