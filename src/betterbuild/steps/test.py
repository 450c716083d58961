# steps/test.py
from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from ..files import resolve_globs
from ..ui.console import get_console
from .base import run_cmd


@dataclass(frozen=True)
class TestStep:
    """
    Run a test command.

    With `files`, the command runs once per matching file (mocha style) and
    stops at the first failing file. Without, it runs once.
    """
    __test__ = False  # not a pytest class

    name: str
    command: str
    files: Tuple[str, ...] = ()
    cwd: str | None = None

    def execute(self) -> None:
        argv = shlex.split(self.command)
        if not self.files:
            run_cmd(self.name, argv, cwd=self.cwd)
            return

        root = Path(self.cwd or ".")
        matched = resolve_globs(root, self.files)
        if not matched:
            get_console().print_info(f"{self.name}: no test files match {list(self.files)}")
        for f in matched:
            run_cmd(self.name, argv + [str(f.relative_to(root))], cwd=self.cwd)


def mocha(files: Tuple[str, ...] = ("lib/**/__tests__/*.spec.js",), *, name: str = "test") -> TestStep:
    return TestStep(name=name, command="node ./node_modules/.bin/mocha", files=tuple(files))


def karma(
    browser: str,
    single_run: bool = True,
    *,
    config: str = "karma.conf.js",
    name: str | None = None,
) -> TestStep:
    """Browser-hosted run. single_run=False keeps karma watching (TDD)."""
    mode = "--single-run" if single_run else "--no-single-run"
    return TestStep(
        name=name or f"karma {browser}",
        command=f"karma start {config} --browsers {browser} {mode}",
    )
