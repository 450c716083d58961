# steps/base.py
from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from ..errors import StepFailure
from ..ui.console import get_console


TOOL_HINTS = {
    "npm": "Install Node.js (includes npm) or fix PATH.",
    "node": "Install Node.js or fix PATH.",
    "tsc": "Install TypeScript (npm install --save-dev typescript).",
    "esbuild": "Install esbuild (npm install --save-dev esbuild).",
    "mocha": "Install mocha (npm install --save-dev mocha).",
    "karma": "Install karma (npm install --save-dev karma).",
}


def _bin(tool: str, root: str | Path | None = None) -> str:
    """Prefer the project-local ./node_modules/.bin copy of a tool."""
    local = Path(root or ".") / "node_modules" / ".bin" / tool
    return str(local) if local.exists() else tool


def _tool_hint(cmd: Union[str, Sequence[str]]) -> str:
    try:
        argv = shlex.split(cmd) if isinstance(cmd, str) else list(cmd)
    except ValueError:
        argv = []
    if not argv:
        return "Check the command or fix PATH."
    tool = Path(argv[0]).name
    return TOOL_HINTS.get(tool, f"Install {tool} or fix PATH.")


def run_cmd(
    step: str,
    cmd: Union[str, Sequence[str]],
    *,
    cwd: str | Path | None = None,
    env: Optional[Dict[str, str]] = None,
) -> None:
    """
    Run an external tool with inherited stdin/stdout/stderr.
    A string runs through the shell; a sequence runs directly.
    Non-zero exit raises StepFailure.
    """
    full_env = os.environ.copy()
    full_env.update(env or {})
    shell = isinstance(cmd, str)
    display = cmd if shell else shlex.join(cmd)

    if cwd is not None and not Path(cwd).is_dir():
        raise StepFailure(step=step, cmd=display, exit_code=1, hint=f"Working directory not found: {cwd}")

    get_console().print_step(f"{step}: {display}")
    try:
        proc = subprocess.run(
            cmd,
            shell=shell,
            cwd=str(cwd) if cwd is not None else None,
            env=full_env,
        )
    except FileNotFoundError:
        raise StepFailure(step=step, cmd=display, exit_code=127, hint=_tool_hint(cmd)) from None

    if proc.returncode != 0:
        # 127 is the shell's "command not found"
        hint = _tool_hint(cmd) if shell and proc.returncode == 127 else None
        raise StepFailure(step=step, cmd=display, exit_code=proc.returncode, hint=hint)


@dataclass(frozen=True)
class ShellStep:
    """A single shell command."""
    name: str
    run: str
    cwd: str | None = None
    env: Dict[str, str] = field(default_factory=dict, hash=False)

    def execute(self) -> None:
        run_cmd(self.name, self.run, cwd=self.cwd, env=self.env)

