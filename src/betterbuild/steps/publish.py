# steps/publish.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .base import run_cmd


@dataclass(frozen=True)
class PublishStep:
    """Upload the package; the tool's exit code decides success."""
    name: str = "publish"
    tool: str = "npm"
    args: Tuple[str, ...] = ("publish",)
    cwd: str | None = None

    def execute(self) -> None:
        run_cmd(self.name, [self.tool, *self.args], cwd=self.cwd)
