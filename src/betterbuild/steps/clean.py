# steps/clean.py
from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from ..ui.console import get_console


@dataclass(frozen=True)
class CleanStep:
    """Delete build output directories (missing ones are fine)."""
    paths: Tuple[str, ...] = ("dist",)
    name: str = "clean"
    cwd: str | None = None

    def execute(self) -> None:
        root = Path(self.cwd or ".")
        for rel in self.paths:
            p = root / rel
            if p.is_dir():
                shutil.rmtree(p)
            elif p.exists():
                p.unlink()
            else:
                continue
            get_console().print_step(f"{self.name}: removed {rel}")
