# loader.py
from __future__ import annotations

import runpy
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .config import DEFAULT_BUILDFILE, DEFAULT_WATCH
from .errors import BuildfileError
from .model import Task
from .registry import TaskRegistry


@dataclass
class Buildfile:
    path: Path
    registry: TaskRegistry
    watch: List[str] = field(default_factory=lambda: list(DEFAULT_WATCH))


def find_buildfiles(directory: str | Path = ".") -> List[Path]:
    """`buildfile.py` first, then any `*_buildfile.py`."""
    d = Path(directory)
    found: List[Path] = []
    default = d / DEFAULT_BUILDFILE
    if default.exists():
        found.append(default)
    for p in sorted(d.glob("*_buildfile.py")):
        if p != default:
            found.append(p)
    return found


def load_buildfile(path: str | Path) -> Buildfile:
    """
    Load tasks from a python file.

    The file must define either:
      - tasks() -> List[Task]
      - TASKS = [Task, ...]
    and may define WATCH = ["src/**/*", ...] for watch mode.
    Registration errors (duplicates) surface here, before anything runs.
    """
    bf_path = Path(path).expanduser().resolve()
    if not bf_path.exists():
        raise BuildfileError(str(bf_path), "Buildfile not found")
    if bf_path.suffix != ".py":
        raise BuildfileError(str(bf_path), "Buildfile must be a .py file")

    globals_dict = runpy.run_path(str(bf_path), run_name=f"betterbuild_buildfile_{bf_path.stem}")

    if "tasks" in globals_dict and callable(globals_dict["tasks"]):
        items = globals_dict["tasks"]()
    elif "TASKS" in globals_dict:
        items = globals_dict["TASKS"]
    else:
        raise BuildfileError(str(bf_path), "Buildfile defines neither tasks() nor TASKS")

    if not isinstance(items, (list, tuple)) or not all(isinstance(t, Task) for t in items):
        raise BuildfileError(str(bf_path), "tasks()/TASKS must be a list of Task")

    watch = globals_dict.get("WATCH", DEFAULT_WATCH)
    if isinstance(watch, str):
        watch = [watch]

    return Buildfile(path=bf_path, registry=TaskRegistry(items), watch=list(watch))
