# src/betterbuild/dsl.py
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .model import Action, Task
from .steps.base import ShellStep


# ---------------------------------------------------------------------
# Step helper
# ---------------------------------------------------------------------

def sh(name: str, cmd: str, *, cwd: str | None = None, env: Optional[Dict[str, str]] = None) -> ShellStep:
    """Create a shell step."""
    return ShellStep(name=name, run=cmd, cwd=cwd, env=env or {})


# ---------------------------------------------------------------------
# Task helpers
# ---------------------------------------------------------------------

def task(
    name: str,
    action: Optional[Action] = None,
    *,
    needs: Iterable[str] = (),
    description: str | None = None,
) -> Task:
    """
    task("minify", BundleStep(...), needs=["typescript"])
    task("typescript", CompileStep())
    task("hello", lambda: print("hi"))
    """
    return Task(name=name, needs=tuple(needs), action=action, description=description)


def group(name: str, *needs: str, description: str | None = None) -> Task:
    """A task with no action; done once all of `needs` are done."""
    return Task(name=name, needs=needs, description=description)


def sequence(name: str, *names: str, description: str | None = None) -> Task:
    """
    A task that runs `names` strictly left to right:
        sequence("release", "test-chrome", "clean", "minify", "publish")
    """
    if not names:
        raise ValueError(f"sequence({name!r}) needs at least one task name")
    return Task(name=name, needs=names, ordered=True, description=description)


def build(*items: Task) -> List[Task]:
    """
    Buildfile helper:

        def tasks():
            return build(
                task(...),
                sequence(...),
            )
    """
    return list(items)

