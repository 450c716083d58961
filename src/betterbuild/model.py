# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, Union, runtime_checkable

from .errors import TaskActionError


@runtime_checkable
class Step(Protocol):
    """An external unit of work (compiler, bundler, test runner, publisher)."""

    name: str

    def execute(self) -> None:
        ...


Action = Union[Callable[[], Any], Step]


@dataclass(frozen=True)
class Task:
    """
    A named node of the build graph.

    - action set        -> action task
    - action is None    -> grouping task (completes once its needs complete)
    - ordered=True      -> grouping whose needs run strictly left to right
    """
    name: str
    needs: Tuple[str, ...] = ()
    action: Optional[Action] = None
    ordered: bool = False
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError(f"Task name must be a non-empty string, got {self.name!r}")
        # accept any iterable of names, store a tuple
        object.__setattr__(self, "needs", tuple(self.needs))
        for n in self.needs:
            if not isinstance(n, str) or not n:
                raise ValueError(f"Task '{self.name}' has an invalid prerequisite name: {n!r}")
        if self.action is not None and not (isinstance(self.action, Step) or callable(self.action)):
            raise TypeError(f"Task '{self.name}' action must be callable or a Step")
        if self.ordered and self.action is not None:
            raise ValueError(f"Ordered task '{self.name}' cannot have an action")

    @property
    def is_group(self) -> bool:
        return self.action is None


@dataclass
class ExecutionResult:
    """Outcome of one run: per-task statuses plus the first failure, if any."""
    statuses: Dict[str, str] = field(default_factory=dict)  # "ok" | "failed" | "skipped"
    failed_task: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.failed_task is None

    def raise_for_failure(self) -> None:
        if self.failed_task is not None:
            raise TaskActionError(task=self.failed_task, error=self.error) from self.error
