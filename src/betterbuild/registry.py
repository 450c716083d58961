# registry.py
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from .errors import DuplicateTaskError, UnknownTaskError
from .model import Action, Task


class TaskRegistry(Mapping[str, Task]):
    """
    Name -> Task mapping built once at startup.

    The executor only reads it. Prerequisites may name tasks registered
    later; they are resolved when a run is planned.
    """

    def __init__(self, tasks: Iterable[Task] = ()):
        self._tasks: Dict[str, Task] = {}
        for t in tasks:
            self.add(t)

    def add(self, task: Task) -> Task:
        if task.name in self._tasks:
            raise DuplicateTaskError(task.name)
        self._tasks[task.name] = task
        return task

    def register(
        self,
        name: str,
        needs: Iterable[str] = (),
        action: Optional[Action] = None,
        *,
        description: Optional[str] = None,
    ) -> Task:
        # build first so a bad task never reaches the mapping
        return self.add(Task(name=name, needs=tuple(needs), action=action, description=description))

    def get_task(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(name, known=list(self._tasks)) from None

    def unresolved(self) -> Dict[str, List[str]]:
        """Prerequisite names that no registered task provides, keyed by dependent."""
        out: Dict[str, List[str]] = {}
        for t in self._tasks.values():
            missing = [n for n in t.needs if n not in self._tasks]
            if missing:
                out[t.name] = missing
        return out

    def __getitem__(self, name: str) -> Task:
        return self._tasks[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)
