# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


class BuildError(Exception):
    """Base class for every error raised by betterbuild."""


# ----------------------------------------------------------------------
# Graph errors (raised before any action runs)
# ----------------------------------------------------------------------

@dataclass
class UnknownTaskError(BuildError):
    name: str
    known: List[str] = field(default_factory=list)
    required_by: Optional[str] = None

    def __str__(self) -> str:
        if self.required_by:
            msg = f"Task '{self.required_by}' needs missing task '{self.name}'"
        else:
            msg = f"Unknown task '{self.name}'"
        if self.known:
            msg += f". Known tasks: {sorted(self.known)}"
        return msg


@dataclass
class DuplicateTaskError(BuildError):
    name: str

    def __str__(self) -> str:
        return f"Task '{self.name}' is already registered"


@dataclass
class CyclicDependencyError(BuildError):
    cycle: List[str]

    def __str__(self) -> str:
        return "Cyclic dependency: " + " -> ".join(self.cycle)


# ----------------------------------------------------------------------
# Execution errors
# ----------------------------------------------------------------------

@dataclass
class TaskActionError(BuildError):
    task: str
    error: BaseException

    def __str__(self) -> str:
        return f"Task '{self.task}' failed: {self.error}"


@dataclass
class StepFailure(BuildError):
    step: str
    cmd: str
    exit_code: int
    hint: Optional[str] = None

    def __str__(self) -> str:
        return f"step '{self.step}' failed (exit={self.exit_code}): {self.cmd}"


@dataclass
class ProcessNotFoundError(BuildError):
    pid_file: str
    reason: str = "no recorded process"

    def __str__(self) -> str:
        return f"Server process does not exist ({self.reason}): {self.pid_file}"


@dataclass
class BuildfileError(BuildError):
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.path}"
