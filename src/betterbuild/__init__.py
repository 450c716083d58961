from .dsl import task, group, sequence, sh, build
from .errors import (
    BuildError,
    UnknownTaskError,
    DuplicateTaskError,
    CyclicDependencyError,
    TaskActionError,
    StepFailure,
    ProcessNotFoundError,
)
from .executor import Executor
from .model import Task, Step, ExecutionResult
from .process import stop
from .registry import TaskRegistry
from .watch import Watcher, PollingTrigger

__all__ = [
    "task", "group", "sequence", "sh", "build",
    "BuildError", "UnknownTaskError", "DuplicateTaskError", "CyclicDependencyError",
    "TaskActionError", "StepFailure", "ProcessNotFoundError",
    "Executor", "Task", "Step", "ExecutionResult", "stop", "TaskRegistry", "Watcher", "PollingTrigger",
]
