# executor.py
from __future__ import annotations

import asyncio
import inspect
import os
import time
from collections import ChainMap, deque
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Awaitable, Dict, Mapping, Optional

from .dag import Plan, build_plan, topo_levels
from .errors import StepFailure
from .model import ExecutionResult, Step, Task
from .ui.console import Console, get_console


def default_workers() -> int:
    c = os.cpu_count() or 2
    return max(1, c - 1)


async def _await(aw: Awaitable[Any]) -> Any:
    return await aw


class Executor:
    """
    Runs a task and its transitive prerequisites.

    - Prerequisites always finish before their dependents start.
    - Unrelated tasks run in parallel on a thread pool.
    - On first failure no new task is scheduled; in-flight tasks finish.
    """

    def __init__(
        self,
        tasks: Mapping[str, Task],
        *,
        max_workers: int | None = None,
        console: Console | None = None,
        print_plan: bool = False,
    ):
        self.tasks = tasks
        self.max_workers = max_workers or default_workers()
        self.console = console or get_console()
        self.print_plan = print_plan

    def plan(self, name: str) -> Plan:
        return build_plan(self.tasks, name)

    def run(self, name: str) -> ExecutionResult:
        # graph errors raise here, before anything executes
        plan = build_plan(self.tasks, name)
        return self._execute(self.tasks, plan)

    def run_sequence(self, *names: str) -> ExecutionResult:
        """Run `names` strictly left to right, as one run."""
        if not names:
            raise ValueError("run_sequence() needs at least one task name")
        seq = Task(name=f"sequence({', '.join(names)})", needs=names, ordered=True)
        tasks = ChainMap({seq.name: seq}, self.tasks)
        plan = build_plan(tasks, seq.name)
        result = self._execute(tasks, plan)
        result.statuses.pop(seq.name, None)
        return result

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _call(self, task: Task) -> float:
        self.console.print_task_start(task.name)
        started = time.monotonic()
        action = task.action
        try:
            if isinstance(action, Step):
                action.execute()
            else:
                out = action()
                if inspect.isawaitable(out):
                    asyncio.run(_await(out))
        except SystemExit as e:
            # tools driven through their main() end in sys.exit
            code = e.code
            if code not in (None, 0):
                raise StepFailure(
                    step=task.name,
                    cmd="sys.exit",
                    exit_code=code if isinstance(code, int) else 1,
                    hint=None if isinstance(code, int) else str(code),
                ) from e
        return time.monotonic() - started

    def _execute(self, tasks: Mapping[str, Task], plan: Plan) -> ExecutionResult:
        if self.print_plan:
            self.console.print_plan(topo_levels(plan))

        waiting: Dict[str, int] = {n: len(plan.needs[n]) for n in plan.order}
        ready = deque(n for n in plan.order if waiting[n] == 0)
        statuses: Dict[str, str] = {}
        failed_task: Optional[str] = None
        error: Optional[BaseException] = None
        in_flight: Dict[Future, str] = {}
        position = {n: i for i, n in enumerate(plan.order)}

        def unlock(name: str) -> None:
            for nxt in sorted(plan.dependents[name], key=position.__getitem__):
                waiting[nxt] -= 1
                if waiting[nxt] == 0:
                    ready.append(nxt)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            while ready or in_flight:
                # schedule everything currently ready
                while ready and failed_task is None:
                    name = ready.popleft()
                    task = tasks[name]
                    if task.is_group:
                        statuses[name] = "ok"
                        unlock(name)
                        continue
                    in_flight[pool.submit(self._call, task)] = name

                if not in_flight:
                    break

                # wait for one completion, then loop to schedule newly-ready tasks
                fut = next(as_completed(list(in_flight.keys())))
                name = in_flight.pop(fut)

                try:
                    duration = fut.result()
                except Exception as e:
                    statuses[name] = "failed"
                    self.console.print_failure(
                        name,
                        str(e),
                        exit_code=e.exit_code if isinstance(e, StepFailure) else None,
                        hint=e.hint if isinstance(e, StepFailure) else None,
                    )
                    if failed_task is None:
                        failed_task, error = name, e
                    continue

                statuses[name] = "ok"
                self.console.print_task_done(name, duration)
                if failed_task is None:
                    unlock(name)

        ordered = {n: statuses.get(n, "skipped") for n in plan.order}
        return ExecutionResult(statuses=ordered, failed_task=failed_task, error=error)
