# dag.py
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Optional, Set, Tuple

from .errors import CyclicDependencyError, UnknownTaskError
from .model import Task


@dataclass(frozen=True)
class Plan:
    """
    Everything the executor needs for one run:
      - order: depth-first topological order (prerequisites first)
      - needs: effective prerequisites per task, sequencing edges included
      - dependents: reverse edges (prerequisite -> tasks waiting on it)
    """
    root: str
    order: List[str]
    needs: Dict[str, Set[str]]
    dependents: Dict[str, Set[str]]


def _lookup(tasks: Mapping[str, Task], name: str, required_by: Optional[str] = None) -> Task:
    try:
        return tasks[name]
    except KeyError:
        raise UnknownTaskError(name, known=list(tasks), required_by=required_by) from None


def collect(tasks: Mapping[str, Task], root: str) -> List[str]:
    """Return `root` and all of its transitive prerequisites, in discovery order."""
    _lookup(tasks, root)
    seen: Set[str] = {root}
    out: List[str] = [root]
    stack = [root]
    while stack:
        name = stack.pop()
        for dep in tasks[name].needs:
            _lookup(tasks, dep, required_by=name)
            if dep not in seen:
                seen.add(dep)
                out.append(dep)
                stack.append(dep)
    return out


def sequencing_edges(tasks: Mapping[str, Task], nodes: List[str]) -> Dict[str, Set[str]]:
    """
    Extra prerequisites that make ordered groups run left to right.

    For needs [a, b, c] every task reachable from b that is not reachable
    from a waits for a; every task first reached from c waits for a and b.
    """
    extra: Dict[str, Set[str]] = {}
    for name in nodes:
        task = tasks[name]
        if not task.ordered:
            continue
        earlier: Set[str] = set()
        prior: List[str] = []
        for item in task.needs:
            reach = collect(tasks, item)
            for n in reach:
                if n not in earlier:
                    extra.setdefault(n, set()).update(prior)
            earlier.update(reach)
            prior.append(item)
    return extra


def topo_order(needs: Dict[str, Set[str]], root: str, declared: Mapping[str, Task]) -> List[str]:
    """
    Depth-first topological sort from `root`.

    A node met again while it is still on the traversal stack closes a cycle.
    The stack is explicit, so chain depth is not bounded by the recursion limit.
    """
    order: List[str] = []
    done: Set[str] = set()
    path: List[str] = [root]
    on_path: Set[str] = {root}

    def ordered_deps(name: str) -> Iterator[str]:
        # declared prerequisites keep their order, sequencing edges follow
        first = list(declared[name].needs)
        return iter(first + sorted(needs[name] - set(first)))

    stack: List[Tuple[str, Iterator[str]]] = [(root, ordered_deps(root))]
    while stack:
        name, deps = stack[-1]
        for dep in deps:
            if dep in done:
                continue
            if dep in on_path:
                raise CyclicDependencyError(path[path.index(dep):] + [dep])
            path.append(dep)
            on_path.add(dep)
            stack.append((dep, ordered_deps(dep)))
            break
        else:
            stack.pop()
            path.pop()
            on_path.discard(name)
            done.add(name)
            order.append(name)
    return order


def build_plan(tasks: Mapping[str, Task], root: str) -> Plan:
    nodes = collect(tasks, root)
    extra = sequencing_edges(tasks, nodes)

    needs: Dict[str, Set[str]] = {}
    for name in nodes:
        needs[name] = set(tasks[name].needs) | extra.get(name, set())

    order = topo_order(needs, root, tasks)

    dependents: Dict[str, Set[str]] = {name: set() for name in nodes}
    for name, deps in needs.items():
        for d in deps:
            dependents[d].add(name)

    return Plan(root=root, order=order, needs=needs, dependents=dependents)


def topo_levels(plan: Plan) -> List[List[str]]:
    """
    Group the plan into stages; every task in a stage can run in parallel.
    """
    indeg: Dict[str, int] = {n: len(d) for n, d in plan.needs.items()}
    q = deque(sorted(n for n, d in indeg.items() if d == 0))

    levels: List[List[str]] = []
    while q:
        level: List[str] = []
        for _ in range(len(q)):
            node = q.popleft()
            level.append(node)
            for child in sorted(plan.dependents.get(node, set())):
                indeg[child] -= 1
                if indeg[child] == 0:
                    q.append(child)
        levels.append(level)
    return levels

