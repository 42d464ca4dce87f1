"""Processing order of tasks within a run."""

from __future__ import annotations

import heapq
from datetime import datetime, timezone, tzinfo
from typing import Iterable

from focus_planner.schema import Task

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


def task_sort_key(task: Task, zone: tzinfo = timezone.utc) -> tuple:
    """Deadline ascending (none last), priority descending, then title."""

    deadline = task.deadline
    if deadline is None:
        deadline = _FAR_FUTURE
    elif deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=zone)
    return (deadline, -task.priority, task.title, task.id)


def order_tasks(
    tasks: Iterable[Task],
    respect_dependencies: bool = False,
    zone: tzinfo = timezone.utc,
) -> list[Task]:
    """Return tasks in the order they compete for free time.

    With ``respect_dependencies`` a task is never ordered before the tasks it
    depends on; ties are still broken by :func:`task_sort_key`. Tasks caught in
    a dependency cycle keep their plain key order.
    """

    ordered = sorted(tasks, key=lambda task: task_sort_key(task, zone))
    if not respect_dependencies:
        return ordered

    rank = {id(task): index for index, task in enumerate(ordered)}
    by_id = {}
    for task in ordered:
        by_id.setdefault(task.id, task)

    pending: dict[int, int] = {}
    dependents: dict[str, list[Task]] = {}
    for task in ordered:
        deps = {dep for dep in task.dependencies if dep in by_id and dep != task.id}
        pending[id(task)] = len(deps)
        for dep in deps:
            dependents.setdefault(dep, []).append(task)

    ready = [(rank[id(task)], task) for task in ordered if pending[id(task)] == 0]
    heapq.heapify(ready)
    result: list[Task] = []
    placed = set()
    while len(result) < len(ordered):
        if not ready:
            # cycle: release the best-ranked task still waiting
            stuck = min((t for t in ordered if id(t) not in placed), key=lambda t: rank[id(t)])
            pending[id(stuck)] = 0
            heapq.heappush(ready, (rank[id(stuck)], stuck))
        _, task = heapq.heappop(ready)
        if id(task) in placed:
            continue
        placed.add(id(task))
        result.append(task)
        for follower in dependents.get(task.id, []):
            if id(follower) in placed:
                continue
            pending[id(follower)] -= 1
            if pending[id(follower)] == 0:
                heapq.heappush(ready, (rank[id(follower)], follower))
    return result
