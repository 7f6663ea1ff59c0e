"""
Cascade propagation of date changes through the schedule.

When an item's start date or duration changes, every item that depends on
it (transitively) is moved so that it starts the day after its predecessor
ends:

    Successor.Start = Predecessor.End + 1 day
    Successor.End   = Successor.Start + Successor.Duration

Every item has at most one predecessor, so the dependency graph is a forest
and propagation order across branches does not matter.
"""

from typing import Mapping

from schedule_builder.exceptions import CyclicDependencyError
from schedule_builder.logging_config import get_logger
from schedule_builder.services.graph import build_graph
from schedule_builder.services.items import ScheduleItem

logger = get_logger(__name__)


def cascade(
    items: Mapping[str, ScheduleItem],
    changed_id: str,
) -> dict[str, ScheduleItem]:
    """
    Push the dates of ``changed_id`` down to all of its dependents.

    Args:
        items: Arena of schedule items keyed by id. Not modified.
        changed_id: The item whose start date or duration just changed.

    Returns:
        A new arena with every dependent re-dated.

    Raises:
        CyclicDependencyError: If an item is reached twice, which only
            happens when the predecessor edges contain a cycle.
    """
    arena = dict(items)
    graph = build_graph(arena)

    if changed_id not in graph:
        return arena

    visited = {changed_id}
    frontier = [changed_id]
    moved = 0

    while frontier:
        parent = arena[frontier.pop()]
        for successor_id in graph.successors(parent.id):
            if successor_id in visited:
                logger.error(f"Cycle reached at item {successor_id} while cascading from {changed_id}")
                raise CyclicDependencyError(successor_id)
            visited.add(successor_id)

            arena[successor_id] = arena[successor_id].starting_after(parent.end_date)
            frontier.append(successor_id)
            moved += 1

    if moved:
        logger.debug(f"Cascade from {changed_id} moved {moved} items")

    return arena
