"""
Graph operations using NetworkX.

This module handles:
- Building the predecessor graph of a schedule
- Cycle detection for predecessor edits
"""

from typing import Mapping

import networkx as nx

from schedule_builder.services.items import ScheduleItem


def build_graph(items: Mapping[str, ScheduleItem]) -> nx.DiGraph:
    """
    Build a NetworkX DiGraph from a schedule arena.

    Returns a graph where:
    - Nodes are item IDs
    - Edges go from predecessor -> successor

    Predecessor ids that do not resolve to an item are left out.
    """
    graph = nx.DiGraph()

    for item_id in items:
        graph.add_node(item_id)

    for item in items.values():
        if item.predecessor_id is not None and item.predecessor_id in items:
            graph.add_edge(item.predecessor_id, item.id)

    return graph


def would_create_cycle(
    items: Mapping[str, ScheduleItem],
    new_predecessor_id: str,
    successor_id: str,
) -> bool:
    """
    Check if making ``new_predecessor_id`` the predecessor of ``successor_id``
    would create a cycle.

    The successor's current predecessor edge is dropped first, since an item
    holds at most one predecessor and the new edge replaces it.
    """
    graph = build_graph(items)

    current = items[successor_id].predecessor_id if successor_id in items else None
    if current is not None and graph.has_edge(current, successor_id):
        graph.remove_edge(current, successor_id)

    graph.add_edge(new_predecessor_id, successor_id)

    try:
        nx.find_cycle(graph, source=successor_id)
        return True
    except nx.NetworkXNoCycle:
        return False
