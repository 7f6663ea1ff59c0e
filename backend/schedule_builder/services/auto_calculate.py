"""
One-shot reconciliation of start dates against predecessors.

Unlike cascade, this is a single pass over the items in collection order.
Predecessors are read from the schedule as it was before the pass, so a
move made during the pass is not seen by that item's own dependents. Chains
longer than one link need more passes (or a cascade) to settle.
"""

from dataclasses import dataclass, field
from typing import Mapping

from schedule_builder.logging_config import get_logger
from schedule_builder.services.items import ScheduleItem

logger = get_logger(__name__)


@dataclass
class AutoCalculateResult:
    """Outcome of a reconciliation pass."""
    items: dict[str, ScheduleItem]
    updated_ids: list[str] = field(default_factory=list)
    dangling: list[str] = field(default_factory=list)  # items whose predecessor id does not resolve


def auto_calculate_from_predecessors(
    items: Mapping[str, ScheduleItem],
) -> AutoCalculateResult:
    """
    Set every dependent item to start the day after its predecessor ends.

    Items with no predecessor are left alone. A predecessor id that does not
    resolve leaves the item unchanged and is reported in ``dangling``.
    The mapping passed in is not modified.
    """
    result = AutoCalculateResult(items=dict(items))

    for item_id in list(result.items):
        item = result.items[item_id]
        if item.predecessor_id is None:
            continue

        predecessor = items.get(item.predecessor_id)
        if predecessor is None:
            logger.warning(f"Item {item_id} references missing predecessor {item.predecessor_id}")
            result.dangling.append(item_id)
            continue

        updated = item.starting_after(predecessor.end_date)
        if updated.start_date != item.start_date:
            result.updated_ids.append(item_id)
        result.items[item_id] = updated

    return result
