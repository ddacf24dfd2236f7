"""Allocation rules for unassigned adjustments.

Provides tiered, capacity-bounded rules that distribute a line item's
residual exactly, the shared tier loop, and the ``AllocationRule`` protocol
all rules satisfy.

Convenience function ``allocate_line_items`` runs a rule over every line
item of an aggregation run.
"""

import logging
from collections.abc import Mapping, Sequence

from adjustment_allocation.config import Tier
from adjustment_allocation.engine._common import (
    active_buckets,
    allocate_by_tier,
    check_residual,
    eligible_buckets,
    empty_result,
    settle,
)
from adjustment_allocation.engine._types import ActiveBuckets, AllocationRule, TierSplit
from adjustment_allocation.engine.equal_share import EqualShareTierRule, equal_share_split, water_level
from adjustment_allocation.engine.proportional import ProportionalTierRule, largest_remainder_split
from adjustment_allocation.models import AllocationResult, BusinessKey, LineItem

__all__ = [
    "ActiveBuckets",
    "AllocationRule",
    "EqualShareTierRule",
    "ProportionalTierRule",
    "TierSplit",
    "active_buckets",
    "allocate_by_tier",
    "allocate_line_items",
    "check_residual",
    "eligible_buckets",
    "empty_result",
    "equal_share_split",
    "largest_remainder_split",
    "settle",
    "water_level",
]

logger = logging.getLogger(__name__)


def allocate_line_items(
    line_items: Mapping[BusinessKey, LineItem],
    policy: Sequence[Tier],
    rule: AllocationRule | None = None,
) -> dict[BusinessKey, AllocationResult]:
    """Run an allocation rule over every line item.

    Line items are independent; each is allocated from its own buckets only.

    Parameters
    ----------
    line_items : Mapping[BusinessKey, LineItem]
        Fully aggregated line items.
    policy : Sequence[Tier]
        Tiers in priority order.
    rule : AllocationRule, optional
        Defaults to :class:`ProportionalTierRule`.

    Returns
    -------
    dict[BusinessKey, AllocationResult]
        One result per line item, in the same order.
    """
    rule = rule or ProportionalTierRule()
    results: dict[BusinessKey, AllocationResult] = {}
    for key, item in line_items.items():
        if item.residual_units == 0:
            results[key] = empty_result(rule.name, policy)
            continue
        logger.debug("Allocating %d units for line item %s", item.residual_units, "|".join(key))
        results[key] = rule(item.residual_units, item.buckets, policy)
    return results
