"""Equal-share water-level rule.

Within a tier, every active bucket takes the same amount until it runs
out of capacity; the rest keeps being shared equally among the buckets
that still have room. This was the reconciliation tool's original policy
("share equally until one is exhausted"), computed here in closed form
on integers instead of an iterative floating-point loop.
"""

from collections.abc import Mapping, Sequence

from adjustment_allocation.config import Tier
from adjustment_allocation.engine._common import allocate_by_tier
from adjustment_allocation.engine._types import ActiveBuckets
from adjustment_allocation.models import AllocationResult, Bucket, CategoryKey


def water_level(target: int, capacities: list[int]) -> tuple[int, int]:
    """Find the highest equal level that fits within ``target``.

    Returns
    -------
    tuple[int, int]
        ``(level, rest)`` where ``sum(min(c, level)) + rest == target`` and
        ``rest`` is smaller than the number of buckets above ``level``.
    """
    level = 0
    budget = target
    unsaturated = len(capacities)
    for capacity in sorted(capacities):
        raise_all = (capacity - level) * unsaturated
        if raise_all <= budget:
            budget -= raise_all
            level = capacity
            unsaturated -= 1
            continue
        step = budget // unsaturated
        level += step
        budget -= step * unsaturated
        break
    return level, budget


def equal_share_split(target: int, active: ActiveBuckets) -> dict[CategoryKey, int]:
    """Split ``target`` equally, capped by each bucket's capacity.

    Units that do not divide evenly go one each to unsaturated buckets in
    first-observed order.
    """
    level, rest = water_level(target, [capacity for _, capacity in active])
    shares: dict[CategoryKey, int] = {}
    for key, capacity in active:
        share = min(capacity, level)
        if rest and capacity > level:
            share += 1
            rest -= 1
        shares[key] = share
    return shares


class EqualShareTierRule:
    """Equal-share allocation, saturating tiers in policy order.

    Unlike :class:`ProportionalTierRule`, a small bucket fills as fast as a
    large one until it is exhausted.
    """

    name = "equal_share"

    def __call__(
        self,
        residual_units: int,
        buckets: Mapping[CategoryKey, Bucket],
        policy: Sequence[Tier],
    ) -> AllocationResult:
        return allocate_by_tier(self.name, residual_units, buckets, policy, equal_share_split)
