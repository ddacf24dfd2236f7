"""Proportional largest-remainder rule.

Within a tier, each bucket receives a share of the tier's target
proportional to its spare capacity. Shares are floored, then the shortfall
goes one unit at a time to the buckets with the largest remainders. All
arithmetic is on integers, so the tier's shares sum exactly to its target.
"""

from collections.abc import Mapping, Sequence

from adjustment_allocation.config import Tier
from adjustment_allocation.engine._common import allocate_by_tier
from adjustment_allocation.engine._types import ActiveBuckets
from adjustment_allocation.models import AllocationResult, Bucket, CategoryKey


def largest_remainder_split(target: int, active: ActiveBuckets) -> dict[CategoryKey, int]:
    """Split ``target`` across buckets in proportion to their capacity.

    Parameters
    ----------
    target : int
        Units to place; at most the sum of capacities in ``active``.
    active : list[tuple[CategoryKey, int]]
        Buckets with their spare capacity, in first-observed order.

    Returns
    -------
    dict[CategoryKey, int]
        Shares summing to ``target``. Equal remainders favour the bucket
        observed first.
    """
    total = sum(capacity for _, capacity in active)
    capacities = dict(active)
    shares: dict[CategoryKey, int] = {}
    ranking: list[tuple[int, int, CategoryKey]] = []

    for index, (key, capacity) in enumerate(active):
        quotient, remainder = divmod(target * capacity, total)
        shares[key] = min(quotient, capacity)
        ranking.append((-remainder, index, key))

    shortfall = target - sum(shares.values())
    for _, _, key in sorted(ranking):
        if shortfall == 0:
            break
        if shares[key] < capacities[key]:
            shares[key] += 1
            shortfall -= 1
    return shares


class ProportionalTierRule:
    """Capacity-proportional allocation with largest-remainder rounding.

    Tiers are saturated strictly in policy order; within a tier the target
    is shared in proportion to each bucket's capacity.
    """

    name = "proportional"

    def __call__(
        self,
        residual_units: int,
        buckets: Mapping[CategoryKey, Bucket],
        policy: Sequence[Tier],
    ) -> AllocationResult:
        """Distribute one line item's residual.

        Parameters
        ----------
        residual_units : int
            Non-negative residual in fixed-point units.
        buckets : Mapping[CategoryKey, Bucket]
            Buckets in first-observed order.
        policy : Sequence[Tier]
            Tiers in priority order.

        Returns
        -------
        AllocationResult

        Raises
        ------
        ValueError
            If ``residual_units`` is negative.
        """
        return allocate_by_tier(self.name, residual_units, buckets, policy, largest_remainder_split)
