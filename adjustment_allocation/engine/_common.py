"""Shared tier loop and exact-sum settlement for allocation rules.

Contains bucket selection per tier, the priority-ordered tier loop every
rule runs, and the final verification pass that keeps the residual
conserved to the unit.
"""

import logging
from collections.abc import Mapping, Sequence

from adjustment_allocation.config import Tier
from adjustment_allocation.engine._types import ActiveBuckets, TierSplit
from adjustment_allocation.models import AllocationResult, Bucket, CategoryKey

logger = logging.getLogger(__name__)


def check_residual(residual_units: int) -> None:
    """Reject residuals the aggregator can never produce.

    Raises
    ------
    ValueError
        If ``residual_units`` is not a non-negative integer.
    """
    if isinstance(residual_units, bool) or not isinstance(residual_units, int):
        raise ValueError(f"residual_units must be an integer, got {type(residual_units).__name__}")
    if residual_units < 0:
        raise ValueError(f"residual_units must be non-negative, got {residual_units}")


def eligible_buckets(
    buckets: Mapping[CategoryKey, Bucket],
    policy: Sequence[Tier],
) -> list[CategoryKey]:
    """List buckets that can absorb units, ordered by tier then first observation."""
    ordered: list[CategoryKey] = []
    for tier in policy:
        members = set(tier.countries)
        ordered.extend(key for key, b in buckets.items() if key.country in members and b.capacity_units > 0)
    return ordered


def active_buckets(
    buckets: Mapping[CategoryKey, Bucket],
    tier: Tier,
    allocated: Mapping[CategoryKey, int],
) -> ActiveBuckets:
    """Select the tier's buckets that still have spare capacity."""
    members = set(tier.countries)
    active: ActiveBuckets = []
    for key, bucket in buckets.items():
        if key.country not in members:
            continue
        spare = bucket.capacity_units - allocated.get(key, 0)
        if spare > 0:
            active.append((key, spare))
    return active


def settle(
    allocated: dict[CategoryKey, int],
    leftover: int,
    residual_units: int,
    buckets: Mapping[CategoryKey, Bucket],
    eligible: list[CategoryKey],
) -> int:
    """Nudge allocations one unit at a time until the residual is conserved.

    Units are added to eligible buckets with spare capacity in priority
    order, and removed from leftover first, then from allocations in
    reverse priority order. Mutates ``allocated``.

    Returns
    -------
    int
        The settled leftover.
    """
    discrepancy = residual_units - sum(allocated.values()) - leftover
    if discrepancy == 0:
        return leftover

    logger.warning("Allocation off by %d units; settling one unit at a time", discrepancy)
    while discrepancy > 0:
        changed = False
        for key in eligible:
            if discrepancy == 0:
                break
            if allocated.get(key, 0) < buckets[key].capacity_units:
                allocated[key] = allocated.get(key, 0) + 1
                discrepancy -= 1
                changed = True
        if not changed:
            # Every eligible bucket is full.
            leftover += discrepancy
            discrepancy = 0

    if discrepancy < 0:
        taken = min(leftover, -discrepancy)
        leftover -= taken
        discrepancy += taken
    while discrepancy < 0:
        changed = False
        for key in reversed(eligible):
            if discrepancy == 0:
                break
            if allocated.get(key, 0) > 0:
                allocated[key] -= 1
                discrepancy += 1
                changed = True
        if not changed:
            break
    return leftover


def allocate_by_tier(
    rule: str,
    residual_units: int,
    buckets: Mapping[CategoryKey, Bucket],
    policy: Sequence[Tier],
    split: TierSplit,
) -> AllocationResult:
    """Run ``split`` over each tier in priority order.

    A tier only receives units once every earlier tier is saturated,
    because each tier takes ``min(remaining, tier capacity)``.

    Parameters
    ----------
    rule : str
        Identifier recorded on the result.
    residual_units : int
        Non-negative residual to distribute.
    buckets : Mapping[CategoryKey, Bucket]
        Line item buckets in first-observed order.
    policy : Sequence[Tier]
        Tiers in priority order.
    split : TierSplit
        Within-tier distribution.

    Returns
    -------
    AllocationResult
    """
    check_residual(residual_units)

    allocated: dict[CategoryKey, int] = {}
    tier_units: dict[str, int] = {}
    remaining = residual_units

    for tier in policy:
        active = active_buckets(buckets, tier, allocated)
        if not active or remaining == 0:
            tier_units[tier.name] = 0
            continue
        tier_capacity = sum(spare for _, spare in active)
        target = min(remaining, tier_capacity)
        for key, units in split(target, active).items():
            allocated[key] = allocated.get(key, 0) + units
        tier_units[tier.name] = target
        remaining -= target

    eligible = eligible_buckets(buckets, policy)
    leftover = settle(allocated, remaining, residual_units, buckets, eligible)

    if leftover:
        logger.warning(
            "Residual of %d units exceeds available capacity; %d units left unassigned",
            residual_units,
            leftover,
        )

    return AllocationResult(
        rule=rule,
        residual_units=residual_units,
        allocated={key: allocated.get(key, 0) for key in eligible},
        leftover_units=leftover,
        tier_units=tier_units,
    )


def empty_result(rule: str, policy: Sequence[Tier]) -> AllocationResult:
    """Build an :class:`AllocationResult` for a line item with nothing to place."""
    return AllocationResult(
        rule=rule,
        residual_units=0,
        allocated={},
        leftover_units=0,
        tier_units={tier.name: 0 for tier in policy},
    )
