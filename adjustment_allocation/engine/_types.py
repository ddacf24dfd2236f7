"""Type definitions for the allocation rule protocol."""

from collections.abc import Mapping, Sequence
from typing import Protocol

from adjustment_allocation.config import Tier
from adjustment_allocation.models import AllocationResult, Bucket, CategoryKey

# (category, spare capacity) pairs of one tier, in first-observed order.
ActiveBuckets = list[tuple[CategoryKey, int]]


class TierSplit(Protocol):
    """Split one tier's target across its active buckets.

    Implementations must return shares that sum to ``target`` and never
    exceed a bucket's spare capacity, given ``target`` at most the tier's
    total spare capacity.
    """

    def __call__(self, target: int, active: ActiveBuckets) -> dict[CategoryKey, int]: ...


class AllocationRule(Protocol):
    """Protocol for tiered allocation rules.

    Implementations receive one line item's residual and bucket map and
    return an :class:`AllocationResult` that conserves the residual.
    """

    name: str

    def __call__(
        self,
        residual_units: int,
        buckets: Mapping[CategoryKey, Bucket],
        policy: Sequence[Tier],
    ) -> AllocationResult: ...
