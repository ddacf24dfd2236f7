"""Data models for the adjustment allocation pipeline."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import NamedTuple

from adjustment_allocation.units import DEFAULT_SCALE, from_units


class BusinessKey(NamedTuple):
    """Identifying fields of one billing line item."""

    po: str
    work_city: str
    project: str
    planning_group: str
    role: str
    level: str
    language: str
    week: str


class CategoryKey(NamedTuple):
    """Category a bucket of capacity belongs to."""

    country: str
    facility: str


@dataclass
class Bucket:
    """Observed quantity for one category of a line item.

    Parameters
    ----------
    category : CategoryKey
        Country and facility the quantity was recorded against.
    observed_units : int
        Signed sum of all matching rows, in fixed-point units.
    """

    category: CategoryKey
    observed_units: int = 0

    @property
    def capacity_units(self) -> int:
        """Units this bucket can absorb; never negative."""
        return max(self.observed_units, 0)


@dataclass
class LineItem:
    """All buckets and the unassigned residual sharing one business key.

    Parameters
    ----------
    key : BusinessKey
        Identifying fields shared by every folded row.
    buckets : dict[CategoryKey, Bucket]
        Buckets in the order their categories were first observed.
    residual_units : int
        Unassigned adjustment to distribute, always non-negative.
    """

    key: BusinessKey
    buckets: dict[CategoryKey, Bucket] = field(default_factory=dict)
    residual_units: int = 0

    def add_observed(self, category: CategoryKey, units: int) -> None:
        bucket = self.buckets.get(category)
        if bucket is None:
            bucket = self.buckets[category] = Bucket(category)
        bucket.observed_units += units

    def add_residual(self, units: int) -> None:
        self.residual_units += abs(units)

    @property
    def total_capacity(self) -> int:
        return sum(b.capacity_units for b in self.buckets.values())


@dataclass
class AllocationResult:
    """Outcome of distributing one line item's residual.

    Parameters
    ----------
    rule : str
        Identifier of the allocation rule that produced the result.
    residual_units : int
        Residual the allocation started from.
    allocated : dict[CategoryKey, int]
        Units assigned to each eligible bucket, in policy order.
    leftover_units : int
        Part of the residual no bucket could absorb.
    tier_units : dict[str, int]
        Units placed by each tier, keyed by tier name.
    """

    rule: str
    residual_units: int
    allocated: dict[CategoryKey, int]
    leftover_units: int
    tier_units: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate non-negativity and exact conservation of the residual."""
        if self.leftover_units < 0 or any(units < 0 for units in self.allocated.values()):
            raise ValueError("allocations and leftover must be non-negative")
        if self.total_allocated + self.leftover_units != self.residual_units:
            raise ValueError("allocated units plus leftover must equal the residual")

    @property
    def total_allocated(self) -> int:
        return sum(self.allocated.values())


@dataclass
class ReconcileSummary:
    """Run-level totals across all line items, in fixed-point units."""

    line_items: int
    adjusted_line_items: int
    residual_units: int
    allocated_units: int
    leftover_units: int

    def __post_init__(self) -> None:
        if self.allocated_units + self.leftover_units != self.residual_units:
            raise ValueError("allocated_units plus leftover_units must equal residual_units")


@dataclass(frozen=True)
class OutputRecord:
    """One flat output row: observed quantity, adjustment or placeholder."""

    hours_type: str
    key: BusinessKey
    category: CategoryKey
    units: int

    @property
    def sort_key(self) -> tuple[str, ...]:
        return (*self.key, *self.category)

    def to_row(self, scale: int = DEFAULT_SCALE) -> list[str | Decimal]:
        return [self.hours_type, *self.key, *self.category, from_units(self.units, scale)]
