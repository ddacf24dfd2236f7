"""Turn line items and their allocations into ordered output records."""

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from adjustment_allocation.config import ReconcileSettings
from adjustment_allocation.models import AllocationResult, BusinessKey, CategoryKey, LineItem, OutputRecord

logger = logging.getLogger(__name__)

HEADER = [
    "Type of Hours",
    "PO",
    "Work City",
    "Project",
    "Planning Group",
    "Role",
    "Level",
    "Language",
    "Week",
    "Country",
    "Facility",
    "Total Hours",
]


def project(
    line_items: Mapping[BusinessKey, LineItem],
    results: Mapping[BusinessKey, AllocationResult],
    settings: ReconcileSettings | None = None,
) -> list[OutputRecord]:
    """Emit observed, adjustment and placeholder records.

    Parameters
    ----------
    line_items : Mapping[BusinessKey, LineItem]
        Aggregated line items.
    results : Mapping[BusinessKey, AllocationResult]
        Allocation per line item; missing keys emit observed records only.
    settings : ReconcileSettings, optional
        Labels and sentinels. Defaults apply when ``None``.

    Returns
    -------
    list[OutputRecord]
        Observed records sorted by business key and category, followed by
        adjustment and placeholder records sorted the same way.
        Adjustments carry the negated allocation; a placeholder carries the
        negated leftover against the unassigned sentinel pair.
    """
    settings = settings or ReconcileSettings()
    unassigned = CategoryKey(settings.unassigned_country, settings.unassigned_facility)
    observed: list[OutputRecord] = []
    adjustments: list[OutputRecord] = []

    for key, item in line_items.items():
        for category, bucket in item.buckets.items():
            observed.append(OutputRecord(settings.observed_label, key, category, bucket.observed_units))

        result = results.get(key)
        if result is None:
            continue
        for category, units in result.allocated.items():
            if units:
                adjustments.append(OutputRecord(settings.adjustment_label, key, category, -units))
        if result.leftover_units:
            adjustments.append(OutputRecord(settings.adjustment_label, key, unassigned, -result.leftover_units))

    observed.sort(key=lambda r: r.sort_key)
    adjustments.sort(key=lambda r: r.sort_key)
    logger.info("Projected %d observed and %d adjustment records", len(observed), len(adjustments))
    return observed + adjustments


def to_rows(records: Iterable[OutputRecord], scale: int) -> list[list[str | Decimal]]:
    """Render records as rows preceded by the fixed header."""
    return [list(HEADER)] + [record.to_row(scale) for record in records]
