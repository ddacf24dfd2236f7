"""Fold raw rows into per-line-item buckets and unassigned residuals."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from adjustment_allocation.config import ReconcileSettings
from adjustment_allocation.models import BusinessKey, CategoryKey, LineItem
from adjustment_allocation.units import to_units

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    if value is None:
        return ""
    # Spreadsheet readers hand whole numbers back as floats (week 12 -> 12.0).
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def business_key(row: Mapping[str, Any]) -> BusinessKey:
    """Build the business key of a row; missing fields become ``""``."""
    return BusinessKey(*(_text(row.get(name)) for name in BusinessKey._fields))


def is_unassigned(row: Mapping[str, Any], settings: ReconcileSettings) -> bool:
    """Whether a row carries an unassigned adjustment rather than observed hours.

    The country alone decides: absent, empty or equal to its sentinel means
    unassigned, whatever the facility holds.
    """
    return _text(row.get("country")) in ("", settings.unassigned_country)


def category_key(row: Mapping[str, Any], settings: ReconcileSettings) -> CategoryKey:
    return CategoryKey(
        _text(row.get("country")),
        _text(row.get("facility")) or settings.unassigned_facility,
    )


def aggregate(
    rows: Iterable[Mapping[str, Any]],
    settings: ReconcileSettings | None = None,
) -> dict[BusinessKey, LineItem]:
    """Fold rows into line items keyed by business key.

    Parameters
    ----------
    rows : Iterable[Mapping[str, Any]]
        Rows using internal field names (see ``REQUIRED_FIELDS``).
    settings : ReconcileSettings, optional
        Sentinels and fixed-point scale. Defaults apply when ``None``.

    Returns
    -------
    dict[BusinessKey, LineItem]
        Line items in first-seen order. Rows whose quantity converts to
        zero are dropped and create neither a line item nor a bucket.
    """
    settings = settings or ReconcileSettings()
    line_items: dict[BusinessKey, LineItem] = {}
    n_rows = 0
    n_dropped = 0

    for n_rows, row in enumerate(rows, start=1):
        units = to_units(row.get("hours"), settings.scale)
        if units == 0:
            n_dropped += 1
            logger.debug("Dropping row %d with zero or non-numeric hours %r", n_rows, row.get("hours"))
            continue

        key = business_key(row)
        item = line_items.get(key)
        if item is None:
            item = line_items[key] = LineItem(key)

        if is_unassigned(row, settings):
            item.add_residual(abs(units))
        else:
            item.add_observed(category_key(row, settings), units)

    logger.info(
        "Aggregated %d rows into %d line items (%d dropped)",
        n_rows,
        len(line_items),
        n_dropped,
    )
    return line_items
