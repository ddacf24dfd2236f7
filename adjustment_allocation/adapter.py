"""RECONCILE component: unassigned-adjustment allocation for billing rows."""

import logging
from collections.abc import Mapping
from dataclasses import asdict
from typing import Any, Protocol

from adjustment_allocation.aggregator import aggregate
from adjustment_allocation.config import ReconcileSettings
from adjustment_allocation.engine import allocate_line_items
from adjustment_allocation.engine._types import AllocationRule
from adjustment_allocation.engine.proportional import ProportionalTierRule
from adjustment_allocation.models import AllocationResult, BusinessKey, LineItem, ReconcileSummary
from adjustment_allocation.projection import project, to_rows

logger = logging.getLogger(__name__)


class PipelineComponent(Protocol):
    """Structural interface for pipeline stage components."""

    def execute(self, event: dict) -> dict:
        """Process event and return result."""
        ...


def _to_internal(row: Mapping[str, Any], field_map: Mapping[str, str]) -> dict[str, Any]:
    """Map an input row's column names to internal field names.

    Parameters
    ----------
    row : Mapping[str, Any]
        Row keyed by input column names.
    field_map : Mapping[str, str]
        Column name to internal field name. Unmapped columns pass through.

    Returns
    -------
    dict[str, Any]
        Row keyed by internal field names.
    """
    return {field_map.get(key, key): value for key, value in row.items()}


def summarize(
    line_items: Mapping[BusinessKey, LineItem],
    results: Mapping[BusinessKey, AllocationResult],
) -> ReconcileSummary:
    """Total residual, allocated and leftover units across a run."""
    return ReconcileSummary(
        line_items=len(line_items),
        adjusted_line_items=sum(1 for r in results.values() if r.residual_units),
        residual_units=sum(r.residual_units for r in results.values()),
        allocated_units=sum(r.total_allocated for r in results.values()),
        leftover_units=sum(r.leftover_units for r in results.values()),
    )


class ReconcileComponent(PipelineComponent):
    """Distribute unassigned adjustments across observed categories.

    Handles field mapping and aggregation, delegates each line item to the
    configured allocation rule, and projects the results to output rows.

    Parameters
    ----------
    rule : AllocationRule, optional
        Allocation rule to use. Defaults to :class:`ProportionalTierRule`.
    settings : ReconcileSettings, optional
        Tier policy, sentinels, labels and column mapping.
    """

    def __init__(
        self,
        rule: AllocationRule | None = None,
        settings: ReconcileSettings | None = None,
    ) -> None:
        self._rule = rule or ProportionalTierRule()
        self.settings = settings or ReconcileSettings()

    def execute(self, event: dict) -> dict:
        """Reconcile rows and return header, records and summary.

        Parameters
        ----------
        event : dict
            Must contain ``rows`` (iterable of dicts keyed by input column
            names).

        Returns
        -------
        dict
            ``header`` (list of column names), ``records`` (list of rows in
            header order, quantities as ``Decimal`` hours), ``summary``
            (serialized ``ReconcileSummary``) and ``rule``.
        """
        field_map = self.settings.field_map
        rows = (_to_internal(row, field_map) for row in event["rows"])

        line_items = aggregate(rows, self.settings)
        if not line_items:
            logger.warning("No rows with nonzero hours in input; returning empty output")

        results = allocate_line_items(line_items, self.settings.policy(), self._rule)
        records = project(line_items, results, self.settings)
        summary = summarize(line_items, results)

        if summary.leftover_units:
            logger.warning(
                "Reconciliation left %d units unassigned across %d line items",
                summary.leftover_units,
                sum(1 for r in results.values() if r.leftover_units),
            )
        else:
            logger.info(
                "Reconciliation complete: rule=%s, line_items=%d, adjusted=%d",
                self._rule.name,
                summary.line_items,
                summary.adjusted_line_items,
            )

        table = to_rows(records, self.settings.scale)
        return {
            "header": table[0],
            "records": table[1:],
            "summary": asdict(summary),
            "rule": self._rule.name,
        }
