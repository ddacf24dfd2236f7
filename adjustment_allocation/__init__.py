"""Tiered allocation of unassigned billing adjustments."""

from adjustment_allocation.adapter import ReconcileComponent
from adjustment_allocation.aggregator import aggregate
from adjustment_allocation.config import ReconcileSettings, Tier, load_settings
from adjustment_allocation.engine import EqualShareTierRule, ProportionalTierRule, allocate_line_items
from adjustment_allocation.models import AllocationResult, Bucket, BusinessKey, CategoryKey, LineItem, OutputRecord
from adjustment_allocation.projection import HEADER, project

__all__ = [
    "HEADER",
    "AllocationResult",
    "Bucket",
    "BusinessKey",
    "CategoryKey",
    "EqualShareTierRule",
    "LineItem",
    "OutputRecord",
    "ProportionalTierRule",
    "ReconcileComponent",
    "ReconcileSettings",
    "Tier",
    "aggregate",
    "allocate_line_items",
    "load_settings",
    "project",
]
