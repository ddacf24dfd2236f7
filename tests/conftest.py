"""Shared fixtures for adjustment allocation tests."""

import pytest

from adjustment_allocation.config import ReconcileSettings


@pytest.fixture()
def settings():
    return ReconcileSettings()


@pytest.fixture()
def policy(settings):
    return settings.policy()


@pytest.fixture()
def sample_rows():
    """Rows keyed by input column names, as read from the source sheet."""
    base = {
        "PO": "PO-1001",
        "Work City": "Manila",
        "Project": "ALPHA",
        "Planning Group": "PG-7",
        "Role": "Analyst",
        "Level": "L2",
        "Language": "English",
        "Week": "2024-W05",
    }
    return [
        {**base, "Country": "Philippines", "Facility": "Manila", "Hours": 60},
        {**base, "Country": "Philippines", "Facility": "Manila", "Hours": "40"},
        {**base, "Country": "India", "Facility": "Pune", "Hours": 50.0},
        {**base, "Country": "United States", "Facility": "Austin", "Hours": 30},
        {**base, "Country": "No Assigned Country Yet", "Facility": "No Assigned Facility Yet", "Hours": -120},
        {**base, "Country": "No Assigned Country Yet", "Hours": -40},
        {**base, "Week": "2024-W06", "Country": "India", "Facility": "Pune", "Hours": 8},
        {**base, "Week": "2024-W06", "Country": "Canada", "Facility": "Toronto", "Hours": "n/a"},
    ]
