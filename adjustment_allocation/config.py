"""Run settings and tier policy for adjustment allocation.

Settings are plain data validated by pydantic and can be loaded from a YAML
file, so priority policies change without code changes.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from adjustment_allocation.units import DEFAULT_SCALE

logger = logging.getLogger(__name__)

UNASSIGNED_COUNTRY = "No Assigned Country Yet"
UNASSIGNED_FACILITY = "No Assigned Facility Yet"

REQUIRED_FIELDS = (
    "po",
    "work_city",
    "project",
    "planning_group",
    "role",
    "level",
    "language",
    "week",
    "country",
    "facility",
    "hours",
)

DEFAULT_FIELD_MAP: dict[str, str] = {
    "PO": "po",
    "Work City": "work_city",
    "Project": "project",
    "Planning Group": "planning_group",
    "Role": "role",
    "Level": "level",
    "Language": "language",
    "Week": "week",
    "Country": "country",
    "Facility": "facility",
    "Hours": "hours",
}


class Tier(BaseModel):
    """Named priority group of countries.

    Parameters
    ----------
    name : str
        Tier identifier, used as key in per-tier results.
    countries : tuple[str, ...]
        Member countries. Order has no effect on allocation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    countries: tuple[str, ...] = Field(min_length=1)

    @field_validator("countries")
    @classmethod
    def _unique_countries(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if len(set(value)) != len(value):
            raise ValueError("countries within a tier must be unique")
        return value


DEFAULT_TIERS = (
    Tier(name="offshore", countries=("Philippines", "India")),
    Tier(name="onshore", countries=("United States", "Canada", "Israel")),
)


class ReconcileSettings(BaseModel):
    """Validated settings for one reconciliation run.

    Parameters
    ----------
    scale : int
        Decimal places represented by one fixed-point unit.
    unassigned_country : str
        Country sentinel marking an unassigned-adjustment row.
    unassigned_facility : str
        Facility sentinel marking an unassigned-adjustment row.
    observed_label : str
        ``Type of Hours`` value for observed-capacity records.
    adjustment_label : str
        ``Type of Hours`` value for adjustment and placeholder records.
    tiers : list[Tier]
        Priority policy; earlier tiers saturate before later ones.
    field_map : dict[str, str]
        Input column name to internal field name.
    """

    model_config = ConfigDict(extra="forbid")

    scale: int = Field(DEFAULT_SCALE, ge=0, le=12)
    unassigned_country: str = UNASSIGNED_COUNTRY
    unassigned_facility: str = UNASSIGNED_FACILITY
    observed_label: str = "SRT"
    adjustment_label: str = "Max Bill Adjustment"
    tiers: list[Tier] = Field(default_factory=lambda: list(DEFAULT_TIERS), min_length=1)
    field_map: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_FIELD_MAP))

    @field_validator("tiers")
    @classmethod
    def _disjoint_tiers(cls, value: list[Tier]) -> list[Tier]:
        seen_names: set[str] = set()
        seen_countries: set[str] = set()
        for tier in value:
            if tier.name in seen_names:
                raise ValueError(f"duplicate tier name: {tier.name}")
            overlap = seen_countries.intersection(tier.countries)
            if overlap:
                raise ValueError(f"countries assigned to more than one tier: {sorted(overlap)}")
            seen_names.add(tier.name)
            seen_countries.update(tier.countries)
        return value

    @field_validator("field_map")
    @classmethod
    def _complete_field_map(cls, value: dict[str, str]) -> dict[str, str]:
        missing = set(REQUIRED_FIELDS).difference(value.values())
        if missing:
            raise ValueError(f"field_map does not map any column to: {sorted(missing)}")
        return value

    @model_validator(mode="after")
    def _sentinel_not_tiered(self) -> "ReconcileSettings":
        for tier in self.tiers:
            if self.unassigned_country in tier.countries:
                raise ValueError(f"tier {tier.name!r} contains the unassigned country sentinel")
        return self

    def policy(self) -> tuple[Tier, ...]:
        """Return the tier policy in priority order."""
        return tuple(self.tiers)


def load_settings(path: str | Path | None = None) -> ReconcileSettings:
    """Load and validate settings from a YAML file.

    Parameters
    ----------
    path : str | Path, optional
        YAML file with any subset of :class:`ReconcileSettings` fields.
        Defaults apply when ``None``.

    Returns
    -------
    ReconcileSettings

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ValueError
        If the file does not hold a mapping at top level.
    pydantic.ValidationError
        If any field fails validation.
    """
    if path is None:
        return ReconcileSettings()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a mapping: {path}")
    settings = ReconcileSettings.model_validate(data)
    logger.info(
        "Loaded settings from %s: %d tiers, scale=%d",
        path,
        len(settings.tiers),
        settings.scale,
    )
    return settings
