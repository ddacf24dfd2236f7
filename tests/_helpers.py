"""Category keys and bucket builders shared across test modules."""

from adjustment_allocation.models import Bucket, CategoryKey

PH = CategoryKey("Philippines", "Manila")
IN = CategoryKey("India", "Pune")
US = CategoryKey("United States", "Austin")
CA = CategoryKey("Canada", "Toronto")
IL = CategoryKey("Israel", "Haifa")


def make_buckets(capacities):
    """Bucket map from ``{CategoryKey: units}``, preserving order."""
    return {key: Bucket(key, units) for key, units in capacities.items()}
