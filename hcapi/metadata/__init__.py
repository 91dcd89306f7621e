"""
Static reference metadata for the HarvestChoice API.

The indicator catalog, ISO3 code list and colour palettes are loaded once
from the bundled data files and shared read-only.
"""

from dataclasses import dataclass
from functools import lru_cache

from hcapi.metadata.catalog import Indicator, IndicatorCatalog, load_catalog
from hcapi.metadata.iso3 import REGION_SSA, CountryCodes, load_iso3
from hcapi.metadata.palettes import Palettes, load_palettes


@dataclass(frozen=True)
class ReferenceTables:
    """Bundle of the three static lookup tables."""

    catalog: IndicatorCatalog
    iso3: CountryCodes
    palettes: Palettes


@lru_cache(maxsize=1)
def load_reference_tables() -> ReferenceTables:
    """Load the bundled tables (cached for the process lifetime)."""
    return ReferenceTables(
        catalog=load_catalog(),
        iso3=load_iso3(),
        palettes=load_palettes(),
    )


__all__ = [
    "Indicator",
    "IndicatorCatalog",
    "CountryCodes",
    "Palettes",
    "ReferenceTables",
    "REGION_SSA",
    "load_catalog",
    "load_iso3",
    "load_palettes",
    "load_reference_tables",
]
