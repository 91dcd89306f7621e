"""
HarvestChoice inventory of 5-arc-minute spatial indicators.

This module provides the IndicatorCatalog class holding metadata for the
HarvestChoice CELL5M collection of rasters for sub-Saharan Africa:
titles, category hierarchy, units, reference year and data source.

Catalog structure:
- cat1: Top-level domain (e.g. "Farming", "Demographics")
- cat2: Theme (e.g. "Crop Production", "Health and Nutrition")
- cat3: Sub-theme (e.g. "Yield", "Child Growth")

The bundled ``hcapi/data/catalog.csv`` is a curated subset of the published
CELL5M catalog (44 indicators). Codes outside it are rejected before any
request is sent. To cover more indicators, regenerate the file from the
published catalog keeping the same header row, or pass a custom catalog to
``parse_catalog`` and hand the resulting tables to the client.
"""

import csv
import io
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Optional

import pandas as pd

from hcapi.metadata.resources import read_data_text


@dataclass(frozen=True)
class Indicator:
    """Metadata record for a single indicator."""

    code: str
    title: str
    cat1: str
    cat2: str
    cat3: str
    unit: str
    type: str
    year: Optional[int]
    source: str

    @property
    def categories(self) -> tuple[str, str, str]:
        """Return the category hierarchy from broadest to narrowest."""
        return (self.cat1, self.cat2, self.cat3)

    @property
    def is_class(self) -> bool:
        """Return True for categorical (classified) indicators."""
        return self.type == "class"


class IndicatorCatalog(Mapping):
    """
    Read-only table of indicators keyed by indicator code.

    Parameters
    ----------
    indicators : Iterable[Indicator]
        Indicator records; codes must be unique

    Examples
    --------
    >>> catalog = load_catalog()
    >>> catalog["cass_y"].title
    'Cassava yield'
    >>> [i.code for i in catalog.search(cat2="Crop Production")][:2]
    ['cass_h', 'cass_y']
    """

    def __init__(self, indicators: Iterable[Indicator]):
        table = {}
        for indicator in indicators:
            if indicator.code in table:
                raise ValueError(f"Duplicate indicator code: {indicator.code}")
            table[indicator.code] = indicator
        self._table = MappingProxyType(table)

    def __getitem__(self, code: str) -> Indicator:
        return self._table[code]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    @property
    def codes(self) -> tuple[str, ...]:
        """Return all indicator codes in catalog order."""
        return tuple(self._table)

    def unknown(self, codes: Iterable[str]) -> list[str]:
        """Return the codes that are not in the catalog, preserving order."""
        return [code for code in codes if code not in self._table]

    def search(
        self,
        text: Optional[str] = None,
        cat1: Optional[str] = None,
        cat2: Optional[str] = None,
        cat3: Optional[str] = None,
    ) -> list[Indicator]:
        """
        Filter indicators by category and free text.

        Parameters
        ----------
        text : str, optional
            Case-insensitive substring matched against code, title and
            categories
        cat1, cat2, cat3 : str, optional
            Exact category values to match

        Returns
        -------
        list[Indicator]
            Matching indicators in catalog order
        """
        needle = text.lower() if text else None
        matches = []
        for indicator in self._table.values():
            if cat1 is not None and indicator.cat1 != cat1:
                continue
            if cat2 is not None and indicator.cat2 != cat2:
                continue
            if cat3 is not None and indicator.cat3 != cat3:
                continue
            if needle is not None:
                haystack = " ".join(
                    (indicator.code, indicator.title, *indicator.categories)
                ).lower()
                if needle not in haystack:
                    continue
            matches.append(indicator)
        return matches

    def categories(self) -> dict[str, dict[str, list[str]]]:
        """Return the cat1 -> cat2 -> [cat3] hierarchy."""
        tree: dict[str, dict[str, list[str]]] = {}
        for indicator in self._table.values():
            leaves = tree.setdefault(indicator.cat1, {}).setdefault(indicator.cat2, [])
            if indicator.cat3 not in leaves:
                leaves.append(indicator.cat3)
        return tree

    def to_frame(self) -> pd.DataFrame:
        """Return the catalog as a DataFrame indexed by code."""
        frame = pd.DataFrame([asdict(i) for i in self._table.values()])
        return frame.set_index("code")

    def __repr__(self) -> str:
        return f"IndicatorCatalog({len(self)} indicators)"


def parse_catalog(text: str) -> IndicatorCatalog:
    """
    Parse catalog CSV text.

    Parameters
    ----------
    text : str
        CSV with header ``code,title,cat1,cat2,cat3,unit,type,year,source``

    Returns
    -------
    IndicatorCatalog
        Parsed catalog
    """
    reader = csv.DictReader(io.StringIO(text))
    indicators = []
    for row in reader:
        year = row.get("year") or None
        indicators.append(
            Indicator(
                code=row["code"],
                title=row["title"],
                cat1=row["cat1"],
                cat2=row["cat2"],
                cat3=row["cat3"],
                unit=row.get("unit") or "",
                type=row.get("type") or "continuous",
                year=int(year) if year else None,
                source=row.get("source") or "",
            )
        )
    return IndicatorCatalog(indicators)


def load_catalog() -> IndicatorCatalog:
    """Load the bundled indicator catalog."""
    return parse_catalog(read_data_text("catalog.csv"))
