"""
ISO3 country and region codes.

Country boundaries are derived from FAO GAUL 2008 (2009 eds.). The ``SSA``
code selects all of sub-Saharan Africa.
"""

import csv
import io
from collections.abc import Mapping
from types import MappingProxyType
from typing import Iterable, Iterator

from hcapi.metadata.resources import read_data_text

REGION_SSA = "SSA"


class CountryCodes(Mapping):
    """
    Read-only mapping of ISO3 code to country or region label.

    Examples
    --------
    >>> codes = load_iso3()
    >>> codes["CIV"]
    "Côte d'Ivoire"
    >>> "SSA" in codes
    True
    """

    def __init__(self, labels: Mapping[str, str]):
        self._labels = MappingProxyType(dict(labels))

    def __getitem__(self, code: str) -> str:
        return self._labels[code]

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def unknown(self, codes: Iterable[str]) -> list[str]:
        """Return the codes that are not in the list, preserving order."""
        return [code for code in codes if code not in self._labels]

    def __repr__(self) -> str:
        return f"CountryCodes({len(self)} codes)"


def parse_iso3(text: str) -> CountryCodes:
    """Parse ``code,label`` CSV text into CountryCodes."""
    reader = csv.DictReader(io.StringIO(text))
    return CountryCodes({row["code"]: row["label"] for row in reader})


def load_iso3() -> CountryCodes:
    """Load the bundled ISO3 code list."""
    return parse_iso3(read_data_text("iso3.csv"))
