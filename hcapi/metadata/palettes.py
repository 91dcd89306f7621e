"""
HarvestChoice colour palettes for mapping.

An (expanding) list of named palettes of HEX colours used to symbolize
HarvestChoice indicators.
"""

import json
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Iterator

from hcapi.metadata.resources import read_data_text

HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class Palettes(Mapping):
    """Read-only mapping of palette name to a tuple of HEX colours."""

    def __init__(self, palettes: Mapping[str, list[str]]):
        table = {}
        for name, colors in palettes.items():
            bad = [c for c in colors if not HEX_COLOR.match(c)]
            if bad:
                raise ValueError(f"Palette {name!r} has invalid colours: {bad}")
            table[name] = tuple(colors)
        self._table = MappingProxyType(table)

    def __getitem__(self, name: str) -> tuple[str, ...]:
        return self._table[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"Palettes({', '.join(self._table)})"


def load_palettes() -> Palettes:
    """Load the bundled palette table."""
    return Palettes(json.loads(read_data_text("palettes.json")))
