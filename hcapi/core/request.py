"""
Query request model for the HarvestChoice API.

This module validates query arguments against the static reference tables
and encodes the JSON body of the computation request. Validation happens
entirely locally, before any network call.

Output kinds:
- json: tabular result fetched as column-oriented JSON
- plot: rendered PNG of the last graphic produced by the session
- zip:  packaged bundle of the files written by the session
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Optional, Union

from hcapi.exceptions import InvalidArgumentError
from hcapi.metadata import REGION_SSA, ReferenceTables

logger = logging.getLogger(__name__)


# File formats the server can write
OUTPUT_FORMATS = ("csv", "tif", "dta", "asc", "grd", "rds")

# Body fields owned by the request itself
RESERVED_FIELDS = ("var", "iso3", "by", "format", "wkt")

GroupBy = Union[Sequence[str], Mapping[str, Sequence[float]]]


class OutputKind(str, Enum):
    """Shape of the result retrieved by the follow-up request."""

    JSON = "json"
    PLOT = "plot"
    ZIP = "zip"

    @classmethod
    def parse(cls, value: Union["OutputKind", str]) -> "OutputKind":
        """
        Convert a string to an OutputKind.

        Raises
        ------
        InvalidArgumentError
            If the value is not a known kind
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidArgumentError(
                f"Invalid output kind: {value!r}. "
                f"Available: {', '.join(k.value for k in cls)}"
            ) from None

    @property
    def is_binary(self) -> bool:
        """Return True when the retrieved payload is raw bytes."""
        return self is not OutputKind.JSON


def _as_list(value: Union[str, Iterable[str]]) -> list[str]:
    if isinstance(value, str):
        return [value]
    return list(value)


def _format_codes(codes: Iterable[str]) -> str:
    return ", ".join(repr(c) for c in codes)


@dataclass(frozen=True)
class QueryRequest:
    """
    Validated arguments of a single API query.

    Use :meth:`build` to construct; it checks every code against the
    reference tables.

    Attributes
    ----------
    indicators : tuple[str, ...]
        Indicator codes to summarize
    iso3 : tuple[str, ...]
        Country or region codes to scope the query
    by : tuple or dict, optional
        Indicator codes to group by, or a mapping of code to custom breaks
    output_format : str, optional
        File format the server should write
    kind : OutputKind
        Shape of the retrieved result
    wkt : str, optional
        WKT points or polygons to summarize over
    options : dict
        Additional arguments passed through to the API
    """

    indicators: tuple[str, ...]
    iso3: tuple[str, ...] = (REGION_SSA,)
    by: Optional[Union[tuple[str, ...], dict[str, tuple[float, ...]]]] = None
    output_format: Optional[str] = None
    kind: OutputKind = OutputKind.JSON
    wkt: Optional[str] = None
    options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        tables: ReferenceTables,
        indicators: Union[str, Iterable[str]],
        iso3: Union[str, Iterable[str]] = (REGION_SSA,),
        by: Optional[Union[str, GroupBy]] = None,
        output_format: Optional[str] = None,
        kind: Optional[Union[OutputKind, str]] = None,
        wkt: Optional[str] = None,
        **options: Any,
    ) -> "QueryRequest":
        """
        Validate arguments and build a request.

        Parameters
        ----------
        tables : ReferenceTables
            Catalog and code list used for validation
        indicators : str or list[str]
            Indicator codes (e.g. ["cass_y", "bmi"])
        iso3 : str or list[str], optional
            ISO3 country or region codes (default: ["SSA"])
        by : str, list[str] or dict, optional
            Indicator codes to group by, or {code: [breaks]} for custom
            intervals (e.g. {"bmi": [0, 5, 10, 15, 20, 25]})
        output_format : str, optional
            One of csv, tif, dta, asc, grd, rds
        kind : OutputKind or str, optional
            Result kind; defaults to "zip" when output_format is given,
            else "json"
        wkt : str, optional
            WKT representation of points or polygons
        **options
            Passthrough API arguments (e.g. collapse)

        Returns
        -------
        QueryRequest
            Validated request

        Raises
        ------
        InvalidArgumentError
            If any argument is not found in its reference table
        """
        indicator_list = _as_list(indicators)
        if not indicator_list:
            raise InvalidArgumentError("At least one indicator code is required")
        unknown = tables.catalog.unknown(indicator_list)
        if unknown:
            raise InvalidArgumentError(
                f"Unknown indicator code(s): {_format_codes(unknown)}. "
                "See hcapi.metadata.load_catalog() for valid codes."
            )

        iso3_list = _as_list(iso3)
        if not iso3_list:
            raise InvalidArgumentError("At least one ISO3 code is required")
        unknown = tables.iso3.unknown(iso3_list)
        if unknown:
            raise InvalidArgumentError(
                f"Unknown ISO3 code(s): {_format_codes(unknown)}. "
                "See hcapi.metadata.load_iso3() for valid codes."
            )

        by_value = cls._validate_by(tables, by)

        if output_format is not None and output_format not in OUTPUT_FORMATS:
            raise InvalidArgumentError(
                f"Invalid output format: {output_format!r}. "
                f"Available: {', '.join(OUTPUT_FORMATS)}"
            )

        if kind is None:
            kind = OutputKind.ZIP if output_format else OutputKind.JSON
        else:
            kind = OutputKind.parse(kind)

        if kind is OutputKind.PLOT and output_format is not None:
            raise InvalidArgumentError(
                f"A plot cannot be requested together with output format "
                f"{output_format!r}; use kind='zip' to retrieve the files"
            )

        if wkt is not None and (not isinstance(wkt, str) or not wkt.strip()):
            raise InvalidArgumentError("wkt must be a non-empty WKT string")

        clashes = [name for name in options if name in RESERVED_FIELDS]
        if clashes:
            raise InvalidArgumentError(
                f"Options may not override request fields: {', '.join(clashes)}"
            )

        return cls(
            indicators=tuple(indicator_list),
            iso3=tuple(iso3_list),
            by=by_value,
            output_format=output_format,
            kind=kind,
            wkt=wkt,
            options=dict(options),
        )

    @staticmethod
    def _validate_by(
        tables: ReferenceTables, by: Optional[Union[str, GroupBy]]
    ) -> Optional[Union[tuple[str, ...], dict[str, tuple[float, ...]]]]:
        """Check group-by codes (and custom breaks) against the catalog."""
        if by is None:
            return None

        if isinstance(by, Mapping):
            unknown = tables.catalog.unknown(by.keys())
            if unknown:
                raise InvalidArgumentError(
                    f"Unknown group-by code(s): {_format_codes(unknown)}"
                )
            intervals = {}
            for code, breaks in by.items():
                if isinstance(breaks, (str, bytes)) or not isinstance(
                    breaks, Iterable
                ):
                    raise InvalidArgumentError(
                        f"Breaks for {code!r} must be a non-empty list of numbers"
                    )
                breaks = tuple(breaks)
                if not breaks or not all(
                    isinstance(b, Real) and not isinstance(b, bool) for b in breaks
                ):
                    raise InvalidArgumentError(
                        f"Breaks for {code!r} must be a non-empty list of numbers"
                    )
                intervals[code] = breaks
            return intervals

        by_list = _as_list(by)
        if not by_list:
            return None
        unknown = tables.catalog.unknown(by_list)
        if unknown:
            raise InvalidArgumentError(
                f"Unknown group-by code(s): {_format_codes(unknown)}"
            )
        return tuple(by_list)

    @property
    def body_format(self) -> Optional[str]:
        """Value of the ``format`` field sent to the server."""
        if self.output_format is not None:
            return self.output_format
        if self.kind is OutputKind.PLOT:
            return "plot"
        return None

    def to_body(self) -> dict[str, Any]:
        """
        Encode the JSON body of the computation request.

        Unset fields are omitted.

        Returns
        -------
        dict
            Body with keys var, iso3 and, when set, by, format, wkt and
            passthrough options
        """
        body: dict[str, Any] = {
            "var": list(self.indicators),
            "iso3": list(self.iso3),
        }
        if self.by is not None:
            if isinstance(self.by, dict):
                body["by"] = {code: list(b) for code, b in self.by.items()}
            else:
                body["by"] = list(self.by)
        if self.body_format is not None:
            body["format"] = self.body_format
        if self.wkt is not None:
            body["wkt"] = self.wkt
        body.update(self.options)

        logger.debug(f"Encoded request body: {body}")
        return body
