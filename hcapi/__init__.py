"""
hcapi - Client for the HarvestChoice CELL5M spatial indicators API.

This package queries the HarvestChoice API for 5-arc-minute spatial
indicators in sub-Saharan Africa (crop production, health and nutrition,
poverty, agro-ecology) and reshapes the responses into tables, rasters
or files. It also ships the indicator catalog, ISO3 country codes and
colour palettes as static reference tables.

Example usage::

    from hcapi import HarvestChoiceClient, ClientConfig

    client = HarvestChoiceClient(ClientConfig(base_url="http://hcapi.harvestchoice.org"))

    # Cassava yield by province in Ivory Coast
    result = client.query("cass_y", iso3="CIV", by="ADM1_NAME_ALT")
    print(result)
    frame = result.to_frame()

    # Look up indicator metadata
    from hcapi import load_catalog
    catalog = load_catalog()
    print(catalog["cass_y"].unit)
"""

from hcapi.api.client import HarvestChoiceClient, query
from hcapi.config import ClientConfig
from hcapi.core.request import OUTPUT_FORMATS, OutputKind, QueryRequest
from hcapi.core.result import ResponseInfo, Result
from hcapi.exceptions import (
    HcapiError,
    InvalidArgumentError,
    TransportError,
    UpstreamError,
)
from hcapi.metadata import (
    Indicator,
    IndicatorCatalog,
    load_catalog,
    load_iso3,
    load_palettes,
    load_reference_tables,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "HarvestChoiceClient",
    "ClientConfig",
    "query",
    # Requests and results
    "QueryRequest",
    "OutputKind",
    "OUTPUT_FORMATS",
    "Result",
    "ResponseInfo",
    # Metadata
    "Indicator",
    "IndicatorCatalog",
    "load_catalog",
    "load_iso3",
    "load_palettes",
    "load_reference_tables",
    # Exceptions
    "HcapiError",
    "InvalidArgumentError",
    "UpstreamError",
    "TransportError",
    # Version
    "__version__",
]
