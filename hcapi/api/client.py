"""
HarvestChoice API client.

This module provides the HarvestChoiceClient class for querying the
HarvestChoice CELL5M API (an OpenCPU service) for 5-arc-minute spatial
indicators in sub-Saharan Africa.

Every query is two sequential requests:
1. POST the validated arguments to the hcapi computation endpoint; the
   response carries a session identifier in the ``X-ocpu-session`` header.
2. GET the session result, with a path that depends on the output kind:
   - json: ocpu/tmp/{session}/R/.val/json?dataframe=columns
   - plot: ocpu/tmp/{session}/graphics/last/png
   - zip:  ocpu/tmp/{session}/zip

Failed requests are not retried.

API documentation: http://harvestchoice.github.io/hc-api3/
"""

import logging
from typing import Any, Callable, Iterable, Optional, Union

import requests

from hcapi.config import ClientConfig
from hcapi.core.request import GroupBy, OutputKind, QueryRequest
from hcapi.core.result import ResponseInfo, Result
from hcapi.exceptions import TransportError, UpstreamError
from hcapi.metadata import REGION_SSA, ReferenceTables, load_reference_tables

logger = logging.getLogger(__name__)


COMPUTE_PATH = "ocpu/library/hcapi3/R/hcapi"
SESSION_HEADER = "X-ocpu-session"

# Retrieval path templates, one per output kind
RESULT_PATHS = {
    OutputKind.JSON: "ocpu/tmp/{session}/R/.val/json",
    OutputKind.PLOT: "ocpu/tmp/{session}/graphics/last/png",
    OutputKind.ZIP: "ocpu/tmp/{session}/zip",
}

RESULT_PARAMS = {
    OutputKind.JSON: {"dataframe": "columns"},
}


def _decode_json(response: requests.Response, url: str) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(
            f"API did not return valid JSON from {url}: {e}",
            status_code=response.status_code,
            url=url,
        ) from e


def _decode_bytes(response: requests.Response, url: str) -> bytes:
    return response.content


DECODERS: dict[OutputKind, Callable[[requests.Response, str], Any]] = {
    OutputKind.JSON: _decode_json,
    OutputKind.PLOT: _decode_bytes,
    OutputKind.ZIP: _decode_bytes,
}


class HarvestChoiceClient:
    """
    Client for the HarvestChoice CELL5M API.

    Parameters
    ----------
    config : ClientConfig, optional
        Service endpoint and timeout (default: ClientConfig())
    session : requests.Session, optional
        HTTP session to use for requests
    tables : ReferenceTables, optional
        Reference tables used for validation (default: bundled tables)

    Examples
    --------
    >>> client = HarvestChoiceClient()
    >>>
    >>> # Mean body mass index and cassava yield across provinces of Ghana
    >>> result = client.query(
    ...     ["bmi", "cass_y"], iso3=["GHA"], by=["ADM1_NAME_ALT"]
    ... )
    >>> frame = result.to_frame()
    >>>
    >>> # Cassava yield in Ivory Coast as GeoTIFF
    >>> result = client.query("cass_y", iso3="CIV", output_format="tif")
    >>> rasters = result.read_rasters("./data/cass_y")
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        tables: Optional[ReferenceTables] = None,
    ):
        self._config = config or ClientConfig()
        self._session = session
        self._tables = tables or load_reference_tables()

    @property
    def config(self) -> ClientConfig:
        """Return client configuration."""
        return self._config

    @property
    def tables(self) -> ReferenceTables:
        """Return the reference tables used for validation."""
        return self._tables

    @property
    def session(self) -> requests.Session:
        """Return the HTTP session, creating one on first use."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def query(
        self,
        indicators: Union[str, Iterable[str]],
        iso3: Union[str, Iterable[str]] = (REGION_SSA,),
        by: Optional[Union[str, GroupBy]] = None,
        output_format: Optional[str] = None,
        kind: Optional[Union[OutputKind, str]] = None,
        wkt: Optional[str] = None,
        **options: Any,
    ) -> Result:
        """
        Subset, summarize or download HarvestChoice indicators.

        Parameters
        ----------
        indicators : str or list[str]
            Indicator codes (see ``hcapi.metadata.load_catalog()``)
        iso3 : str or list[str], optional
            ISO3 country or region codes (default: "SSA", all of
            sub-Saharan Africa)
        by : str, list[str] or dict, optional
            Indicator codes to summarize by. Custom intervals may be given
            as a mapping, e.g. {"bmi": [0, 5, 10, 15, 20, 25]}
        output_format : str, optional
            File format for the server to write: csv, tif, dta, asc, grd
            or rds. Files are retrieved as a zip bundle.
        kind : OutputKind or str, optional
            "json" (tabular), "plot" (PNG) or "zip" (file bundle)
        wkt : str, optional
            WKT points or polygons to summarize indicators over
        **options
            Other API arguments (e.g. collapse)

        Returns
        -------
        Result
            Decoded content and response metadata

        Raises
        ------
        InvalidArgumentError
            If a code, format or kind is invalid (no request is sent)
        UpstreamError
            If the API returns an error status or an undecodable body
        TransportError
            If the API cannot be reached
        """
        request = QueryRequest.build(
            self._tables,
            indicators,
            iso3=iso3,
            by=by,
            output_format=output_format,
            kind=kind,
            wkt=wkt,
            **options,
        )
        return self.execute(request)

    def execute(self, request: QueryRequest) -> Result:
        """
        Send an already validated request.

        Parameters
        ----------
        request : QueryRequest
            Validated request

        Returns
        -------
        Result
            Decoded content and response metadata
        """
        session_id = self._compute(request)
        return self._retrieve(session_id, request.kind)

    # =========================================================================
    # HTTP steps
    # =========================================================================

    def _compute(self, request: QueryRequest) -> str:
        """POST the computation request and return its session id."""
        url = self._config.url(COMPUTE_PATH)
        logger.info(
            f"Querying {', '.join(request.indicators)} "
            f"for {', '.join(request.iso3)}"
        )
        logger.debug(f"POST {url}")

        response = self._send("post", url, json=request.to_body())

        if not 200 <= response.status_code < 300:
            raise self._upstream_error(response, url)

        session_id = response.headers.get(SESSION_HEADER)
        if not session_id:
            raise UpstreamError(
                f"API response from {url} has no {SESSION_HEADER} header",
                status_code=response.status_code,
                url=url,
            )

        logger.debug(f"Session: {session_id}")
        return session_id

    def _retrieve(self, session_id: str, kind: OutputKind) -> Result:
        """GET the session result in the requested kind and decode it."""
        url = self._config.url(RESULT_PATHS[kind].format(session=session_id))
        logger.debug(f"GET {url}")

        response = self._send("get", url, params=RESULT_PARAMS.get(kind))

        if response.status_code != 200:
            raise self._upstream_error(response, url)

        content = DECODERS[kind](response, url)
        return Result(
            content=content,
            kind=kind,
            session=session_id,
            response=ResponseInfo.from_response(response, url),
        )

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        headers = {"User-Agent": self._config.user_agent}
        try:
            return getattr(self.session, method)(
                url,
                headers=headers,
                timeout=self._config.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.warning(f"Request to {url} failed: {e}")
            raise TransportError(f"Request to {url} failed: {e}", url=url) from e

    @staticmethod
    def _upstream_error(response: requests.Response, url: str) -> UpstreamError:
        """Build an UpstreamError carrying the server message, if any."""
        server_message = _server_message(response)
        logger.warning(f"API request failed [{response.status_code}] {url}")
        message = f"API request failed [{response.status_code}]"
        if server_message:
            message += f"\n{server_message}"
        message += f"\n<{url}>"
        return UpstreamError(
            message,
            status_code=response.status_code,
            server_message=server_message,
            url=url,
        )

    def __repr__(self) -> str:
        """Return string representation of the client."""
        return f"{self.__class__.__name__}(base_url='{self._config.base_url}')"


def _server_message(response: requests.Response) -> Optional[str]:
    """Extract an error message from a JSON or plain-text error body."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if message:
            return str(message)

    text = response.text if isinstance(response.text, str) else ""
    text = text.strip()
    return text[:500] or None


def query(
    indicators: Union[str, Iterable[str]],
    iso3: Union[str, Iterable[str]] = (REGION_SSA,),
    by: Optional[Union[str, GroupBy]] = None,
    output_format: Optional[str] = None,
    kind: Optional[Union[OutputKind, str]] = None,
    wkt: Optional[str] = None,
    **options: Any,
) -> Result:
    """
    Query the API with configuration read from the environment.

    Shortcut for ``HarvestChoiceClient(ClientConfig.from_env()).query(...)``.
    """
    config = ClientConfig.from_env()
    with requests.Session() as session:
        client = HarvestChoiceClient(config=config, session=session)
        return client.query(
            indicators,
            iso3=iso3,
            by=by,
            output_format=output_format,
            kind=kind,
            wkt=wkt,
            **options,
        )
