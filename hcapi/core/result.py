"""
Result wrapper for HarvestChoice API responses.

A Result holds the decoded payload of the retrieval request together with
the metadata of the raw HTTP response. It is created once per query and
never modified afterwards.
"""

import io
import logging
import zipfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd
import requests

from hcapi.core.request import OutputKind
from hcapi.exceptions import InvalidArgumentError, UpstreamError

logger = logging.getLogger(__name__)


# Raster files written by the server for the tif, asc and grd formats
RASTER_SUFFIXES = (".tif", ".tiff", ".grd", ".asc")

PREVIEW_ITEMS = 5


@dataclass(frozen=True)
class ResponseInfo:
    """Metadata of the HTTP response a Result was decoded from."""

    url: str
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    elapsed: Optional[float] = None

    @property
    def content_type(self) -> str:
        """Return the Content-Type header (empty if missing)."""
        for name, value in self.headers.items():
            if name.lower() == "content-type":
                return value
        return ""

    @classmethod
    def from_response(cls, response: requests.Response, url: str) -> "ResponseInfo":
        """Capture metadata from a requests response to ``url``."""
        elapsed = getattr(response, "elapsed", None)
        return cls(
            url=url,
            status_code=response.status_code,
            headers=dict(response.headers or {}),
            elapsed=elapsed.total_seconds() if isinstance(elapsed, timedelta) else None,
        )


@dataclass(frozen=True)
class Result:
    """
    Parsed response of a HarvestChoice API query.

    Attributes
    ----------
    content : Any
        Decoded JSON (json kind) or raw bytes (plot, zip kinds)
    kind : OutputKind
        Kind of the retrieval request
    session : str
        OpenCPU session identifier of the computation
    response : ResponseInfo
        Metadata of the retrieval response

    Examples
    --------
    >>> result = client.query(["cass_y"], iso3=["CIV"], by=["ADM1_NAME_ALT"])
    >>> print(result)
    >>> frame = result.to_frame()
    """

    content: Any
    kind: OutputKind
    session: str
    response: ResponseInfo

    # =========================================================================
    # Presentation
    # =========================================================================

    def summary(self) -> str:
        """
        Return a textual summary of the response and its content.

        Returns
        -------
        str
            Response metadata followed by a structural preview
        """
        lines = [
            f"<HarvestChoice {self.response.url}>",
            f"Status:    {self.response.status_code}",
            f"Session:   {self.session}",
            f"Kind:      {self.kind.value}",
        ]
        if self.response.content_type:
            lines.append(f"Type:      {self.response.content_type}")
        lines.append("Content:")
        lines.extend(f"  {line}" for line in _preview(self.content))
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary()

    def plot(self, **kwargs):
        """
        Plot the result as rasters.

        Not implemented: rendering is left to the application using the
        library. Request ``kind="plot"`` to get a server-rendered PNG.
        """
        raise NotImplementedError("Result.plot() is not implemented")

    # =========================================================================
    # Conversion
    # =========================================================================

    def to_frame(self) -> pd.DataFrame:
        """
        Return tabular content as a DataFrame.

        Column-oriented JSON (``{"col": [...]}``) and record lists
        (``[{...}, ...]``) are both accepted.

        Raises
        ------
        InvalidArgumentError
            If the result does not hold tabular JSON
        """
        if self.kind.is_binary:
            raise InvalidArgumentError(
                f"Cannot convert a {self.kind.value} result to a DataFrame"
            )
        if isinstance(self.content, Mapping):
            return pd.DataFrame(dict(self.content))
        if isinstance(self.content, list):
            return pd.DataFrame(self.content)
        raise InvalidArgumentError(
            f"Content of type {type(self.content).__name__} is not tabular"
        )

    def save(self, output_path: Union[str, Path]) -> Path:
        """
        Write binary content to a file atomically.

        Parameters
        ----------
        output_path : str or Path
            Target file (e.g. "./maps/cass_y.png" or "./cass_y.zip")

        Returns
        -------
        Path
            Path of the written file
        """
        data = self._require_bytes()
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = output_path.with_suffix(output_path.suffix + ".tmp")

        try:
            temp_path.write_bytes(data)
            temp_path.replace(output_path)
        except OSError:
            if temp_path.exists():
                temp_path.unlink()
            raise

        logger.info(f"Saved {len(data)} bytes to {output_path}")
        return output_path

    def extract(self, directory: Union[str, Path]) -> list[Path]:
        """
        Unpack a zip bundle into a directory.

        Parameters
        ----------
        directory : str or Path
            Destination directory (created if needed)

        Returns
        -------
        list[Path]
            Paths of the extracted files

        Raises
        ------
        InvalidArgumentError
            If the result is not a zip bundle
        UpstreamError
            If the bundle is not a valid zip archive
        """
        if self.kind is not OutputKind.ZIP:
            raise InvalidArgumentError(
                f"Only zip results can be extracted, got {self.kind.value}"
            )
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        try:
            with zipfile.ZipFile(io.BytesIO(self._require_bytes())) as archive:
                members = [m for m in archive.infolist() if not m.is_dir()]
                # extract() strips absolute and ".." components; keep its path
                paths = [Path(archive.extract(m, directory)) for m in members]
        except zipfile.BadZipFile as e:
            raise UpstreamError(
                f"Session {self.session} returned an invalid zip bundle: {e}",
                status_code=self.response.status_code,
                url=self.response.url,
            ) from e

        logger.info(f"Extracted {len(paths)} files to {directory}")
        return paths

    def read_rasters(self, directory: Union[str, Path]) -> dict[str, Any]:
        """
        Extract the bundle and read every raster it contains.

        Parameters
        ----------
        directory : str or Path
            Directory to extract the bundle into

        Returns
        -------
        dict[str, numpy.ndarray]
            First band of each raster keyed by file stem
        """
        import rasterio

        rasters = {}
        for path in self.extract(directory):
            if path.suffix.lower() not in RASTER_SUFFIXES:
                continue
            with rasterio.open(path) as src:
                rasters[path.stem] = src.read(1)
            logger.debug(f"Read raster {path.name}")
        return rasters

    def _require_bytes(self) -> bytes:
        if not isinstance(self.content, (bytes, bytearray)):
            raise InvalidArgumentError(
                f"A {self.kind.value} result does not hold binary content"
            )
        return bytes(self.content)


def _preview(content: Any) -> list[str]:
    """Describe the structure of decoded content, one line per element."""
    if isinstance(content, (bytes, bytearray)):
        return [f"<{len(content)} bytes>"]

    if isinstance(content, Mapping):
        lines = [f"{len(content)} columns"]
        for name, values in content.items():
            lines.append(f"${name}: {_describe_values(values)}")
        return lines

    if isinstance(content, list):
        lines = [f"list of {len(content)}"]
        for item in content[:PREVIEW_ITEMS]:
            lines.append(f"- {item!r}")
        if len(content) > PREVIEW_ITEMS:
            lines.append("- ...")
        return lines

    return [repr(content)]


def _describe_values(values: Any) -> str:
    if not isinstance(values, list):
        return f"{type(values).__name__} {values!r}"
    kinds = sorted({type(v).__name__ for v in values if v is not None}) or ["NoneType"]
    head = ", ".join(repr(v) for v in values[:PREVIEW_ITEMS])
    more = ", ..." if len(values) > PREVIEW_ITEMS else ""
    return f"{'/'.join(kinds)} [{len(values)}] {head}{more}"
