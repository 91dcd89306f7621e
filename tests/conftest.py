"""
Pytest configuration and shared fixtures.

This module contains pytest fixtures and configuration that are shared
across all test modules.
"""

import io
import zipfile
from unittest.mock import Mock

import pytest
from requests.structures import CaseInsensitiveDict

from hcapi.config import ClientConfig
from hcapi.metadata import load_reference_tables

BASE_URL = "http://hcapi.test"


def make_response(
    status_code: int = 200,
    headers: dict | None = None,
    json_data=None,
    content: bytes = b"",
    text: str = "",
    json_error: Exception | None = None,
) -> Mock:
    """
    Build a mock requests.Response.

    Parameters
    ----------
    status_code : int
        HTTP status code
    headers : dict, optional
        Response headers (case-insensitive, like requests)
    json_data : any, optional
        Value returned by ``response.json()``
    content : bytes
        Raw body
    text : str
        Text body
    json_error : Exception, optional
        Raised by ``response.json()`` instead of returning json_data
    """
    response = Mock()
    response.status_code = status_code
    response.headers = CaseInsensitiveDict(headers or {})
    response.content = content
    response.text = text
    response.elapsed = None
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def tables():
    """Provide the bundled reference tables."""
    return load_reference_tables()


@pytest.fixture
def config() -> ClientConfig:
    """Provide a client configuration pointing at a test endpoint."""
    return ClientConfig(base_url=BASE_URL, timeout=5)


@pytest.fixture
def mock_session() -> Mock:
    """Provide a mock requests.Session with no configured responses."""
    return Mock()


@pytest.fixture
def zip_bundle() -> bytes:
    """
    Provide a zip bundle like the one written by an OpenCPU session.

    Returns
    -------
    bytes
        Archive with a CSV file and a README inside a subdirectory
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("hcapi/cass_y.csv", "ISO3,cass_y\nCIV,8734.5\n")
        archive.writestr("hcapi/README.txt", "HarvestChoice CELL5M extract")
    return buffer.getvalue()


@pytest.fixture
def mock_png_data() -> bytes:
    """Provide minimal PNG data (signature only)."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
