"""Core request and result models."""

from hcapi.core.request import OUTPUT_FORMATS, OutputKind, QueryRequest
from hcapi.core.result import ResponseInfo, Result

__all__ = ["OUTPUT_FORMATS", "OutputKind", "QueryRequest", "ResponseInfo", "Result"]
