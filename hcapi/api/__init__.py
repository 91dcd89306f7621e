"""
API module for hcapi.

- HarvestChoiceClient: two-step client for the HarvestChoice OpenCPU service
- query: shortcut using configuration from the environment
"""

from hcapi.api.client import HarvestChoiceClient, query

__all__ = ["HarvestChoiceClient", "query"]
