"""
CLI module for hcapi.

This module provides command-line interface for querying the
HarvestChoice API and browsing the indicator catalog.
"""

from hcapi.cli.commands import main

__all__ = ["main"]
