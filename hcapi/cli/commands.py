"""
Command-line interface for hcapi.

This module provides CLI commands for querying HarvestChoice indicators
and for browsing the bundled indicator catalog, country codes and
colour palettes.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from hcapi import __version__
from hcapi.api.client import HarvestChoiceClient
from hcapi.config import ClientConfig
from hcapi.core.request import OUTPUT_FORMATS, OutputKind
from hcapi.core.result import Result
from hcapi.exceptions import HcapiError
from hcapi.metadata import Indicator, load_reference_tables
from hcapi.metadata.iso3 import REGION_SSA


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="hcapi",
        description="Query HarvestChoice 5-arc-minute spatial indicators for Africa",
        epilog="Example: hcapi query cass_y --iso3 CIV --by ADM1_NAME_ALT",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log requests to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Query command
    query_parser = subparsers.add_parser(
        "query",
        help="Query indicators from the HarvestChoice API",
        description="Subset, summarize and download HarvestChoice indicators",
    )
    query_parser.add_argument(
        "indicators",
        nargs="+",
        metavar="CODE",
        help="Indicator codes (e.g., cass_y bmi)",
    )
    query_parser.add_argument(
        "--iso3",
        nargs="+",
        metavar="CODE",
        default=[REGION_SSA],
        help="ISO3 country or region codes (default: SSA)",
    )
    query_parser.add_argument(
        "--by",
        nargs="+",
        metavar="CODE",
        help="Indicator codes to summarize by (e.g., ADM1_NAME_ALT)",
    )
    query_parser.add_argument(
        "--format",
        "-f",
        choices=OUTPUT_FORMATS,
        help="File format for the server to write",
    )
    query_parser.add_argument(
        "--kind",
        "-k",
        choices=[k.value for k in OutputKind],
        help="Result kind: json table, plot PNG or zip bundle",
    )
    query_parser.add_argument(
        "--wkt",
        metavar="WKT",
        help="WKT points or polygons to summarize over",
    )
    query_parser.add_argument(
        "--output",
        "-o",
        metavar="PATH",
        help="Write the result to PATH (CSV for tables, raw bytes otherwise)",
    )
    query_parser.add_argument(
        "--base-url",
        metavar="URL",
        help="API base URL (default: $HCAPI_BASEURL or the public service)",
    )

    # Indicators command
    indicators_parser = subparsers.add_parser(
        "indicators",
        help="List indicators in the catalog",
    )
    indicators_parser.add_argument(
        "--category",
        "-c",
        metavar="TEXT",
        help="Only show indicators whose code, title or category contains TEXT",
    )

    # Show command
    show_parser = subparsers.add_parser(
        "show",
        help="Show full metadata for an indicator",
    )
    show_parser.add_argument("code", help="Indicator code (e.g., cass_y)")

    # Countries command
    subparsers.add_parser(
        "countries",
        help="List ISO3 country and region codes",
    )

    # Palettes command
    subparsers.add_parser(
        "palettes",
        help="List colour palettes",
    )

    return parser


def format_indicator(indicator: Indicator) -> str:
    """
    Format full indicator metadata for display.

    Parameters
    ----------
    indicator : Indicator
        Catalog record

    Returns
    -------
    str
        Formatted information string
    """
    lines = [
        f"Code:      {indicator.code}",
        f"Title:     {indicator.title}",
        f"Category:  {' > '.join(indicator.categories)}",
        f"Unit:      {indicator.unit or '-'}",
        f"Type:      {indicator.type}",
        f"Year:      {indicator.year if indicator.year is not None else '-'}",
        f"Source:    {indicator.source or '-'}",
    ]
    return "\n".join(lines)


def format_indicator_list(indicators: list[Indicator]) -> str:
    """Format indicators grouped by top-level category."""
    if not indicators:
        return "No matching indicators"

    lines = []
    current = None
    width = max(len(i.code) for i in indicators)
    for indicator in sorted(indicators, key=lambda i: i.cat1):
        if indicator.cat1 != current:
            if current is not None:
                lines.append("")
            current = indicator.cat1
            lines.append(f"{current}:")
        unit = f" ({indicator.unit})" if indicator.unit else ""
        lines.append(f"  {indicator.code.ljust(width)}  - {indicator.title}{unit}")
    return "\n".join(lines)


def write_result(result: Result, output: Path) -> Path:
    """
    Write a query result to a file.

    Tabular results are written as CSV; binary results are saved as-is.

    Parameters
    ----------
    result : Result
        Query result
    output : Path
        Target path

    Returns
    -------
    Path
        Path of the written file
    """
    if result.kind.is_binary:
        return result.save(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    result.to_frame().to_csv(output, index=False)
    return output


def cmd_query(args: argparse.Namespace) -> int:
    """
    Execute the query command.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command-line arguments

    Returns
    -------
    int
        Exit code (0 for success, 1 for error)
    """
    try:
        config = ClientConfig.from_env()
        if args.base_url:
            config = config.with_base_url(args.base_url)
        client = HarvestChoiceClient(config=config)

        result = client.query(
            args.indicators,
            iso3=args.iso3,
            by=args.by,
            output_format=args.format,
            kind=args.kind,
            wkt=args.wkt,
        )

        if args.output:
            path = write_result(result, Path(args.output))
            print(f"Saved to {path}")
        elif result.kind.is_binary:
            print(result.summary())
            print("Use --output to save binary results", file=sys.stderr)
        else:
            print(json.dumps(result.content, indent=2))

    except HcapiError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def cmd_indicators(args: argparse.Namespace) -> int:
    """List catalog indicators, optionally filtered."""
    catalog = load_reference_tables().catalog
    print(format_indicator_list(catalog.search(text=args.category)))
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Show metadata for a single indicator."""
    catalog = load_reference_tables().catalog
    if args.code not in catalog:
        print(f"Error: Unknown indicator code: {args.code!r}", file=sys.stderr)
        return 1
    print(format_indicator(catalog[args.code]))
    return 0


def cmd_countries(args: argparse.Namespace) -> int:
    """List ISO3 codes."""
    iso3 = load_reference_tables().iso3
    print(f"Available country and region codes ({len(iso3)}):")
    print()
    for code, label in iso3.items():
        print(f"  {code}  - {label}")
    return 0


def cmd_palettes(args: argparse.Namespace) -> int:
    """List colour palettes."""
    palettes = load_reference_tables().palettes
    for name, colors in palettes.items():
        print(f"  {name}: {' '.join(colors)}")
    return 0


COMMANDS = {
    "query": cmd_query,
    "indicators": cmd_indicators,
    "show": cmd_show,
    "countries": cmd_countries,
    "palettes": cmd_palettes,
}


def main(args: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Parameters
    ----------
    args : list[str], optional
        Command-line arguments (defaults to sys.argv[1:])

    Returns
    -------
    int
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    if parsed_args.command is None:
        parser.print_help()
        return 0

    handler = COMMANDS.get(parsed_args.command)
    if handler is None:
        # Unknown command (shouldn't happen with argparse)
        print(f"Unknown command: {parsed_args.command}", file=sys.stderr)
        return 1

    return handler(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
