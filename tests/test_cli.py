"""
Unit tests for CLI module.

This module contains tests for command-line interface commands,
verifying correct parsing and output formatting.
"""

import json
from unittest.mock import patch

import pytest

from hcapi.cli.commands import (
    create_parser,
    format_indicator,
    format_indicator_list,
    main,
    write_result,
)
from hcapi.core.request import OutputKind
from hcapi.core.result import ResponseInfo, Result
from hcapi.exceptions import InvalidArgumentError, UpstreamError
from hcapi.metadata import load_catalog


def make_result(content, kind=OutputKind.JSON):
    """Build a Result for CLI output tests."""
    return Result(
        content=content,
        kind=kind,
        session="s1",
        response=ResponseInfo(url="http://hcapi.test/x", status_code=200),
    )


class TestCreateParser:
    """Tests for create_parser()."""

    def test_creates_parser(self):
        """Test that parser is created."""
        parser = create_parser()
        assert parser.prog == "hcapi"

    def test_has_version_argument(self):
        """Test that --version is available."""
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["--version"])

    def test_query_defaults(self):
        """Test query subcommand defaults."""
        args = create_parser().parse_args(["query", "cass_y"])
        assert args.command == "query"
        assert args.indicators == ["cass_y"]
        assert args.iso3 == ["SSA"]
        assert args.by is None
        assert args.format is None
        assert args.kind is None

    def test_query_all_options(self):
        """Test query subcommand with every option."""
        args = create_parser().parse_args(
            [
                "query", "bmi", "cass_y",
                "--iso3", "GHA", "TZA",
                "--by", "ADM1_NAME_ALT",
                "--format", "csv",
                "--kind", "zip",
                "--output", "out.zip",
                "--base-url", "http://local",
            ]
        )
        assert args.indicators == ["bmi", "cass_y"]
        assert args.iso3 == ["GHA", "TZA"]
        assert args.by == ["ADM1_NAME_ALT"]
        assert args.format == "csv"
        assert args.kind == "zip"
        assert args.output == "out.zip"
        assert args.base_url == "http://local"

    def test_query_rejects_unknown_format(self):
        """Test that argparse rejects unknown formats."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["query", "cass_y", "--format", "xlsx"])


class TestFormatting:
    """Tests for formatting helpers."""

    def test_format_indicator(self):
        """Test full indicator metadata."""
        text = format_indicator(load_catalog()["cass_y"])
        assert "Code:      cass_y" in text
        assert "Category:  Farming > Crop Production > Yield" in text
        assert "Unit:      kg/ha" in text

    def test_format_indicator_list_groups(self):
        """Test grouping by top-level category."""
        catalog = load_catalog()
        text = format_indicator_list(catalog.search(text="yield"))
        assert text.startswith("Farming:")
        assert "cass_y" in text
        assert "(kg/ha)" in text

    def test_format_empty_list(self):
        """Test empty listing."""
        assert format_indicator_list([]) == "No matching indicators"


class TestWriteResult:
    """Tests for write_result()."""

    def test_tabular_written_as_csv(self, tmp_path):
        """Test CSV output for JSON results."""
        result = make_result({"ISO3": ["CIV"], "cass_y": [8734.5]})
        path = write_result(result, tmp_path / "out" / "cass_y.csv")
        assert path.read_text().splitlines() == ["ISO3,cass_y", "CIV,8734.5"]

    def test_binary_written_as_is(self, tmp_path, mock_png_data):
        """Test raw output for binary results."""
        result = make_result(mock_png_data, OutputKind.PLOT)
        path = write_result(result, tmp_path / "cass_y.png")
        assert path.read_bytes() == mock_png_data


class TestMain:
    """Tests for main()."""

    def test_no_command_prints_help(self, capsys):
        """Test that running without a command shows help."""
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_indicators(self, capsys):
        """Test listing indicators."""
        assert main(["indicators"]) == 0
        out = capsys.readouterr().out
        assert "cass_y" in out
        assert "Demographics:" in out

    def test_indicators_filtered(self, capsys):
        """Test filtering indicators."""
        assert main(["indicators", "--category", "maize"]) == 0
        out = capsys.readouterr().out
        assert "maiz_y" in out
        assert "cass_y" not in out

    def test_show(self, capsys):
        """Test showing indicator metadata."""
        assert main(["show", "bmi"]) == 0
        assert "Body mass index" in capsys.readouterr().out

    def test_show_unknown(self, capsys):
        """Test showing an unknown indicator."""
        assert main(["show", "nope"]) == 1
        assert "Unknown indicator code" in capsys.readouterr().err

    def test_countries(self, capsys):
        """Test listing country codes."""
        assert main(["countries"]) == 0
        out = capsys.readouterr().out
        assert "SSA  - Sub-Saharan Africa" in out
        assert "CIV" in out

    def test_palettes(self, capsys):
        """Test listing palettes."""
        assert main(["palettes"]) == 0
        assert "yield:" in capsys.readouterr().out

    @patch("hcapi.cli.commands.HarvestChoiceClient")
    def test_query_prints_json(self, mock_client_class, capsys):
        """Test that tabular results are printed as JSON."""
        content = {"ISO3": ["CIV"], "cass_y": [8734.5]}
        mock_client_class.return_value.query.return_value = make_result(content)

        assert main(["query", "cass_y", "--iso3", "CIV"]) == 0

        assert json.loads(capsys.readouterr().out) == content
        mock_client_class.return_value.query.assert_called_once_with(
            ["cass_y"],
            iso3=["CIV"],
            by=None,
            output_format=None,
            kind=None,
            wkt=None,
        )

    @patch("hcapi.cli.commands.HarvestChoiceClient")
    def test_query_base_url(self, mock_client_class):
        """Test that --base-url overrides the configured endpoint."""
        mock_client_class.return_value.query.return_value = make_result([])

        main(["query", "cass_y", "--base-url", "http://local:8004"])

        config = mock_client_class.call_args.kwargs["config"]
        assert config.base_url == "http://local:8004"

    @patch("hcapi.cli.commands.HarvestChoiceClient")
    def test_query_output(self, mock_client_class, capsys, tmp_path, mock_png_data):
        """Test saving a binary result."""
        mock_client_class.return_value.query.return_value = make_result(
            mock_png_data, OutputKind.PLOT
        )
        output = tmp_path / "plot.png"

        assert main(["query", "cass_y", "--kind", "plot", "-o", str(output)]) == 0

        assert output.read_bytes() == mock_png_data
        assert "Saved to" in capsys.readouterr().out

    @patch("hcapi.cli.commands.HarvestChoiceClient")
    def test_query_binary_without_output(self, mock_client_class, capsys):
        """Test that binary results without --output print a summary."""
        mock_client_class.return_value.query.return_value = make_result(
            b"PK\x03\x04", OutputKind.ZIP
        )

        assert main(["query", "cass_y", "--format", "tif"]) == 0

        captured = capsys.readouterr()
        assert "<4 bytes>" in captured.out
        assert "--output" in captured.err

    @pytest.mark.parametrize(
        "error",
        [
            InvalidArgumentError("Unknown indicator code(s): 'x'"),
            UpstreamError("API request failed [500]", status_code=500),
        ],
    )
    @patch("hcapi.cli.commands.HarvestChoiceClient")
    def test_query_error(self, mock_client_class, error, capsys):
        """Test that library errors exit with code 1."""
        mock_client_class.return_value.query.side_effect = error

        assert main(["query", "cass_y"]) == 1
        assert str(error) in capsys.readouterr().err

    def test_query_invalid_code_end_to_end(self, capsys):
        """Test validation failure without mocking the client."""
        assert main(["query", "not_a_code", "--iso3", "CIV"]) == 1
        assert "Unknown indicator code" in capsys.readouterr().err
