"""Tests for the scripts/run_crawler.py command-line runner.

Only input-rejection paths are exercised; none of them reach the network.
"""

import argparse
import importlib.util
from pathlib import Path

import pytest

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "run_crawler.py"


@pytest.fixture(scope="module")
def cli():
    spec = importlib.util.spec_from_file_location("run_crawler", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


# ============================================================================
# TESTS: PAGE RANGE PARSING
# ============================================================================

class TestParsePages:
    """Tests for parse_pages()."""

    def test_single_page(self, cli):
        assert cli.parse_pages("3") == (3, 3)

    def test_range(self, cli):
        assert cli.parse_pages("1-5") == (1, 5)

    @pytest.mark.parametrize("value", ["0", "5-2", "a-b", ""])
    def test_invalid(self, cli, value):
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_pages(value)


# ============================================================================
# TESTS: INPUT ERRORS
# ============================================================================

class TestCliInputErrors:
    """Bad platform or stock code exits with status 2 and a message."""

    async def test_check_unknown_platform(self, cli, capsys):
        code = await cli.check_crawler("weibo", "002085")

        assert code == 2
        assert "Unsupported platform: weibo" in capsys.readouterr().out

    async def test_check_blank_stock(self, cli, capsys):
        code = await cli.check_crawler("eastmoney", "   ")

        assert code == 2
        assert "stock_code is required" in capsys.readouterr().out

    async def test_run_unknown_platform(self, cli, capsys):
        code = await cli.run_crawler("weibo", "002085", (1, 1))

        assert code == 2
        assert "Unsupported platform: weibo" in capsys.readouterr().out

    async def test_run_blank_stock(self, cli, capsys):
        code = await cli.run_crawler("eastmoney", "   ", (1, 1))

        assert code == 2
        assert "stock_code is required" in capsys.readouterr().out
