import pytest
from click.testing import CliRunner
from openpyxl import Workbook

from html2xlsx.config import ConverterConfig
from html2xlsx.converter import HtmlToExcelConverter


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def workbook() -> Workbook:
    return Workbook()


@pytest.fixture()
def converter(workbook):
    """Converter with image downloads disabled so no test touches the network."""
    with HtmlToExcelConverter(workbook, ConverterConfig(enable_image_download=False)) as instance:
        yield instance
