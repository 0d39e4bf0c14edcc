from __future__ import annotations

import textwrap
from pathlib import Path

from openpyxl import load_workbook

from html2xlsx.cli import cli, parse_cell_reference
from html2xlsx.filesystem import MAX_FILE_SIZE_ENV_VAR


def _write(tmp_path: Path, filename: str, content: str) -> Path:
    path = tmp_path / filename
    path.write_text(textwrap.dedent(content).strip(), encoding="utf-8")
    return path


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_parse_cell_reference():
    assert parse_cell_reference("A1") == (1, 1)
    assert parse_cell_reference(" c12 ") == (12, 3)


def test_cli_converts_files_into_successive_rows(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    first = _write(tmp_path, "first.html", "<p>Hello</p>")
    second = _write(tmp_path, "second.htm", "<ul><li>One</li><li>Two</li></ul>")

    result = cli_runner.invoke(cli, [str(first), str(second), "-o", "out.xlsx", "--no-images"])

    assert result.exit_code == 0, result.output
    assert "Wrote 2 cell(s)" in result.output
    sheet = load_workbook(tmp_path / "out.xlsx").active
    assert sheet["A1"].value == "Hello\n"
    assert sheet["A2"].value == "• One\n• Two\n\n"


def test_cli_honours_sheet_and_start_cell(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    page = _write(tmp_path, "page.html", "<b>Bold</b> text")

    result = cli_runner.invoke(
        cli, [str(page), "-o", "out.xlsx", "--sheet", "Report", "--cell", "C3", "--no-images"]
    )

    assert result.exit_code == 0, result.output
    workbook = load_workbook(tmp_path / "out.xlsx")
    assert workbook.sheetnames == ["Report"]
    assert str(workbook["Report"]["C3"].value).startswith("Bold")


def test_cli_truncates_long_content(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    page = _write(tmp_path, "long.html", "<p>" + "x" * 50 + "</p>")

    result = cli_runner.invoke(
        cli,
        [
            str(page),
            "-o",
            "out.xlsx",
            "--max-cell-length",
            "10",
            "--truncate-suffix",
            "...",
            "--no-images",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "was truncated in A1" in result.output
    value = load_workbook(tmp_path / "out.xlsx").active["A1"].value
    assert value == "xxxxxxx..."


def test_cli_reads_project_configuration(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_pyproject(
        tmp_path,
        """
        [tool.html2xlsx]
        max_cell_length = 5
        truncate_suffix = "~"
        enable_image_download = false
        """,
    )
    page = _write(tmp_path, "page.html", "<p>abcdefgh</p>")

    result = cli_runner.invoke(cli, [str(page), "-o", "out.xlsx"])

    assert result.exit_code == 0, result.output
    assert load_workbook(tmp_path / "out.xlsx").active["A1"].value == "abcd~"


def test_cli_rejects_non_html_files(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    notes = _write(tmp_path, "notes.txt", "<p>x</p>")

    result = cli_runner.invoke(cli, [str(notes), "-o", "out.xlsx"])

    assert result.exit_code == 2
    assert "not an HTML file" in result.output
    assert not (tmp_path / "out.xlsx").exists()


def test_cli_rejects_files_outside_working_directory(cli_runner, tmp_path, monkeypatch):
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    outside = _write(tmp_path, "outside.html", "<p>x</p>")

    result = cli_runner.invoke(cli, [str(outside), "-o", "out.xlsx"])

    assert result.exit_code == 2
    assert "outside of the working directory" in result.output


def test_cli_rejects_non_xlsx_output(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    page = _write(tmp_path, "page.html", "<p>x</p>")

    result = cli_runner.invoke(cli, [str(page), "-o", "out.csv"])

    assert result.exit_code == 2
    assert ".xlsx" in result.output


def test_cli_rejects_invalid_start_cell(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    page = _write(tmp_path, "page.html", "<p>x</p>")

    result = cli_runner.invoke(cli, [str(page), "-o", "out.xlsx", "--cell", "A1:B2"])

    assert result.exit_code == 2
    assert "Invalid cell reference" in result.output


def test_cli_rejects_invalid_sheet_title(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    page = _write(tmp_path, "page.html", "<p>x</p>")

    result = cli_runner.invoke(cli, [str(page), "-o", "out.xlsx", "--sheet", "a/b"])

    assert result.exit_code == 2


def test_cli_rejects_invalid_configuration(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    page = _write(tmp_path, "page.html", "<p>x</p>")

    result = cli_runner.invoke(cli, [str(page), "-o", "out.xlsx", "--max-cell-length", "0"])

    assert result.exit_code == 2
    assert "max_cell_length" in result.output


def test_cli_enforces_file_size_limit(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, "5")
    page = _write(tmp_path, "page.html", "<p>too large</p>")

    result = cli_runner.invoke(cli, [str(page), "-o", "out.xlsx", "--no-images"])

    assert result.exit_code == 1
    assert "exceeds the maximum allowed size of 5 bytes" in result.output


def test_cli_rejects_invalid_size_environment(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, "lots")
    page = _write(tmp_path, "page.html", "<p>x</p>")

    result = cli_runner.invoke(cli, [str(page), "-o", "out.xlsx"])

    assert result.exit_code == 1
    assert MAX_FILE_SIZE_ENV_VAR in result.output


def test_cli_requires_files_and_output(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert cli_runner.invoke(cli, ["-o", "out.xlsx"]).exit_code == 2
    page = _write(tmp_path, "page.html", "<p>x</p>")
    assert cli_runner.invoke(cli, [str(page)]).exit_code == 2
