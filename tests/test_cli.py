from __future__ import annotations

import json
from io import BytesIO
from pathlib import Path

from click.testing import CliRunner
from pypdf import PdfReader

from versatools import UploadedFile
from versatools.cli.main import cli


def _write(tmp_path: Path, upload: UploadedFile) -> str:
    path = tmp_path / upload.filename
    path.write_bytes(upload.data)
    return str(path)


def test_list_command() -> None:
    result = CliRunner().invoke(cli, ["list"])
    assert result.exit_code == 0
    assert "Registered Tools" in result.output


def test_route_command() -> None:
    result = CliRunner().invoke(cli, ["route", "merge these pdf files"])
    assert result.exit_code == 0
    assert result.output.strip() == "pdf-merger"


def test_run_merges_files(tmp_path: Path, sample_pdfs: list[UploadedFile]) -> None:
    output = tmp_path / "out.pdf"
    inputs = [_write(tmp_path, upload) for upload in sample_pdfs]

    result = CliRunner().invoke(cli, ["run", "pdf-merger", *inputs, "--output", str(output)])

    assert result.exit_code == 0, result.output
    assert len(PdfReader(BytesIO(output.read_bytes())).pages) == 5


def test_run_with_options_and_fields(tmp_path: Path) -> None:
    output = tmp_path / "result.json"
    result = CliRunner().invoke(
        cli,
        ["run", "text-translator", "--field", "text=hello", "--options", '{"targetLang": "de"}', "-o", str(output)],
    )

    assert result.exit_code == 0, result.output
    assert json.loads(output.read_text(encoding="utf-8"))["results"] == [{"lang": "de", "text": "hello"}]


def test_run_reports_tool_errors(tmp_path: Path, sample_pdf: UploadedFile) -> None:
    result = CliRunner().invoke(cli, ["run", "pdf-merger", _write(tmp_path, sample_pdf)])
    assert result.exit_code == 1
    assert "PROCESSING_FAILED" in result.output


def test_run_rejects_malformed_field() -> None:
    result = CliRunner().invoke(cli, ["run", "text-translator", "--field", "novalue"])
    assert result.exit_code == 2
