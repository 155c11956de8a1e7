from __future__ import annotations

from io import BytesIO
from typing import Callable
from zipfile import ZipFile

import pytest

from versatools import ProcessingError, ToolInput, UploadedFile
from versatools.tools.archiver import FileArchiver
from versatools.tools.common.archive import stream_zip


def test_archive_keeps_upload_order_and_names(form: Callable[..., ToolInput]) -> None:
    uploads = [
        UploadedFile("b.txt", "text/plain", b"second"),
        UploadedFile("a.bin", "application/octet-stream", bytes(range(256)) * 10),
    ]
    engine = FileArchiver()
    result = engine.process(form(*uploads), engine.validate({"filename": "bundle"}))
    archive = ZipFile(BytesIO(b"".join(result.output_stream)))

    assert archive.testzip() is None
    assert archive.namelist() == ["b.txt", "a.bin"]
    assert archive.read("a.bin") == uploads[1].data
    assert result.metadata == {"fileCount": 2, "fileName": "bundle.zip", "mimeType": "application/zip"}


def test_archive_default_name(form: Callable[..., ToolInput]) -> None:
    engine = FileArchiver()
    upload = UploadedFile("a.txt", "text/plain", b"a")
    assert engine.process(form(upload), engine.validate({})).metadata["fileName"] == "archive.zip"
    assert engine.validate({"filename": None}).filename == "archive"


def test_archive_requires_files(form: Callable[..., ToolInput]) -> None:
    engine = FileArchiver()
    with pytest.raises(ProcessingError, match="No files provided"):
        engine.process(form(note="text fields are not files"), engine.validate({}))


def test_stream_zip_builds_entries_lazily() -> None:
    calls: list[str] = []

    def entry(name: str) -> Callable[[], bytes]:
        def build() -> bytes:
            calls.append(name)
            return name.encode() * 100

        return build

    stream = stream_zip([("one.txt", entry("one")), ("two.txt", entry("two"))])
    first = next(stream)

    assert first.startswith(b"PK")
    assert calls == ["one"]

    rest = b"".join(stream)
    assert calls == ["one", "two"]
    assert ZipFile(BytesIO(first + rest)).read("two.txt") == b"two" * 100


def test_stream_zip_raises_when_later_entry_fails() -> None:
    def broken() -> bytes:
        raise ProcessingError("Failed to render page 2")

    stream = stream_zip([("a.txt", b"a" * 10), ("b.txt", broken)])
    first = next(stream)

    assert first.startswith(b"PK")
    with pytest.raises(ProcessingError, match="page 2"):
        next(stream)


def test_stream_zip_can_be_abandoned() -> None:
    stream = stream_zip([("a.txt", b"a" * 10), ("b.txt", b"b" * 10)])
    assert next(stream).startswith(b"PK")
    stream.close()

    with pytest.raises(StopIteration):
        next(stream)
