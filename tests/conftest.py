from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Callable
import sys

import pytest
from PIL import Image
from pypdf import PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from versatools import ToolInput, ToolRegistry, UploadedFile, build_registry  # noqa: E402


def _pdf_bytes(pages: int, title: str | None = None) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    if title is not None:
        writer.add_metadata({"/Producer": "versatools-tests", "/Title": title})
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _image_bytes(size: tuple[int, int], *, mode: str = "RGB", fmt: str = "PNG") -> bytes:
    image = Image.new(mode, size, color=(200, 40, 40) if mode == "RGB" else (200, 40, 40, 128))
    for x in range(0, size[0], 4):
        image.putpixel((x, x % size[1]), (10, 10, 10) if mode == "RGB" else (10, 10, 10, 255))
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture()
def sample_pdf() -> UploadedFile:
    return UploadedFile("sample.pdf", "application/pdf", _pdf_bytes(5, title="Sample"))


@pytest.fixture()
def pdf_factory() -> Callable[..., UploadedFile]:
    def _create(filename: str, pages: int = 1, title: str | None = None) -> UploadedFile:
        return UploadedFile(filename, "application/pdf", _pdf_bytes(pages, title=title))

    return _create


@pytest.fixture()
def sample_pdfs(pdf_factory: Callable[..., UploadedFile]) -> list[UploadedFile]:
    return [pdf_factory("one.pdf", pages=2, title="Document One"), pdf_factory("two.pdf", pages=3)]


@pytest.fixture()
def image_factory() -> Callable[..., UploadedFile]:
    def _create(
        filename: str = "photo.png",
        size: tuple[int, int] = (100, 100),
        *,
        mode: str = "RGB",
        fmt: str = "PNG",
    ) -> UploadedFile:
        return UploadedFile(filename, f"image/{fmt.lower()}", _image_bytes(size, mode=mode, fmt=fmt))

    return _create


@pytest.fixture()
def sample_image(image_factory: Callable[..., UploadedFile]) -> UploadedFile:
    return image_factory()


@pytest.fixture()
def form() -> Callable[..., ToolInput]:
    """Build a :class:`ToolInput` from uploads (``files`` field) and text fields."""

    def _build(*uploads: UploadedFile, **texts: str) -> ToolInput:
        tool_input = ToolInput()
        for upload in uploads:
            tool_input.add("files", upload)
        for name, value in texts.items():
            tool_input.add(name, value)
        return tool_input

    return _build


@pytest.fixture()
def registry() -> ToolRegistry:
    return build_registry()


@pytest.fixture()
def scratch_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    directory = tmp_path / "scratch"
    directory.mkdir()
    monkeypatch.setenv("VERSATOOLS_TMPDIR", str(directory))
    return directory


@pytest.fixture(autouse=True)
def _no_translation_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "DEEPSEEK_API_KEY",
        "OPENAI_API_KEY",
        "TRANSLATE_API_URL",
        "TRANSLATE_API_KEY",
        "VERSATOOLS_FFMPEG",
    ):
        monkeypatch.delenv(name, raising=False)
