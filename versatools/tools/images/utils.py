"""Helpers shared by the image engines."""

from __future__ import annotations

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from ...errors import ProcessingError
from ..common.interfaces import ToolInput, UploadedFile

IMAGE_FIELD = "files"


def select_image(form: ToolInput) -> UploadedFile:
    """Return the uploaded image, preferring the ``files`` field."""

    upload = form.get_file(IMAGE_FIELD)
    if upload is None:
        files = form.files()
        upload = files[0] if files else None
    if upload is None:
        raise ProcessingError("No image file provided")
    if not upload.is_image():
        raise ProcessingError("Invalid file type. Please upload an image.")
    return upload


def open_image(upload: UploadedFile) -> Image.Image:
    try:
        image = Image.open(BytesIO(upload.data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ProcessingError(f"Failed to decode image '{upload.filename}': {exc}") from exc
    return image


def has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info)


def js_round(value: float) -> int:
    """Round half up, matching how region coordinates are reported to clients."""

    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
