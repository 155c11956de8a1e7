"""Engine encoding text into a QR code PNG."""

from __future__ import annotations

from io import BytesIO
from typing import Any, Literal

import qrcode
from PIL import Image
from pydantic import BaseModel, ConfigDict, Field
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError

from ...core.utils import get_logger, iter_bytes
from ...errors import ProcessingError
from ..common.interfaces import (
    EngineInput,
    EngineKind,
    ExecutionMode,
    ExecutionResult,
    estimate_duration,
    validate_options,
)

LOGGER = get_logger("versatools.tools.qr")

ERROR_CORRECTION = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


class QrOptions(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    text: str = Field(..., min_length=1)
    size: int = Field(384, ge=64, le=1024)
    margin: int = Field(2, ge=0, le=16)
    error_correction_level: Literal["L", "M", "Q", "H"] = Field("M", alias="errorCorrectionLevel")


def render_qr(text: str, *, size: int, margin: int, error_correction_level: str) -> tuple[bytes, int]:
    """Encode ``text`` as a square black-on-white PNG and return it with its side length.

    The image is ``size`` pixels wide unless the code has more modules than
    that, in which case it keeps one pixel per module.
    """

    code = qrcode.QRCode(
        error_correction=ERROR_CORRECTION[error_correction_level],
        box_size=1,
        border=margin,
    )
    code.add_data(text)
    code.make(fit=True)

    modules = code.modules_count + 2 * margin
    code.box_size = max(1, size // modules)
    image = code.make_image(fill_color="black", back_color="white").get_image().convert("RGB")
    if size >= modules and image.size != (size, size):
        image = image.resize((size, size), Image.Resampling.NEAREST)

    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue(), image.width


class QrGenerator:
    kind = EngineKind.QR_GENERATOR
    tool_id = kind.value
    execution_mode = ExecutionMode.BATCH
    processing_rate = 0.01
    options_model = QrOptions

    def validate(self, raw_options: Any) -> QrOptions:
        return validate_options(self.options_model, raw_options)

    def estimate_duration(self, size_mb: float) -> float:
        return estimate_duration(self.processing_rate, size_mb)

    def process(self, data: EngineInput, options: QrOptions) -> ExecutionResult:
        try:
            output, pixel_size = render_qr(
                options.text,
                size=options.size,
                margin=options.margin,
                error_correction_level=options.error_correction_level,
            )
        except (ValueError, DataOverflowError) as exc:
            raise ProcessingError(f"Failed to generate QR code: {exc}") from exc

        LOGGER.debug("Generated %dpx QR code for %d characters", pixel_size, len(options.text))

        return ExecutionResult(
            output_stream=iter_bytes(output),
            metadata={
                "mimeType": "image/png",
                "fileName": "qrcode.png",
                "textLength": len(options.text),
                "size": pixel_size,
                "margin": options.margin,
                "errorCorrectionLevel": options.error_correction_level,
            },
        )
