"""Engine removing image backgrounds with a segmentation model."""

from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, ConfigDict

from ...core.utils import get_logger, iter_bytes, strip_extension
from ...errors import ProcessingError
from ..common.interfaces import (
    EngineInput,
    EngineKind,
    ExecutionMode,
    ExecutionResult,
    as_tool_input,
    estimate_duration,
    validate_options,
)
from .utils import select_image

LOGGER = get_logger("versatools.tools.bg_remove")

Segmenter = Callable[[bytes], bytes]


class BackgroundOptions(BaseModel):
    model_config = ConfigDict(extra="ignore")


def rembg_segmenter(image_bytes: bytes) -> bytes:
    """Run :func:`rembg.remove` and return PNG bytes with an alpha channel."""

    try:
        from rembg import remove
    except ImportError as exc:
        raise ProcessingError(
            "Background removal requires the optional 'rembg' dependency (pip install versatools[bg])"
        ) from exc
    return remove(image_bytes)


class BgRemover:
    kind = EngineKind.BG_REMOVER
    tool_id = kind.value
    execution_mode = ExecutionMode.BATCH
    processing_rate = 5.0
    options_model = BackgroundOptions

    def __init__(self, segmenter: Segmenter = rembg_segmenter) -> None:
        self._segmenter = segmenter

    def validate(self, raw_options: Any) -> BackgroundOptions:
        return validate_options(self.options_model, raw_options)

    def estimate_duration(self, size_mb: float) -> float:
        return estimate_duration(self.processing_rate, size_mb)

    def process(self, data: EngineInput, options: BackgroundOptions) -> ExecutionResult:
        upload = select_image(as_tool_input(data, self.tool_id))

        LOGGER.debug("Removing background from %s (%d bytes)", upload.filename, upload.size)
        try:
            output = self._segmenter(upload.data)
        except ProcessingError:
            raise
        except Exception as exc:
            raise ProcessingError(f"Failed to remove background: {exc}") from exc

        if not output:
            raise ProcessingError("Failed to remove background: segmentation returned no data")

        return ExecutionResult(
            output_stream=iter_bytes(output),
            metadata={
                "originalName": upload.filename,
                "outputSize": len(output),
                "mimeType": "image/png",
                "fileName": f"bg-removed-{strip_extension(upload.filename)}.png",
            },
        )
