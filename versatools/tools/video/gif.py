"""Two-pass palette based video to GIF transcoding through ffmpeg.

Pass one samples the requested window at the target frame rate and width and
builds a colour palette. Pass two re-samples the same window, maps it onto
that palette with ordered (Bayer) dithering and writes an infinitely looping
GIF. The uploaded video, the palette and the GIF all live in scratch files
that are removed on every exit path.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Callable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ...config import FfmpegSettings
from ...core.utils import (
    get_logger,
    iter_bytes,
    remove_quietly,
    run_subprocess,
    strip_extension,
    unique_temp_path,
    which,
)
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

LOGGER = get_logger("versatools.tools.video_gif")

MAX_DURATION_SECONDS = 60.0
BAYER_SCALE = 5

Runner = Callable[[Sequence[str]], Any]


class GifOptions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    start: float = Field(0.0, ge=0)
    duration: float = Field(5.0, gt=0, le=MAX_DURATION_SECONDS)
    fps: float = Field(10.0, ge=1, le=30)
    width: int = Field(480, ge=64, le=800)


def _num(value: float) -> str:
    return f"{value:g}"


def _sampling_filter(options: GifOptions) -> str:
    return f"fps={_num(options.fps)},scale={options.width}:-1:flags=lanczos"


def build_palette_command(executable: str, source: Path, palette: Path, options: GifOptions) -> list[str]:
    """First pass: derive a palette from the selected window."""

    return [
        executable,
        "-y",
        "-ss",
        _num(options.start),
        "-t",
        _num(options.duration),
        "-i",
        str(source),
        "-vf",
        f"{_sampling_filter(options)},palettegen",
        str(palette),
    ]


def build_render_command(
    executable: str, source: Path, palette: Path, output: Path, options: GifOptions
) -> list[str]:
    """Second pass: render the window against the palette as a looping GIF."""

    graph = (
        f"[0:v]{_sampling_filter(options)}[video];"
        f"[video][1:v]paletteuse=dither=bayer:bayer_scale={BAYER_SCALE}"
    )
    return [
        executable,
        "-y",
        "-ss",
        _num(options.start),
        "-t",
        _num(options.duration),
        "-i",
        str(source),
        "-i",
        str(palette),
        "-filter_complex",
        graph,
        "-loop",
        "0",
        str(output),
    ]


def resolve_ffmpeg(settings: FfmpegSettings | None = None) -> str:
    settings = settings or FfmpegSettings.from_env()
    if settings.executable:
        return settings.executable
    executable = which(("ffmpeg", "ffmpeg.exe"))
    if executable is None:
        raise ProcessingError("ffmpeg executable not found; install ffmpeg or set VERSATOOLS_FFMPEG")
    return executable


class ScratchFiles:
    """Three uniquely named scratch paths removed when the block exits."""

    def __init__(self, input_suffix: str) -> None:
        self.source = unique_temp_path("video-to-gif-input", input_suffix)
        self.palette = unique_temp_path("video-to-gif-palette", ".png")
        self.output = unique_temp_path("video-to-gif", ".gif")

    def paths(self) -> tuple[Path, Path, Path]:
        return (self.source, self.palette, self.output)

    def __enter__(self) -> "ScratchFiles":
        return self

    def __exit__(self, *exc_info: object) -> None:
        remove_quietly(*self.paths())


def _run_pass(runner: Runner, command: Sequence[str], failure: str) -> None:
    try:
        runner(command)
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip().splitlines()
        reason = detail[-1] if detail else f"exit code {exc.returncode}"
        raise ProcessingError(f"{failure}: {reason}") from exc
    except OSError as exc:
        raise ProcessingError(f"{failure}: {exc}") from exc


class VideoToGif:
    kind = EngineKind.VIDEO_TO_GIF
    tool_id = kind.value
    execution_mode = ExecutionMode.BATCH
    processing_rate = 5.0
    options_model = GifOptions

    def __init__(self, runner: Runner = run_subprocess, settings: FfmpegSettings | None = None) -> None:
        self._runner = runner
        self._settings = settings

    def validate(self, raw_options: Any) -> GifOptions:
        return validate_options(self.options_model, raw_options)

    def estimate_duration(self, size_mb: float) -> float:
        return estimate_duration(self.processing_rate, size_mb)

    def process(self, data: EngineInput, options: GifOptions) -> ExecutionResult:
        uploads = [upload for upload in as_tool_input(data, self.tool_id).files() if upload.is_video()]
        if len(uploads) != 1:
            raise ProcessingError("Exactly 1 video file is required for conversion")
        upload = uploads[0]

        executable = resolve_ffmpeg(self._settings)
        suffix = Path(upload.filename).suffix or ".mp4"

        with ScratchFiles(suffix) as scratch:
            scratch.source.write_bytes(upload.data)

            LOGGER.debug("Generating palette for %s", upload.filename)
            _run_pass(
                self._runner,
                build_palette_command(executable, scratch.source, scratch.palette, options),
                "Failed to generate GIF palette",
            )

            LOGGER.debug("Rendering GIF for %s", upload.filename)
            _run_pass(
                self._runner,
                build_render_command(executable, scratch.source, scratch.palette, scratch.output, options),
                "Failed to convert video to GIF",
            )

            gif = scratch.output.read_bytes() if scratch.output.exists() else b""
            if not gif:
                raise ProcessingError("Failed to convert video to GIF: empty output from ffmpeg")

        LOGGER.info("Converted %s into a %d byte GIF", upload.filename, len(gif))

        return ExecutionResult(
            output_stream=iter_bytes(gif),
            metadata={
                "originalName": upload.filename,
                "mimeType": "image/gif",
                "fileName": f"{strip_extension(upload.filename)}.gif",
                "start": options.start,
                "duration": options.duration,
                "fps": options.fps,
                "width": options.width,
            },
        )
