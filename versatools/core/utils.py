"""Utilities shared by VersaTools engines."""

from __future__ import annotations

import logging
import os
import secrets
import shutil
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Iterator, Sequence

DEFAULT_CHUNK_SIZE = 64 * 1024

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(_LOG_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
        level = os.getenv("VERSATOOLS_LOG_LEVEL")
        if level:
            logger.setLevel(level.upper())
    return logger


_LOGGER = get_logger("versatools.core")


def iter_bytes(data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield ``data`` in slices of at most ``chunk_size`` bytes."""

    view = memoryview(data)
    for offset in range(0, len(view), chunk_size):
        yield bytes(view[offset : offset + chunk_size])


def strip_extension(filename: str) -> str:
    """Return ``filename`` without its final extension."""

    stem, dot, _ = filename.rpartition(".")
    if not dot or not stem:
        return filename
    return stem


def scratch_dir() -> Path:
    configured = os.getenv("VERSATOOLS_TMPDIR")
    if configured:
        path = Path(configured).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return path
    return Path(tempfile.gettempdir())


def unique_temp_path(prefix: str, suffix: str, *, directory: Path | None = None) -> Path:
    """Return a scratch path unique to this invocation.

    The name embeds a millisecond timestamp and a random hex suffix so that
    concurrent requests never share a file.
    """

    base = directory or scratch_dir()
    token = f"{int(time.time() * 1000)}-{secrets.token_hex(6)}"
    return base / f"{prefix}-{token}{suffix}"


def remove_quietly(*paths: Path) -> None:
    for path in paths:
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as exc:
            _LOGGER.warning("Failed to remove scratch file %s: %s", path, exc)


def which(executables: Sequence[str]) -> str | None:
    """Return the first executable from *executables* found on ``PATH``."""

    for candidate in executables:
        found = shutil.which(candidate)
        if found:
            _LOGGER.debug("Detected external tool: %s -> %s", candidate, found)
            return found
    return None


def run_subprocess(
    command: Sequence[str],
    *,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run *command* capturing output.

    Raises :class:`subprocess.CalledProcessError` on a non-zero exit when
    ``check`` is true.
    """

    _LOGGER.debug("Executing command: %s", " ".join(command))
    completed = subprocess.run(
        list(command),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        check=check,
        text=True,
    )
    _LOGGER.debug(
        "Command finished with exit code %s\nstdout: %s\nstderr: %s",
        completed.returncode,
        completed.stdout,
        completed.stderr,
    )
    return completed


def sizeof_mb(num_bytes: int) -> float:
    return num_bytes / (1024 * 1024)


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "get_logger",
    "iter_bytes",
    "strip_extension",
    "scratch_dir",
    "unique_temp_path",
    "remove_quietly",
    "which",
    "run_subprocess",
    "sizeof_mb",
]
