"""Incremental ZIP construction for engines that emit archives.

:func:`stream_zip` writes each entry into a non-seekable sink and yields the
compressed bytes as soon as the entry is finished, so the consumer pulls the
archive piece by piece instead of receiving one buffered blob.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator, Tuple, Union
from zipfile import ZIP_DEFLATED, ZipFile

from ...core.utils import DEFAULT_CHUNK_SIZE, get_logger, iter_bytes

LOGGER = get_logger("versatools.archive")

MAX_COMPRESSION_LEVEL = 9

EntryData = Union[bytes, Callable[[], bytes]]
ArchiveEntry = Tuple[str, EntryData]


class _ChunkSink:
    """Write-only file object collecting bytes until drained.

    It deliberately has no ``tell``/``seek`` so :class:`zipfile.ZipFile`
    falls back to data descriptors and never rewinds.
    """

    def __init__(self) -> None:
        self._chunks: list[bytes] = []

    def write(self, data: bytes) -> int:
        self._chunks.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        return None

    def drain(self) -> bytes:
        chunks, self._chunks = self._chunks, []
        return b"".join(chunks)


def stream_zip(
    entries: Iterable[ArchiveEntry],
    *,
    compresslevel: int = MAX_COMPRESSION_LEVEL,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[bytes]:
    """Yield a ZIP archive built from ``entries``.

    Each entry is ``(name, data)`` where ``data`` is either bytes or a
    zero-argument callable producing bytes. Callables are invoked lazily,
    one entry at a time, while the archive is being consumed.
    """

    sink = _ChunkSink()
    # An abandoned archive is closed into the sink and its tail never yielded.
    with ZipFile(sink, mode="w", compression=ZIP_DEFLATED, compresslevel=compresslevel) as archive:
        for name, data in entries:
            payload = data() if callable(data) else data
            archive.writestr(name, payload)
            LOGGER.debug("Archived entry %s (%d bytes)", name, len(payload))
            yield from iter_bytes(sink.drain(), chunk_size)
    yield from iter_bytes(sink.drain(), chunk_size)


__all__ = ["stream_zip", "ArchiveEntry", "MAX_COMPRESSION_LEVEL"]
