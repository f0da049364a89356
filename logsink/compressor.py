"""Gzip compressor used when a rotated file is archived."""

import gzip
import zlib

from logsink.errors import CompressError


class GzipCompressor:
    """Compresses a byte buffer into a gzip member.

    The gzip header mtime is pinned to 0 so the same input always yields the
    same archive bytes.
    """

    def __init__(self, level: int = 6):
        if not 0 <= level <= 9:
            raise ValueError(f"Unsupported compression level: {level}")
        self._level = level

    def compress(self, data: bytes) -> bytes:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise CompressError(f"expected bytes, got {type(data).__name__}")
        try:
            return gzip.compress(bytes(data), compresslevel=self._level, mtime=0)
        except (zlib.error, OverflowError, MemoryError) as e:
            raise CompressError(str(e)) from e
