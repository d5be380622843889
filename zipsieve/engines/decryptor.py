# zipsieve/engines/decryptor.py
"""
Jalur mahal: hanya dipanggil kalau header check lolos (~1/256 kandidat salah).
Decrypt body per blok → decompress streaming → CRC-32 + ukuran harus cocok.
"""

from __future__ import annotations

import bz2
import zlib

from zipsieve.crypto.zipcrypto import KeyState
from zipsieve.errors import CandidateRejected
from zipsieve.models import ZIP_BZIP2, ZIP_DEFLATED, ZIP_STORED, TargetEntry

BLOCK_SIZE = 16 * 1024

SUPPORTED_METHODS = {
    ZIP_STORED: "stored",
    ZIP_DEFLATED: "deflate",
    ZIP_BZIP2: "bzip2",
}

# error yang muncul dari stream sampah (false positive header)
_STREAM_ERRORS = (zlib.error, OSError, EOFError, ValueError)


class _Stored:
    eof = True

    def decompress(self, data: bytes, max_length: int) -> bytes:
        return data

    def flush(self) -> bytes:
        return b""


class _Deflate:
    def __init__(self):
        self._d = zlib.decompressobj(-zlib.MAX_WBITS)

    @property
    def eof(self) -> bool:
        return self._d.eof

    def decompress(self, data: bytes, max_length: int) -> bytes:
        return self._d.decompress(data, max_length)

    def flush(self) -> bytes:
        return self._d.flush()


class _Bzip2:
    def __init__(self):
        self._d = bz2.BZ2Decompressor()

    @property
    def eof(self) -> bool:
        return self._d.eof

    def decompress(self, data: bytes, max_length: int) -> bytes:
        if self._d.eof:
            # data tambahan setelah akhir stream = bukan plaintext valid
            raise CandidateRejected("data setelah akhir stream bzip2")
        return self._d.decompress(data, max_length)

    def flush(self) -> bytes:
        return b""


_DECOMPRESSORS = {
    ZIP_STORED: _Stored,
    ZIP_DEFLATED: _Deflate,
    ZIP_BZIP2: _Bzip2,
}


class EntryDecryptor:
    def __init__(self, entry: TargetEntry, block_size: int = BLOCK_SIZE):
        if entry.compress_type not in _DECOMPRESSORS:
            raise ValueError(f"compression method {entry.compress_type} tidak didukung")
        self.entry = entry
        self.block_size = block_size
        self._factory = _DECOMPRESSORS[entry.compress_type]

    def verify(self, keys: KeyState) -> bool:
        """
        `keys` = state setelah 12 byte header (hasil CipherValidator).
        True hanya kalau CRC-32 dan ukuran plaintext sama persis.
        """
        try:
            self._decrypt_and_check(keys.copy())
        except CandidateRejected:
            return False
        except _STREAM_ERRORS:
            return False
        return True

    def _decrypt_and_check(self, keys: KeyState) -> None:
        entry = self.entry
        payload = entry.payload
        expected = entry.file_size
        decomp = self._factory()

        crc = 0
        size = 0
        for start in range(0, len(payload), self.block_size):
            block = keys.decrypt(payload[start:start + self.block_size])
            out = decomp.decompress(block, expected - size + 1)
            size += len(out)
            if size > expected:
                raise CandidateRejected("output melebihi ukuran asli")
            crc = zlib.crc32(out, crc)

        tail = decomp.flush()
        size += len(tail)
        crc = zlib.crc32(tail, crc)

        if size != expected:
            raise CandidateRejected("ukuran tidak cocok")
        if not decomp.eof:
            raise CandidateRejected("stream terpotong")
        if (crc & 0xFFFFFFFF) != entry.crc:
            raise CandidateRejected("CRC mismatch")
