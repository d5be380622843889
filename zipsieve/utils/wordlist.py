# zipsieve/utils/wordlist.py
# -------------------------------------------------------------------
# Wordlist → kandidat password (bytes), urut sesuai file.
# - strip line ending (\n, \r\n, \r), skip baris kosong / whitespace doang
# - take(n) thread-safe: satu kandidat tidak pernah keluar dua kali
# -------------------------------------------------------------------

from __future__ import annotations

import io
import os
import sys
import threading
from typing import BinaryIO, Iterable, Iterator, List, Optional

from zipsieve.errors import WordlistError

STDIN_PATH = "-"


def count_lines_fast(path: str) -> int:
    """Hitung baris per blok 1 MiB (untuk total di dashboard)."""
    with open(path, "rb") as f:
        buf = f.read(1024 * 1024)
        count = 0
        last = b""
        while buf:
            count += buf.count(b"\n")
            last = buf[-1:]
            buf = f.read(1024 * 1024)
    # baris terakhir tanpa newline tetap dihitung
    if last and last != b"\n":
        count += 1
    return count


def _strip_eol(line: bytes) -> bytes:
    if line.endswith(b"\n"):
        line = line[:-1]
    if line.endswith(b"\r"):
        line = line[:-1]
    return line


class CandidateSource:
    """
    Sumber kandidat yang lazy dan tidak bisa diulang dalam satu run.

    Bisa dibungkus dari file biner, iterable of bytes/str, atau path
    (lihat from_path). Baris dilewati dulu sebanyak `start_at` baris mentah,
    mirip resume index di engine lama.
    """

    def __init__(self, lines: Iterable, start_at: int = 0, name: str = "<lines>",
                 closer: Optional[BinaryIO] = None, total: Optional[int] = None):
        self.name = name
        self.start_at = start_at
        self.total = total
        self._lines: Iterator = iter(lines)
        self._closer = closer
        self._lock = threading.Lock()
        self._exhausted = False
        self.lines_read = 0
        self.emitted = 0

    # --- konstruktor ---
    @classmethod
    def from_path(cls, path: str, start_at: int = 0, count_total: bool = False) -> "CandidateSource":
        if start_at < 0:
            raise WordlistError(f"start_at tidak boleh negatif: {start_at}")
        if path == STDIN_PATH:
            return cls(sys.stdin.buffer, start_at=start_at, name="<stdin>")
        if os.path.isdir(path):
            raise WordlistError(f"Wordlist adalah direktori: {path}")
        try:
            fh = open(path, "rb")
        except OSError as e:
            raise WordlistError(f"Wordlist tidak bisa dibuka: {path} ({e.strerror or e})") from e

        total = None
        if count_total:
            try:
                total = max(0, count_lines_fast(path) - start_at)
            except OSError:
                total = None
        return cls(fh, start_at=start_at, name=os.path.basename(path), closer=fh, total=total)

    @classmethod
    def from_bytes(cls, data: bytes, start_at: int = 0) -> "CandidateSource":
        return cls(io.BytesIO(data), start_at=start_at, name="<memory>")

    # --- konsumsi ---
    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def _next_candidate(self) -> Optional[bytes]:
        for raw in self._lines:
            self.lines_read += 1
            if self.lines_read <= self.start_at:
                continue
            if isinstance(raw, str):
                raw = raw.encode("utf-8")
            pw = _strip_eol(raw)
            # baris isi spasi/tab doang dianggap kosong
            if pw.strip():
                return pw
        return None

    def take(self, n: int) -> List[bytes]:
        """
        Ambil maksimal `n` kandidat berurutan. List kosong = habis.
        """
        if n <= 0:
            raise ValueError("n harus > 0")
        chunk: List[bytes] = []
        with self._lock:
            if self._exhausted:
                return chunk
            try:
                while len(chunk) < n:
                    pw = self._next_candidate()
                    if pw is None:
                        self._exhausted = True
                        break
                    chunk.append(pw)
            except OSError as e:
                raise WordlistError(f"Gagal membaca wordlist {self.name}: {e}") from e
            self.emitted += len(chunk)
        return chunk

    def chunks(self, size: int) -> Iterator[List[bytes]]:
        while True:
            chunk = self.take(size)
            if not chunk:
                return
            yield chunk

    def __iter__(self) -> Iterator[bytes]:
        for chunk in self.chunks(256):
            yield from chunk

    # --- resource ---
    def close(self) -> None:
        if self._closer is not None:
            self._closer.close()
            self._closer = None

    def __enter__(self) -> "CandidateSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
