# zipsieve/models.py
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

FLAG_ENCRYPTED = 0x01
FLAG_DATA_DESCRIPTOR = 0x08
FLAG_STRONG_ENCRYPTION = 0x40

ZIP_STORED = 0
ZIP_DEFLATED = 8
ZIP_BZIP2 = 12
ZIP_AES = 99

ENCRYPTION_HEADER_SIZE = 12


@dataclass(frozen=True)
class TargetEntry:
    """
    Satu entry terenkripsi (ZipCrypto) yang dipakai untuk validasi password.
    Immutable, jadi aman dibaca bareng oleh semua worker tanpa lock.
    """

    name: str
    compress_type: int
    compress_size: int      # termasuk 12 byte header enkripsi
    file_size: int
    crc: int
    header: bytes
    payload: bytes          # data setelah header
    flag_bits: int = FLAG_ENCRYPTED
    dos_time: int = 0

    @property
    def check_byte(self) -> int:
        # bit 3 = data descriptor → CRC belum diketahui saat header ditulis
        if self.flag_bits & FLAG_DATA_DESCRIPTOR:
            return (self.dos_time >> 8) & 0xFF
        return (self.crc >> 24) & 0xFF


class SearchStatus(str, enum.Enum):
    SEARCHING = "searching"
    FOUND = "found"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


@dataclass
class SearchOutcome:
    status: SearchStatus
    password: Optional[bytes] = None
    tested: int = 0
    elapsed: float = 0.0
    header_hits: int = 0
    engine: str = ""
    extra: dict = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.status is SearchStatus.FOUND

    @property
    def rate(self) -> float:
        return self.tested / self.elapsed if self.elapsed > 0 else 0.0

    def password_text(self, encoding: str = "utf-8") -> Optional[str]:
        if self.password is None:
            return None
        return self.password.decode(encoding, errors="replace")
