# zipsieve/crypto/zipcrypto.py
# -------------------------------------------------------------
# PKZIP "traditional encryption" (ZipCrypto), bit-exact.
#
#   key0 = crc(key0, b)
#   key1 = (key1 + (key0 & 0xFF)) * 134775813 + 1   (mod 2^32)
#   key2 = crc(key2, key1 >> 24)
#   stream = ((t * (t ^ 1)) >> 8) & 0xFF, t = (key2 | 2) & 0xFFFF
#
# Header check cuma filter 1/256, BUKAN bukti password benar.
# -------------------------------------------------------------

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from zipsieve.models import ENCRYPTION_HEADER_SIZE, TargetEntry

KEY0_INIT = 0x12345678
KEY1_INIT = 0x23456789
KEY2_INIT = 0x34567890
CRC_POLY = 0xEDB88320
KEY1_MULT = 134775813
MASK32 = 0xFFFFFFFF


def _make_crc_table() -> Tuple[int, ...]:
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            if c & 1:
                c = CRC_POLY ^ (c >> 1)
            else:
                c >>= 1
        table.append(c)
    return tuple(table)


CRC_TABLE = _make_crc_table()


def crc_update(crc: int, byte: int) -> int:
    """Satu langkah CRC-32 (tabel reflected 0xEDB88320)."""
    return CRC_TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)


class KeyState:
    """
    Tiga key 32-bit. Selalu dibuat baru per kandidat (from_password),
    jangan dipakai ulang untuk kandidat lain.
    """

    __slots__ = ("key0", "key1", "key2")

    def __init__(self, key0: int = KEY0_INIT, key1: int = KEY1_INIT, key2: int = KEY2_INIT):
        self.key0 = key0
        self.key1 = key1
        self.key2 = key2

    @classmethod
    def from_password(cls, password: bytes) -> "KeyState":
        # inline update() biar cepat, dipanggil sekali per kandidat
        table = CRC_TABLE
        k0, k1, k2 = KEY0_INIT, KEY1_INIT, KEY2_INIT
        for b in password:
            k0 = table[(k0 ^ b) & 0xFF] ^ (k0 >> 8)
            k1 = ((k1 + (k0 & 0xFF)) * KEY1_MULT + 1) & MASK32
            k2 = table[(k2 ^ (k1 >> 24)) & 0xFF] ^ (k2 >> 8)
        return cls(k0, k1, k2)

    def copy(self) -> "KeyState":
        return KeyState(self.key0, self.key1, self.key2)

    def as_tuple(self) -> Tuple[int, int, int]:
        return self.key0, self.key1, self.key2

    def update(self, byte: int) -> None:
        self.key0 = crc_update(self.key0, byte)
        self.key1 = ((self.key1 + (self.key0 & 0xFF)) * KEY1_MULT + 1) & MASK32
        self.key2 = crc_update(self.key2, self.key1 >> 24)

    def stream_byte(self) -> int:
        t = (self.key2 | 2) & 0xFFFF
        return ((t * (t ^ 1)) >> 8) & 0xFF

    def decrypt(self, data: Iterable[int]) -> bytes:
        """Decrypt lalu advance key pakai byte plaintext."""
        table = CRC_TABLE
        k0, k1, k2 = self.key0, self.key1, self.key2
        out = bytearray()
        append = out.append
        for c in data:
            t = (k2 | 2) & 0xFFFF
            p = c ^ (((t * (t ^ 1)) >> 8) & 0xFF)
            append(p)
            k0 = table[(k0 ^ p) & 0xFF] ^ (k0 >> 8)
            k1 = ((k1 + (k0 & 0xFF)) * KEY1_MULT + 1) & MASK32
            k2 = table[(k2 ^ (k1 >> 24)) & 0xFF] ^ (k2 >> 8)
        self.key0, self.key1, self.key2 = k0, k1, k2
        return bytes(out)

    def encrypt(self, data: Iterable[int]) -> bytes:
        """Kebalikan decrypt: key di-advance pakai byte plaintext (input)."""
        out = bytearray()
        for p in data:
            out.append(p ^ self.stream_byte())
            self.update(p)
        return bytes(out)

    def __repr__(self) -> str:
        return f"KeyState(0x{self.key0:08x}, 0x{self.key1:08x}, 0x{self.key2:08x})"


def encrypt_entry(password: bytes, plaintext: bytes, check_byte: int, salt: bytes) -> bytes:
    """
    Bikin data terenkripsi: 12 byte header + body.
    `salt` = 11 byte random untuk header, byte ke-12 = check_byte.
    """
    if len(salt) != ENCRYPTION_HEADER_SIZE - 1:
        raise ValueError("salt harus 11 byte")
    keys = KeyState.from_password(password)
    return keys.encrypt(salt + bytes([check_byte & 0xFF]) + plaintext)


class CipherValidator:
    """
    Validator header per entry. Stateless per panggilan: semua state
    kunci lokal di dalam check_header(), jadi instance ini boleh dipakai
    bareng oleh banyak thread.
    """

    def __init__(self, entry: TargetEntry):
        if len(entry.header) != ENCRYPTION_HEADER_SIZE:
            raise ValueError(f"header enkripsi harus {ENCRYPTION_HEADER_SIZE} byte")
        self.entry = entry
        self._header = entry.header
        self._check = entry.check_byte

    def check_header(self, password: bytes) -> Optional[KeyState]:
        """
        Return KeyState (posisi setelah header) kalau byte cek cocok,
        None kalau ditolak.
        """
        table = CRC_TABLE
        k0, k1, k2 = KEY0_INIT, KEY1_INIT, KEY2_INIT
        for b in password:
            k0 = table[(k0 ^ b) & 0xFF] ^ (k0 >> 8)
            k1 = ((k1 + (k0 & 0xFF)) * KEY1_MULT + 1) & MASK32
            k2 = table[(k2 ^ (k1 >> 24)) & 0xFF] ^ (k2 >> 8)

        p = 0
        for c in self._header:
            t = (k2 | 2) & 0xFFFF
            p = c ^ (((t * (t ^ 1)) >> 8) & 0xFF)
            k0 = table[(k0 ^ p) & 0xFF] ^ (k0 >> 8)
            k1 = ((k1 + (k0 & 0xFF)) * KEY1_MULT + 1) & MASK32
            k2 = table[(k2 ^ (k1 >> 24)) & 0xFF] ^ (k2 >> 8)

        if p != self._check:
            return None
        return KeyState(k0, k1, k2)

    def passes_header(self, password: bytes) -> bool:
        return self.check_header(password) is not None
