# zipsieve/utils/archive.py
# -------------------------------------------------------------------
# Baca arsip ZIP → TargetEntry (data mentah untuk validasi password).
# - central directory dibaca pakai pyzipper
# - local header di-parse manual (butuh mod time & offset data)
# - entry AES ditolak (di luar cakupan)
# -------------------------------------------------------------------

from __future__ import annotations

import os
import struct
from typing import Any, Dict, List, Optional

import pyzipper

from zipsieve.engines.decryptor import SUPPORTED_METHODS
from zipsieve.errors import ArchiveError, TargetEntryError
from zipsieve.models import (
    ENCRYPTION_HEADER_SIZE,
    FLAG_ENCRYPTED,
    FLAG_STRONG_ENCRYPTION,
    ZIP_AES,
    TargetEntry,
)

LOCAL_HEADER = struct.Struct("<IHHHHHIIIHH")
LOCAL_HEADER_SIG = 0x04034B50
AES_EXTRA_ID = 0x9901

PICK_FIRST = "first"
PICK_SMALLEST = "smallest"


def _extra_ids(extra: bytes) -> List[int]:
    ids = []
    i = 0
    while i + 4 <= len(extra):
        header_id, size = struct.unpack_from("<HH", extra, i)
        ids.append(header_id)
        i += 4 + size
    return ids


def zipinfo_has_aes(info) -> bool:
    """
    Deteksi AES:
    - method 99 (WinZip AES)
    - extra field id 0x9901
    """
    if getattr(info, "compress_type", None) == ZIP_AES:
        return True
    return AES_EXTRA_ID in _extra_ids(getattr(info, "extra", b"") or b"")


def is_legacy_encrypted(info) -> bool:
    flags = info.flag_bits
    return bool(flags & FLAG_ENCRYPTED) and not (flags & FLAG_STRONG_ENCRYPTION) and not zipinfo_has_aes(info)


def _open_infos(zip_path: str) -> list:
    if not os.path.isfile(zip_path):
        raise ArchiveError(f"ZIP tidak ditemukan: {zip_path}")
    try:
        with pyzipper.AESZipFile(zip_path, "r") as zf:
            return zf.infolist()
    except pyzipper.BadZipFile as e:
        raise ArchiveError(f"Bukan arsip ZIP valid: {zip_path} ({e})") from e
    except OSError as e:
        raise ArchiveError(f"Gagal membaca ZIP: {zip_path} ({e})") from e


def _pick_info(infos: list, target: Optional[str], pick: str):
    if target is not None:
        for info in infos:
            if info.filename == target:
                if info.is_dir():
                    raise TargetEntryError(f"Target '{target}' adalah direktori")
                return info
        raise TargetEntryError(f"Target '{target}' tidak ada di arsip")

    files = [i for i in infos if not i.is_dir()]
    if not files:
        raise TargetEntryError("Arsip tidak berisi file")
    legacy = [i for i in files if is_legacy_encrypted(i)]
    if not legacy:
        if any(zipinfo_has_aes(i) for i in files):
            raise TargetEntryError("Semua entry memakai enkripsi AES (tidak didukung)")
        raise TargetEntryError("Tidak ada entry terenkripsi di arsip")

    # file kosong lolos semua kandidat yang lolos header, hindari kalau bisa
    non_empty = [i for i in legacy if i.file_size > 0]
    pool = non_empty or legacy
    if pick == PICK_SMALLEST:
        return min(pool, key=lambda i: i.compress_size)
    if pick != PICK_FIRST:
        raise TargetEntryError(f"Mode pick tidak dikenal: {pick}")
    return pool[0]


def _validate_info(info) -> None:
    name = info.filename
    if zipinfo_has_aes(info):
        raise TargetEntryError(f"'{name}' memakai enkripsi AES (tidak didukung)")
    if not info.flag_bits & FLAG_ENCRYPTED:
        raise TargetEntryError(f"'{name}' tidak terenkripsi")
    if info.flag_bits & FLAG_STRONG_ENCRYPTION:
        raise TargetEntryError(f"'{name}' memakai strong encryption (tidak didukung)")
    if info.compress_type not in SUPPORTED_METHODS:
        raise TargetEntryError(
            f"'{name}' memakai compression method {info.compress_type} "
            f"(didukung: {', '.join(SUPPORTED_METHODS.values())})"
        )
    if info.compress_size < ENCRYPTION_HEADER_SIZE:
        raise ArchiveError(f"'{name}' terlalu kecil untuk header enkripsi")


def _read_raw(zip_path: str, info):
    try:
        with open(zip_path, "rb") as f:
            f.seek(info.header_offset)
            raw = f.read(LOCAL_HEADER.size)
            if len(raw) != LOCAL_HEADER.size:
                raise ArchiveError(f"Local header '{info.filename}' terpotong")
            (sig, _ver, _flags, _method, mtime, _mdate,
             _crc, _csize, _usize, nlen, xlen) = LOCAL_HEADER.unpack(raw)
            if sig != LOCAL_HEADER_SIG:
                raise ArchiveError(f"Signature local header '{info.filename}' salah")
            f.seek(nlen + xlen, os.SEEK_CUR)
            data = f.read(info.compress_size)
    except OSError as e:
        raise ArchiveError(f"Gagal membaca data '{info.filename}': {e}") from e
    if len(data) != info.compress_size:
        raise ArchiveError(f"Data '{info.filename}' terpotong")
    return mtime, data


def load_target_entry(zip_path: str, target: Optional[str] = None, pick: str = PICK_FIRST) -> TargetEntry:
    """
    Pilih entry target lalu baca data mentahnya.
    target=None → entry terenkripsi pertama (atau terkecil kalau pick="smallest").
    """
    infos = _open_infos(zip_path)
    info = _pick_info(infos, target, pick)
    _validate_info(info)
    mtime, data = _read_raw(zip_path, info)
    return TargetEntry(
        name=info.filename,
        compress_type=info.compress_type,
        compress_size=info.compress_size,
        file_size=info.file_size,
        crc=info.CRC,
        header=data[:ENCRYPTION_HEADER_SIZE],
        payload=data[ENCRYPTION_HEADER_SIZE:],
        flag_bits=info.flag_bits,
        dos_time=mtime,
    )


def get_zip_metadata(zip_file: str) -> Dict[str, Any]:
    """
    Metadata dasar zip untuk panel --info:
    {file, size, entries, encrypted, aes, total_uncompressed, total_compressed, items}
    """
    infos = _open_infos(zip_file)
    items = [
        {
            "name": i.filename,
            "dir": i.is_dir(),
            "method": i.compress_type,
            "compressed": i.compress_size,
            "size": i.file_size,
            "encrypted": bool(i.flag_bits & FLAG_ENCRYPTED),
            "aes": zipinfo_has_aes(i),
        }
        for i in infos
    ]
    return {
        "file": zip_file,
        "size": os.path.getsize(zip_file),
        "entries": len(infos),
        "encrypted": any(it["encrypted"] for it in items),
        "aes": any(it["aes"] for it in items),
        "total_uncompressed": sum(i.file_size for i in infos),
        "total_compressed": sum(i.compress_size for i in infos),
        "items": items,
    }


def extract_with_password(zip_file_path: str, password: bytes, out_dir: Optional[str] = None) -> str:
    if out_dir is None:
        base = os.path.splitext(os.path.basename(zip_file_path))[0]
        out_dir = os.path.join(os.getcwd(), base)
    os.makedirs(out_dir, exist_ok=True)
    with pyzipper.AESZipFile(zip_file_path) as zf:
        zf.extractall(path=out_dir, pwd=password)
    return out_dir
