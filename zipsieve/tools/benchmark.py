# zipsieve/tools/benchmark.py
# -------------------------------------------------------------------
# - make_encrypted_zip : tulis ZIP ZipCrypto (stored/deflate/bzip2)
# - make_dummy_wordlist: wordlist random, password benar diselipkan
# - run_benchmark      : bandingkan engine thread / process / sequential
# -------------------------------------------------------------------

from __future__ import annotations

import bz2
import os
import random
import string
import struct
import tempfile
import time
import zlib
from typing import Dict, Mapping, Optional, Union

from zipsieve.crypto.zipcrypto import encrypt_entry
from zipsieve.models import (
    FLAG_DATA_DESCRIPTOR,
    FLAG_ENCRYPTED,
    ZIP_BZIP2,
    ZIP_DEFLATED,
    ZIP_STORED,
)

LOCAL_HEADER = struct.Struct("<IHHHHHIIIHH")
CENTRAL_HEADER = struct.Struct("<IHHHHHHIIIHHHHHII")
END_RECORD = struct.Struct("<IHHHHIIH")
DATA_DESCRIPTOR = struct.Struct("<IIII")

# 2024-01-02 03:04:06
DEFAULT_DATE_TIME = (2024, 1, 2, 3, 4, 6)


def dos_datetime(date_time=DEFAULT_DATE_TIME):
    y, mo, d, h, mi, s = date_time
    dos_date = ((y - 1980) << 9) | (mo << 5) | d
    dos_time = (h << 11) | (mi << 5) | (s // 2)
    return dos_time, dos_date


def _compress(data: bytes, method: int) -> bytes:
    if method == ZIP_STORED:
        return data
    if method == ZIP_DEFLATED:
        c = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, -zlib.MAX_WBITS)
        return c.compress(data) + c.flush()
    if method == ZIP_BZIP2:
        return bz2.compress(data)
    raise ValueError(f"method {method} tidak didukung writer")


def make_encrypted_zip(zip_path: str, password: Union[str, bytes],
                       files: Optional[Mapping[str, Union[str, bytes]]] = None,
                       compression: int = ZIP_STORED,
                       data_descriptor: bool = False,
                       date_time=DEFAULT_DATE_TIME,
                       seed: Optional[int] = None) -> str:
    """
    Tulis arsip ZIP dengan enkripsi ZipCrypto untuk semua entry.
    data_descriptor=True → flag bit 3, byte cek dari mod time.
    """
    if isinstance(password, str):
        password = password.encode("utf-8")
    if files is None:
        files = {"dummy.txt": "Hello from ZIPSIEVE!"}
    rng = random.Random(seed)
    mtime, mdate = dos_datetime(date_time)
    flags = FLAG_ENCRYPTED | (FLAG_DATA_DESCRIPTOR if data_descriptor else 0)
    version = 46 if compression == ZIP_BZIP2 else 20

    body = bytearray()
    central = bytearray()
    for name, content in files.items():
        if isinstance(content, str):
            content = content.encode("utf-8")
        fname = name.encode("utf-8")
        crc = zlib.crc32(content) & 0xFFFFFFFF
        check = (mtime >> 8) & 0xFF if data_descriptor else (crc >> 24) & 0xFF
        salt = bytes(rng.getrandbits(8) for _ in range(11))
        data = encrypt_entry(password, _compress(content, compression), check, salt)

        offset = len(body)
        if data_descriptor:
            body += LOCAL_HEADER.pack(0x04034B50, version, flags, compression, mtime, mdate,
                                      0, 0, 0, len(fname), 0)
        else:
            body += LOCAL_HEADER.pack(0x04034B50, version, flags, compression, mtime, mdate,
                                      crc, len(data), len(content), len(fname), 0)
        body += fname
        body += data
        if data_descriptor:
            body += DATA_DESCRIPTOR.pack(0x08074B50, crc, len(data), len(content))

        central += CENTRAL_HEADER.pack(0x02014B50, version, version, flags, compression, mtime, mdate,
                                       crc, len(data), len(content), len(fname), 0, 0, 0, 0, 0, offset)
        central += fname

    count = len(files)
    eocd = END_RECORD.pack(0x06054B50, 0, 0, count, count, len(central), len(body), 0)
    with open(zip_path, "wb") as f:
        f.write(bytes(body) + bytes(central) + eocd)
    return zip_path


def make_dummy_wordlist(path: str, password: Optional[str] = None, size: int = 50_000,
                        position: Optional[int] = None, seed: Optional[int] = None) -> str:
    """Bikin wordlist random dan selipkan password benar (default di tengah)."""
    rng = random.Random(seed)
    if position is None:
        position = size // 2
    with open(path, "w", encoding="utf-8") as f:
        for i in range(size):
            if password is not None and i == position:
                f.write(password + "\n")
            else:
                f.write("".join(rng.choices(string.ascii_lowercase, k=8)) + "\n")
    return path


def run_benchmark(size: int = 20_000, threads: Optional[int] = None, chunk_size: int = 64,
                  engines=("sequential", "thread", "process")) -> Dict[str, dict]:
    from zipsieve.engines import get_engine
    from zipsieve.ui import messages as ui
    from zipsieve.ui import dashboard
    from zipsieve.utils.archive import load_target_entry
    from zipsieve.utils.wordlist import CandidateSource

    ui.info(f"⚡ Menjalankan benchmark engine ({', '.join(engines)})...")
    password = "sieve123"
    results: Dict[str, dict] = {}

    with tempfile.TemporaryDirectory() as tmpdir:
        zip_path = os.path.join(tmpdir, "dummy.zip")
        wordlist_path = os.path.join(tmpdir, "dummy.txt")
        make_encrypted_zip(zip_path, password, compression=ZIP_DEFLATED,
                           files={"dummy.txt": "Hello from ZIPSIEVE! " * 200})
        make_dummy_wordlist(wordlist_path, password, size=size, position=size - 1)
        entry = load_target_entry(zip_path)

        for name in engines:
            with CandidateSource.from_path(wordlist_path, count_total=True) as source:
                engine = get_engine(name)(entry, source, threads=threads, chunk_size=chunk_size)
                t0 = time.perf_counter()
                outcome = engine.run()
                wall = time.perf_counter() - t0
            result = engine.result_schema(outcome, extra={"wall": wall})
            results[name] = result
            ui.info(f"📊 Hasil benchmark {name}:")
            dashboard.show_summary(result)

    return results
