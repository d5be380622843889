import os

import pytest

from zipsieve.models import ZIP_STORED
from zipsieve.tools.benchmark import make_encrypted_zip
from zipsieve.utils.archive import load_target_entry
from zipsieve.utils.wordlist import CandidateSource

PASSWORD = "abc123"


@pytest.fixture
def zip_factory(tmp_path):
    """Bikin arsip ZipCrypto di tmp_path, return path-nya."""
    counter = {"n": 0}

    def _make(password=PASSWORD, files=None, compression=ZIP_STORED, data_descriptor=False, seed=1234):
        counter["n"] += 1
        path = os.path.join(str(tmp_path), f"archive_{counter['n']}.zip")
        return make_encrypted_zip(path, password, files=files, compression=compression,
                                  data_descriptor=data_descriptor, seed=seed)

    return _make


@pytest.fixture
def entry_factory(zip_factory):
    def _make(password=PASSWORD, content=b"test", compression=ZIP_STORED, data_descriptor=False, seed=1234):
        path = zip_factory(password, files={"secret.txt": content}, compression=compression,
                           data_descriptor=data_descriptor, seed=seed)
        return load_target_entry(path)

    return _make


@pytest.fixture
def wordlist_factory(tmp_path):
    counter = {"n": 0}

    def _make(lines, newline="\n"):
        counter["n"] += 1
        path = os.path.join(str(tmp_path), f"wordlist_{counter['n']}.txt")
        with open(path, "wb") as f:
            for line in lines:
                if isinstance(line, str):
                    line = line.encode("utf-8")
                f.write(line + newline.encode("ascii"))
        return path

    return _make


@pytest.fixture
def source_from_lines():
    def _make(lines):
        data = b"".join((l.encode("utf-8") if isinstance(l, str) else l) + b"\n" for l in lines)
        return CandidateSource.from_bytes(data)

    return _make


def find_header_false_positive(validator, true_password, limit=200_000):
    """Cari password salah yang lolos header check (~1 dari 256)."""
    for i in range(limit):
        pw = b"fp-%d" % i
        if pw != true_password and validator.passes_header(pw):
            return pw
    raise AssertionError("tidak ketemu false positive header")
