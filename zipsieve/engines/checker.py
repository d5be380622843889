# zipsieve/engines/checker.py
from __future__ import annotations

import enum

from zipsieve.crypto.zipcrypto import CipherValidator
from zipsieve.engines.decryptor import EntryDecryptor
from zipsieve.models import TargetEntry


class Verdict(enum.IntEnum):
    REJECTED_HEADER = 0
    REJECTED_BODY = 1    # lolos header, gagal CRC/decompress
    ACCEPTED = 2


class PasswordChecker:
    """
    CipherValidator → EntryDecryptor untuk satu kandidat.
    Tidak ada state yang berubah antar panggilan, jadi satu instance
    bisa dipakai semua thread worker.
    """

    def __init__(self, entry: TargetEntry):
        self.entry = entry
        self.validator = CipherValidator(entry)
        self.decryptor = EntryDecryptor(entry)

    def __call__(self, password: bytes) -> Verdict:
        keys = self.validator.check_header(password)
        if keys is None:
            return Verdict.REJECTED_HEADER
        if self.decryptor.verify(keys):
            return Verdict.ACCEPTED
        return Verdict.REJECTED_BODY
