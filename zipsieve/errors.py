# zipsieve/errors.py
"""
Hirarki exception zipsieve.

- SetupError  : fatal sebelum worker dijalankan (arsip, target, wordlist, config).
- CandidateRejected : kandidat salah, selalu ditangkap di dalam engine.
- ConcurrencyInvariantViolation : bug logika (outcome ditulis dua kali).
- WorkerError : worker crash di luar penolakan kandidat biasa.
"""

from __future__ import annotations


class ZipSieveError(Exception):
    """Base semua error zipsieve."""


class SetupError(ZipSieveError):
    step: str = "setup"

    def __init__(self, message: str, step: str | None = None):
        super().__init__(message)
        if step is not None:
            self.step = step

    def __str__(self) -> str:
        return f"[{self.step}] {self.args[0]}"


class ArchiveError(SetupError):
    step = "archive"


class TargetEntryError(SetupError):
    step = "target"


class WordlistError(SetupError):
    step = "wordlist"


class ConfigError(SetupError):
    step = "config"


class CandidateRejected(ZipSieveError):
    """Password salah (CRC mismatch / stream rusak)."""


class ConcurrencyInvariantViolation(ZipSieveError):
    pass


class WorkerError(ZipSieveError):
    pass
