# zipsieve/engines/base.py
from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from zipsieve.engines.checker import PasswordChecker, Verdict
from zipsieve.errors import ConfigError
from zipsieve.models import SearchOutcome, TargetEntry
from zipsieve.utils.sysinfo import logical_cores
from zipsieve.utils.wordlist import CandidateSource

DEFAULT_CHUNK_SIZE = 64


def default_threads() -> int:
    return logical_cores()


class BaseEngine:
    """
    Fondasi semua engine. Engine turunan implement `_search()` dan
    mengisi SearchOutcome; result_schema() menyatukan format untuk UI/log.
    """

    name: str = "base"
    mode: str = "unknown"

    def __init__(self, entry: TargetEntry, source: CandidateSource,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 checker: Optional[Callable[[bytes], Verdict]] = None,
                 logger=None, **kwargs):
        if chunk_size is None or chunk_size < 1:
            raise ConfigError(f"chunk_size harus >= 1 (dapat {chunk_size})")
        self.entry = entry
        self.source = source
        self.chunk_size = chunk_size
        self.checker = checker or PasswordChecker(entry)
        self.logger = logger
        self.kwargs = kwargs or {}

    def run(self) -> SearchOutcome:
        self.log(f"START engine={self.name} entry={self.entry.name} "
                 f"method={self.entry.compress_type} size={self.entry.compress_size}")
        outcome = self._search()
        outcome.engine = self.name
        self.log(f"FINISHED status={outcome.status.value} tested={outcome.tested} "
                 f"header_hits={outcome.header_hits} elapsed={outcome.elapsed:.2f}s")
        return outcome

    def _search(self) -> SearchOutcome:
        """Override di engine turunan."""
        raise NotImplementedError

    def log(self, msg: str) -> None:
        if self.logger:
            self.logger.write(msg)

    # --- helper schema konsisten ---
    def result_schema(self, outcome: SearchOutcome, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return {
            "engine": self.name,
            "mode": self.mode,
            "entry": self.entry.name,
            "password": outcome.password_text(),
            "elapsed": float(outcome.elapsed),
            "rate": float(outcome.rate),
            "tested": outcome.tested,
            "header_hits": outcome.header_hits,
            "status": outcome.status.value,
            **(extra or {}),
        }

