# zipsieve/engines/sequential_engine.py
"""
Mode deterministik: satu thread (thread pemanggil), urut file.
Kalau wordlist berisi beberapa password valid, yang dilaporkan selalu
yang paling awal di file.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from zipsieve.engines.base import BaseEngine, DEFAULT_CHUNK_SIZE
from zipsieve.engines.checker import Verdict
from zipsieve.engines.state import SearchHandle
from zipsieve.errors import ConfigError
from zipsieve.models import SearchOutcome, SearchStatus


class SequentialEngine(BaseEngine):
    name = "sequential"
    mode = "wordlist"

    def __init__(self, entry, source, chunk_size: int = DEFAULT_CHUNK_SIZE,
                 timeout: Optional[float] = None,
                 cancel_event: Optional[threading.Event] = None, **kwargs):
        # threads/prefetch/live dari CLI ikut masuk kwargs dan diabaikan
        super().__init__(entry, source, chunk_size=chunk_size, **kwargs)
        if timeout is not None and timeout < 0:
            raise ConfigError(f"timeout tidak boleh negatif (dapat {timeout})")
        self.timeout = timeout
        self.cancel_event = cancel_event

    def _search(self) -> SearchOutcome:
        handle = SearchHandle()
        deadline = time.monotonic() + self.timeout if self.timeout is not None else None
        tested = 0
        header_hits = 0
        cancelled = False
        start = time.perf_counter()

        try:
            for chunk in self.source.chunks(self.chunk_size):
                for pw in chunk:
                    if (self.cancel_event is not None and self.cancel_event.is_set()) or \
                            (deadline is not None and time.monotonic() >= deadline):
                        cancelled = True
                        break
                    verdict = self.checker(pw)
                    tested += 1
                    if verdict is not Verdict.REJECTED_HEADER:
                        header_hits += 1
                    if verdict is Verdict.ACCEPTED:
                        handle.try_found(pw)
                        break
                if cancelled or handle.found:
                    break
        except KeyboardInterrupt:
            cancelled = True
            self.log("CANCEL CTRL+C")

        if handle.found:
            status = SearchStatus.FOUND
        elif cancelled:
            handle.mark_cancelled()
            status = SearchStatus.CANCELLED
        else:
            handle.mark_exhausted()
            status = SearchStatus.EXHAUSTED

        return SearchOutcome(
            status=status,
            password=handle.password,
            tested=tested,
            elapsed=time.perf_counter() - start,
            header_hits=header_hits,
        )
