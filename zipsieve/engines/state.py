# zipsieve/engines/state.py
"""
SearchHandle: handle bersama antara coordinator dan semua worker,
umurnya satu kali search (bukan global). Satu-satunya state mutable
yang dibagi: flag found/stop + slot password pemenang.
"""

from __future__ import annotations

import threading
from typing import Optional

from zipsieve.errors import ConcurrencyInvariantViolation
from zipsieve.models import SearchStatus


class SearchHandle:
    def __init__(self, stop_event: Optional[threading.Event] = None):
        self._lock = threading.Lock()
        self._status = SearchStatus.SEARCHING
        self._password: Optional[bytes] = None
        self.found_event = threading.Event()
        # stop = found ATAU cancel; worker cuma lihat event ini
        self.stop_event = stop_event if stop_event is not None else threading.Event()

    @property
    def status(self) -> SearchStatus:
        return self._status

    @property
    def password(self) -> Optional[bytes]:
        return self._password

    @property
    def found(self) -> bool:
        return self.found_event.is_set()

    def should_stop(self) -> bool:
        return self.stop_event.is_set()

    def try_found(self, password: bytes) -> bool:
        """
        Single-assignment: penulis pertama menang, sisanya dapat False
        dan harus membuang hasilnya sendiri.
        """
        with self._lock:
            if self._status is not SearchStatus.SEARCHING:
                return False
            self._password = password
            self._status = SearchStatus.FOUND
            self.found_event.set()
            self.stop_event.set()
            return True

    def request_stop(self) -> None:
        self.stop_event.set()

    def _finish(self, status: SearchStatus) -> None:
        with self._lock:
            if self._status is not SearchStatus.SEARCHING:
                raise ConcurrencyInvariantViolation(
                    f"transisi {self._status.value} → {status.value} tidak valid"
                )
            self._status = status
            self.stop_event.set()

    def mark_exhausted(self) -> None:
        self._finish(SearchStatus.EXHAUSTED)

    def mark_cancelled(self) -> None:
        self._finish(SearchStatus.CANCELLED)
