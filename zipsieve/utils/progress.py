# zipsieve/utils/progress.py
from __future__ import annotations

import threading
import time
from typing import Optional


class AtomicCounter:
    """Counter aman untuk banyak thread."""
    def __init__(self, initial: int = 0):
        self._val = initial
        self._lock = threading.Lock()

    def inc(self, n: int = 1) -> int:
        with self._lock:
            self._val += n
            return self._val

    def get(self) -> int:
        with self._lock:
            return self._val


class RateMeter:
    """
    Hitung kecepatan (percobaan/detik). Panggil .add(n) setiap batch.
    Gunakan .rate() untuk angka terbaru (moving average sederhana).
    """
    def __init__(self, smoothing: float = 0.2):
        self.start_ts = time.perf_counter()
        self.count = 0
        self._rate = 0.0
        self._last = self.start_ts
        self.alpha = smoothing

    def add(self, n: int = 1) -> None:
        now = time.perf_counter()
        dt = max(1e-9, now - self._last)
        inst = n / dt
        # EMA
        self._rate = self.alpha * inst + (1 - self.alpha) * self._rate
        self._last = now
        self.count += n

    def rate(self) -> float:
        return float(self._rate)

    def average(self) -> float:
        el = self.elapsed()
        return self.count / el if el > 0 else 0.0

    def elapsed(self) -> float:
        return time.perf_counter() - self.start_ts


class ProgressState:
    """
    Progress global search (dipakai dashboard & log checkpoint).
    """
    def __init__(self, total: Optional[int] = None):
        self.total = total
        self.tested = AtomicCounter(0)
        self.header_hits = AtomicCounter(0)
        self.meter = RateMeter()

    def step(self, n: int = 1, header_hits: int = 0):
        self.tested.inc(n)
        if header_hits:
            self.header_hits.inc(header_hits)
        self.meter.add(n)

    def eta(self) -> Optional[float]:
        rate = self.meter.average()
        done = self.tested.get()
        if not self.total or rate <= 0 or done >= self.total:
            return None
        return (self.total - done) / rate

    def get(self):
        done = self.tested.get()
        return {
            "done": done,
            "total": self.total,
            "header_hits": self.header_hits.get(),
            "rate": self.meter.average(),
            "rate_now": self.meter.rate(),
            "elapsed": self.meter.elapsed(),
            "eta": self.eta(),
            "pct": (done / self.total * 100.0) if self.total else None,
        }
