# zipsieve/utils/logger.py
from __future__ import annotations

import os
import threading
from datetime import datetime

DEFAULT_LOG_DIR = os.path.join(os.getcwd(), "logs")


def mk_log_file(zip_file: str, log_dir: str = DEFAULT_LOG_DIR) -> str:
    os.makedirs(log_dir, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    base = os.path.splitext(os.path.basename(zip_file))[0]
    return os.path.join(log_dir, f"zipsieve_{base}_{stamp}.log")


class Logger:
    """Log run ke file teks, satu baris per event dengan timestamp."""

    def __init__(self, log_path: str):
        self.log_path = log_path
        self._lock = threading.Lock()
        self._fh = open(self.log_path, "a", encoding="utf-8", errors="replace")

    def write(self, msg: str):
        ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        with self._lock:
            if self._fh is None:
                return
            self._fh.write(f"[{ts}] {msg}\n")
            self._fh.flush()

    def close(self):
        with self._lock:
            if self._fh is not None:
                self._fh.close()
                self._fh = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
