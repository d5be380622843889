# zipsieve/engines/workers/zip_worker.py
"""
Worker persistent untuk brute force ZIP.
Worker menerima chunk password lewat Queue dan melapor ke result_queue:

  ("COUNT", (tested, header_hits))   tiap chunk selesai / dihentikan
  ("FOUND", password)                 password terkonfirmasi (hanya pemenang)
  ("ERROR", pesan)                    bug tak terduga, chunk dianggap hilang
  ("DONE", worker_id)                 worker keluar
"""

from __future__ import annotations

import queue
import traceback
from typing import Callable, Optional

from zipsieve.engines.checker import PasswordChecker, Verdict
from zipsieve.models import TargetEntry

POLL_TIMEOUT = 0.1


def worker_loop(worker_id, check, task_queue, result_queue, stop_event,
                claim: Optional[Callable[[bytes], bool]] = None):
    """
    Loop worker:
      - ambil chunk dari task_queue (None = sentinel, keluar)
      - cek stop_event sebelum tiap kandidat
      - kalau ketemu → claim() dulu; kalah race → buang hasil
    `claim=None` berarti coordinator yang claim (mode proses).
    """
    try:
        while not stop_event.is_set():
            try:
                pw_chunk = task_queue.get(timeout=POLL_TIMEOUT)
            except queue.Empty:
                continue

            if pw_chunk is None:
                break

            tested = 0
            header_hits = 0
            winner = None
            for pw in pw_chunk:
                if stop_event.is_set():
                    break
                verdict = check(pw)
                tested += 1
                if verdict is not Verdict.REJECTED_HEADER:
                    header_hits += 1
                if verdict is Verdict.ACCEPTED:
                    winner = pw
                    break

            result_queue.put(("COUNT", (tested, header_hits)))

            if winner is not None:
                if claim is None or claim(winner):
                    result_queue.put(("FOUND", winner))
                stop_event.set()
                break
    except Exception as e:  # bug, bukan kandidat salah
        result_queue.put(("ERROR", f"worker {worker_id}: {e!r}\n{traceback.format_exc()}"))
        stop_event.set()
    finally:
        result_queue.put(("DONE", worker_id))


def worker_process(worker_id, entry: TargetEntry, task_queue, result_queue, stop_event):
    """Entry point mode proses: checker dibangun ulang di proses anak."""
    worker_loop(worker_id, PasswordChecker(entry), task_queue, result_queue, stop_event)
