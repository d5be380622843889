# zipsieve/engines/process_engine.py
"""
Protokol sama dengan ThreadEngine, tapi worker = proses (lepas dari GIL).
Worker tidak bisa pegang SearchHandle, jadi claim dilakukan coordinator
saat pesan FOUND pertama masuk.
"""

from __future__ import annotations

import multiprocessing as mp
import queue

from zipsieve.engines.coordinator import WorkCoordinator
from zipsieve.engines.state import SearchHandle
from zipsieve.engines.workers.zip_worker import worker_process


class ProcessEngine(WorkCoordinator):
    name = "process"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._ctx = mp.get_context()

    def _make_handle(self):
        return SearchHandle(stop_event=self._ctx.Event())

    def _make_queues(self):
        return self._ctx.Queue(maxsize=self.prefetch + self.threads), self._ctx.Queue()

    def _start_workers(self, handle, task_q, result_q):
        workers = []
        for i in range(self.threads):
            p = self._ctx.Process(
                target=worker_process,
                args=(i, self.entry, task_q, result_q, handle.stop_event),
                name=f"zipsieve-worker-{i}",
                daemon=True,
            )
            p.start()
            workers.append(p)
        return workers

    def _join_workers(self, workers, task_q):
        # sisa chunk di queue jangan bikin proses utama hang waktu exit
        task_q.cancel_join_thread()
        try:
            while True:
                task_q.get_nowait()
        except (queue.Empty, OSError, ValueError):
            pass
        for p in workers:
            p.join(timeout=5)
            if p.is_alive():
                p.terminate()
                p.join()
