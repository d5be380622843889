# zipsieve/engines/coordinator.py
# -------------------------------------------------------------------
# WorkCoordinator: persistent worker pool + chunk queue.
#
#   Searching ──FOUND──▶ Found
#   Searching ──source habis & semua worker DONE──▶ Exhausted
#   Searching ──cancel / timeout / CTRL+C──▶ Cancelled
#
# Coordinator = producer: seed `prefetch` chunk, lalu 1 chunk baru per
# COUNT. Worker tidak pernah baca file, jadi tidak pernah nunggu I/O.
# Hasil "found" = yang pertama dikonfirmasi worker mana pun; urutan
# antar chunk TIDAK deterministik (pakai SequentialEngine kalau perlu).
# -------------------------------------------------------------------

from __future__ import annotations

import contextlib
import queue
import threading
import time
from typing import List, Optional

from zipsieve.engines.base import BaseEngine, DEFAULT_CHUNK_SIZE, default_threads
from zipsieve.engines.state import SearchHandle
from zipsieve.engines.workers.zip_worker import worker_loop
from zipsieve.errors import ConcurrencyInvariantViolation, ConfigError, WorkerError
from zipsieve.models import SearchOutcome, SearchStatus, TargetEntry
from zipsieve.utils.progress import ProgressState
from zipsieve.utils.wordlist import CandidateSource


class WorkCoordinator(BaseEngine):
    name = "pool"
    mode = "wordlist"

    def __init__(self, entry: TargetEntry, source: CandidateSource,
                 threads: Optional[int] = None, chunk_size: int = DEFAULT_CHUNK_SIZE,
                 prefetch: Optional[int] = None, timeout: Optional[float] = None,
                 cancel_event: Optional[threading.Event] = None,
                 live: bool = False, ui_refresh: float = 0.3,
                 checkpoint_every: int = 50_000, **kwargs):
        super().__init__(entry, source, chunk_size=chunk_size, **kwargs)
        self.threads = threads if threads is not None else default_threads()
        if self.threads < 1:
            raise ConfigError(f"threads harus >= 1 (dapat {self.threads})")
        self.prefetch = prefetch if prefetch is not None else 2 * self.threads
        if self.prefetch < 1:
            raise ConfigError(f"prefetch harus >= 1 (dapat {self.prefetch})")
        if timeout is not None and timeout < 0:
            raise ConfigError(f"timeout tidak boleh negatif (dapat {timeout})")
        self.timeout = timeout
        self.cancel_event = cancel_event
        self.live = live
        self.ui_refresh = ui_refresh
        self.checkpoint_every = checkpoint_every
        self.zip_label = self.kwargs.get("zip_label", entry.name)
        self.wordlist_label = self.kwargs.get("wordlist_label", source.name)
        self.progress = ProgressState(total=source.total)
        self._sentinels_sent = False

    # ==================================================
    # hook untuk engine turunan (thread / proses)
    # ==================================================
    def _make_handle(self) -> SearchHandle:
        return SearchHandle()

    def _make_queues(self):
        return queue.Queue(maxsize=self.prefetch + self.threads), queue.Queue()

    def _start_workers(self, handle: SearchHandle, task_q, result_q) -> List:
        raise NotImplementedError

    def _accept_found(self, handle: SearchHandle, password: bytes) -> bool:
        """Dipanggil saat pesan FOUND diterima coordinator."""
        return handle.try_found(password)

    def _workers_alive(self, workers) -> bool:
        return any(w.is_alive() for w in workers)

    def _join_workers(self, workers, task_q) -> None:
        for w in workers:
            w.join(timeout=5)

    # ==================================================
    # producer
    # ==================================================
    def _feed(self, task_q) -> bool:
        chunk = self.source.take(self.chunk_size)
        if chunk:
            task_q.put(chunk)
            return True
        if not self._sentinels_sent:
            for _ in range(self.threads):
                task_q.put(None)
            self._sentinels_sent = True
        return False

    @staticmethod
    def _drain(result_q) -> List:
        messages = []
        while True:
            try:
                messages.append(result_q.get_nowait())
            except queue.Empty:
                return messages

    def _cancel_requested(self, deadline: Optional[float]) -> bool:
        if self.cancel_event is not None and self.cancel_event.is_set():
            return True
        return deadline is not None and time.monotonic() >= deadline

    # ==================================================
    # UI
    # ==================================================
    def _live_ctx(self):
        if not self.live:
            return contextlib.nullcontext()
        from rich.live import Live
        return Live("", refresh_per_second=max(4, int(1 / self.ui_refresh)), transient=False)

    def _refresh(self, live, status: str) -> None:
        if live is None:
            return
        from zipsieve.ui.dashboard import render_dashboard
        live.update(render_dashboard(
            self.zip_label, self.wordlist_label, self.threads,
            self.progress.get(), status=status, engine=self.name,
        ))

    # ==================================================
    # main loop
    # ==================================================
    def _search(self) -> SearchOutcome:
        handle = self._make_handle()
        task_q, result_q = self._make_queues()
        self._sentinels_sent = False
        deadline = time.monotonic() + self.timeout if self.timeout is not None else None
        self.log(f"CONFIG threads={self.threads} chunk={self.chunk_size} prefetch={self.prefetch} "
                 f"timeout={self.timeout}")

        # seed sebelum worker jalan, biar wordlist kosong langsung ketahuan
        for _ in range(self.prefetch):
            if not self._feed(task_q):
                break

        workers = self._start_workers(handle, task_q, result_q)
        done = 0
        error: Optional[str] = None
        cancelled = False
        last_checkpoint = 0
        status = "Running"
        start = time.perf_counter()

        try:
            with self._live_ctx() as live:
                while done < len(workers):
                    if not handle.should_stop() and self._cancel_requested(deadline):
                        cancelled = True
                        status = "Cancelled"
                        handle.request_stop()
                        self.log("CANCEL requested")

                    try:
                        messages = [result_q.get(timeout=self.ui_refresh)]
                    except queue.Empty:
                        if self._workers_alive(workers):
                            self._refresh(live, status)
                            continue
                        # worker sudah exit, pesan terakhirnya bisa masih di queue
                        messages = self._drain(result_q)
                        if not messages:
                            error = error or "semua worker mati tanpa laporan DONE"
                            break

                    for kind, val in messages:
                        if kind == "COUNT":
                            tested, hits = val
                            self.progress.step(tested, hits)
                            if not handle.should_stop():
                                self._feed(task_q)
                            done_count = self.progress.tested.get()
                            if self.checkpoint_every and done_count - last_checkpoint >= self.checkpoint_every:
                                last_checkpoint = done_count
                                self.log(f"CHECKPOINT tested={done_count} lines_read={self.source.lines_read}")

                        elif kind == "FOUND":
                            if self._accept_found(handle, val):
                                status = "FOUND ✅"
                                self.log("FOUND password confirmed")

                        elif kind == "ERROR":
                            error = val
                            handle.request_stop()
                            self.log(f"ERROR {val}")

                        elif kind == "DONE":
                            done += 1

                    self._refresh(live, status)
        except KeyboardInterrupt:
            cancelled = True
            self.log("CANCEL CTRL+C")
        finally:
            handle.request_stop()
            self._join_workers(workers, task_q)

        elapsed = time.perf_counter() - start

        if error is not None and not handle.found:
            raise WorkerError(error)

        if handle.found:
            final = SearchStatus.FOUND
        elif cancelled:
            handle.mark_cancelled()
            final = SearchStatus.CANCELLED
        else:
            if not self.source.exhausted:
                raise ConcurrencyInvariantViolation("search selesai tapi wordlist belum habis")
            handle.mark_exhausted()
            final = SearchStatus.EXHAUSTED

        return SearchOutcome(
            status=final,
            password=handle.password,
            tested=self.progress.tested.get(),
            elapsed=elapsed,
            header_hits=self.progress.header_hits.get(),
        )


class ThreadEngine(WorkCoordinator):
    """Pool thread OS. Worker claim handle langsung (first writer wins)."""

    name = "thread"

    def _start_workers(self, handle, task_q, result_q):
        workers = []
        for i in range(self.threads):
            t = threading.Thread(
                target=worker_loop,
                args=(i, self.checker, task_q, result_q, handle.stop_event, handle.try_found),
                name=f"zipsieve-worker-{i}",
                daemon=True,
            )
            t.start()
            workers.append(t)
        return workers

    def _accept_found(self, handle, password):
        # sudah di-claim oleh worker lewat try_found
        return handle.found and handle.password == password
