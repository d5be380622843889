import threading

from zipsieve.utils.progress import AtomicCounter, ProgressState


def test_atomic_counter_threads():
    counter = AtomicCounter()

    def bump():
        for _ in range(1000):
            counter.inc()

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert counter.get() == 8000


def test_progress_state_snapshot():
    progress = ProgressState(total=200)
    progress.step(50, header_hits=2)
    progress.step(50)
    snap = progress.get()
    assert snap["done"] == 100
    assert snap["header_hits"] == 2
    assert snap["pct"] == 50.0
    assert snap["rate"] > 0
    assert snap["eta"] is not None and snap["eta"] >= 0


def test_progress_without_total():
    progress = ProgressState()
    progress.step(10)
    snap = progress.get()
    assert snap["pct"] is None
    assert snap["eta"] is None
