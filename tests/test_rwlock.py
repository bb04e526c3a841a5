# tests/test_rwlock.py

from __future__ import annotations

import threading
import time

import pytest

from task_manager.infra.memory.rwlock import ReadWriteLock


def test_readers_share_the_lock() -> None:
    lock = ReadWriteLock()
    barrier = threading.Barrier(3, timeout=2)
    passed: list[bool] = []

    def reader() -> None:
        with lock.read():
            # all three readers must be inside at once to pass the barrier
            barrier.wait()
            passed.append(True)

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert passed == [True, True, True]


def test_writer_waits_for_readers() -> None:
    lock = ReadWriteLock()
    acquired = threading.Event()

    def writer() -> None:
        with lock.write():
            acquired.set()

    lock.acquire_read()
    t = threading.Thread(target=writer)
    t.start()
    assert not acquired.wait(0.1)

    lock.release_read()
    assert acquired.wait(2)
    t.join(timeout=2)


def test_waiting_writer_blocks_new_readers() -> None:
    lock = ReadWriteLock()
    order: list[str] = []

    def writer() -> None:
        with lock.write():
            order.append("writer")

    def reader() -> None:
        with lock.read():
            order.append("reader")

    lock.acquire_read()
    w = threading.Thread(target=writer)
    w.start()
    time.sleep(0.05)  # let the writer start waiting
    r = threading.Thread(target=reader)
    r.start()
    time.sleep(0.05)
    assert order == []

    lock.release_read()
    w.join(timeout=2)
    r.join(timeout=2)
    assert order == ["writer", "reader"]


def test_write_excludes_other_writers() -> None:
    lock = ReadWriteLock()
    counter = {"n": 0}

    def bump() -> None:
        for _ in range(1000):
            with lock.write():
                value = counter["n"]
                counter["n"] = value + 1

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert counter["n"] == 4000


def test_abandoned_write_wakes_parked_readers(monkeypatch: pytest.MonkeyPatch) -> None:
    lock = ReadWriteLock()
    notified: list[bool] = []
    real_notify_all = lock._cond.notify_all

    def interrupted_wait(timeout: float | None = None) -> bool:
        raise KeyboardInterrupt

    def recording_notify_all() -> None:
        notified.append(True)
        real_notify_all()

    lock.acquire_read()
    monkeypatch.setattr(lock._cond, "wait", interrupted_wait)
    monkeypatch.setattr(lock._cond, "notify_all", recording_notify_all)

    with pytest.raises(KeyboardInterrupt):
        lock.acquire_write()

    assert notified == [True]
    assert lock._writers_waiting == 0
    assert lock._writer is False
    monkeypatch.undo()

    # no writer is pending any more, so another reader gets straight in
    lock.acquire_read()
    lock.release_read()
    lock.release_read()
    with lock.write():
        pass
