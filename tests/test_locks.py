"""Tests for per-key locking."""

import threading
import time

from pilgrim.core.locks import KeyedLocks


def test_same_key_is_serialized() -> None:
    locks = KeyedLocks()
    inside = 0
    peak = 0
    guard = threading.Lock()

    def work() -> None:
        nonlocal inside, peak
        with locks.hold(("guide", 1)):
            with guard:
                inside += 1
                peak = max(peak, inside)
            time.sleep(0.01)
            with guard:
                inside -= 1

    threads = [threading.Thread(target=work) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert peak == 1
    assert len(locks) == 0


def test_different_keys_do_not_block() -> None:
    locks = KeyedLocks()
    with locks.hold(("content", 1)):
        acquired = threading.Event()

        def other() -> None:
            with locks.hold(("content", 2)):
                acquired.set()

        t = threading.Thread(target=other)
        t.start()
        assert acquired.wait(timeout=2)
        t.join()
        assert len(locks) == 1
    assert len(locks) == 0


def test_lock_released_on_error() -> None:
    locks = KeyedLocks()
    try:
        with locks.hold("k"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    with locks.hold("k"):
        assert len(locks) == 1
