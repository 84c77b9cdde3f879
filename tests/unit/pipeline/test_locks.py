"""Unit tests for RepoLocks."""

import threading
import time

import pytest

from pushci.pipeline import RepoLocks


@pytest.mark.unit
class TestRepoLocks:
    """Tests for RepoLocks."""

    def test_is_held_inside_block(self) -> None:
        locks = RepoLocks()

        with locks.hold("octo/app"):
            assert locks.is_held("octo/app")
            assert not locks.is_held("octo/other")

        assert not locks.is_held("octo/app")

    def test_hold_releases_on_error(self) -> None:
        locks = RepoLocks()

        with pytest.raises(RuntimeError), locks.hold("octo/app"):
            raise RuntimeError("boom")

        assert not locks.is_held("octo/app")
        assert len(locks) == 0

    def test_entries_dropped_after_release(self) -> None:
        locks = RepoLocks()

        for i in range(50):
            with locks.hold(f"octo/app{i}"):
                assert len(locks) == 1

        assert len(locks) == 0

    def test_entry_kept_while_someone_waits(self) -> None:
        locks = RepoLocks()
        release = threading.Event()
        waiter_done = threading.Event()

        def first() -> None:
            with locks.hold("octo/app"):
                release.wait(timeout=5)

        def second() -> None:
            with locks.hold("octo/app"):
                waiter_done.set()

        t1 = threading.Thread(target=first)
        t1.start()
        while not locks.is_held("octo/app"):
            time.sleep(0.01)
        t2 = threading.Thread(target=second)
        t2.start()
        time.sleep(0.05)

        assert len(locks) == 1
        assert not waiter_done.is_set()

        release.set()
        t1.join(timeout=5)
        t2.join(timeout=5)

        assert waiter_done.is_set()
        assert len(locks) == 0

    def test_same_repository_serialized(self) -> None:
        """Two holders of one key never overlap."""
        locks = RepoLocks()
        events: list[str] = []

        def worker(tag: str) -> None:
            with locks.hold("octo/app"):
                events.append(f"{tag}-in")
                time.sleep(0.05)
                events.append(f"{tag}-out")

        threads = [threading.Thread(target=worker, args=(t,)) for t in ("a", "b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert len(events) == 4
        assert events[0][0] == events[1][0]
        assert events[2][0] == events[3][0]

    def test_different_repositories_independent(self) -> None:
        locks = RepoLocks()
        entered = threading.Event()

        def other() -> None:
            with locks.hold("octo/other"):
                entered.set()

        with locks.hold("octo/app"):
            t = threading.Thread(target=other)
            t.start()
            t.join(timeout=5)

        assert entered.is_set()
