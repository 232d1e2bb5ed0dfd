"""Tests for the readers-writer lock and concurrent store access"""

import threading

from beads_server.models import BeadDraft
from beads_server.storage.bead_store import BeadStore
from beads_server.storage.errors import ConflictError
from beads_server.storage.locking import RWLock


def test_readers_share_the_lock():
    lock = RWLock()
    lock.acquire_read()
    acquired = threading.Event()

    def reader():
        with lock.read_locked():
            acquired.set()

    thread = threading.Thread(target=reader)
    thread.start()
    assert acquired.wait(timeout=5)
    thread.join()
    lock.release_read()


def test_writer_excludes_readers():
    lock = RWLock()
    lock.acquire_write()
    acquired = threading.Event()

    def reader():
        with lock.read_locked():
            acquired.set()

    thread = threading.Thread(target=reader)
    thread.start()
    assert not acquired.wait(timeout=0.2)
    lock.release_write()
    assert acquired.wait(timeout=5)
    thread.join()


def test_concurrent_creates_are_all_persisted(store, data_file):
    errors = []

    def worker(n):
        try:
            for i in range(10):
                store.create(BeadDraft(title=f"worker {n} bead {i}"))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(store) == 40
    assert len({b.id for b in store.all()}) == 40

    assert len(BeadStore.load(data_file)) == 40


def test_concurrent_claims_have_one_winner(store):
    bead = store.create(BeadDraft(title="Contested"))
    winners, conflicts = [], []
    start = threading.Barrier(5)

    def claimer(user):
        start.wait()
        try:
            store.claim(bead.id, user)
            winners.append(user)
        except ConflictError:
            conflicts.append(user)

    threads = [threading.Thread(target=claimer, args=(f"agent-{n}",)) for n in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(winners) == 1
    assert len(conflicts) == 4
    assert store.get(bead.id).assignee == winners[0]
