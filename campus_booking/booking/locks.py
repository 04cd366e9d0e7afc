from threading import Lock


class SlotLocks:
    """Hands out one mutual-exclusion lock per slot id.

    Slots are never deleted, so locks are kept for the life of the registry.
    Callers only ask for ids of slots they have seen in the ledger.
    """

    def __init__(self) -> None:
        self._registry_lock = Lock()
        self._locks: dict[int, Lock] = {}

    def for_slot(self, slot_id: int) -> Lock:
        lock = self._locks.get(slot_id)
        if lock is not None:
            return lock

        with self._registry_lock:
            lock = self._locks.get(slot_id)
            if lock is None:
                lock = Lock()
                self._locks[slot_id] = lock
            return lock

    def __len__(self) -> int:
        return len(self._locks)
