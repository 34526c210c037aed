"""
In-memory holder of the best record per name.

The registry is seeded once from storage and then only changes through
``submit``. A submission for a name holds that name's lock across the score
comparison, the durable write and the memory update, so two concurrent
submissions can never both win against the same stale score. Memory is only
updated after the write succeeds: on-disk score <= in-memory score at all
times.
"""

import logging
import threading
from typing import Any, Iterable, Optional

from best_model_service.models import CommitResult, Record
from best_model_service.store import RecordStore, check_name

logger = logging.getLogger(__name__)


class BestScoreRegistry:
    def __init__(self, store: RecordStore, default_name: str = "default"):
        self.store = store
        self.default_name = check_name(default_name)
        self._held: dict[str, Record] = {}
        self._active: Optional[str] = None
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._seeded = False

    @classmethod
    def from_store(cls, store: RecordStore, default_name: str = "default") -> "BestScoreRegistry":
        registry = cls(store, default_name)
        registry.seed(store.list_all())
        return registry

    @property
    def active_name(self) -> str:
        return self._active or self.default_name

    def seed(self, candidates: Iterable[Record]) -> None:
        """
        Initialise held records from storage candidates.

        Per name the highest score wins; on ties the first one enumerated is
        kept. The active name is that of the first global maximum, or
        ``default_name`` when there are no candidates.
        """
        if self._seeded:
            raise RuntimeError("registry already seeded")

        held: dict[str, Record] = {}
        best: Optional[Record] = None
        for rec in candidates:
            prev = held.get(rec.name)
            if prev is None or rec.score > prev.score:
                held[rec.name] = rec
            if best is None or rec.score > best.score:
                best = rec

        self._held = held
        self._active = best.name if best is not None else self.default_name
        self._seeded = True
        if best is not None:
            logger.info("Loaded model: %s with score: %s", best.name, best.score)
        else:
            logger.info("No saved models, starting from %s with score 0", self.default_name)

    def current(self, name: Optional[str] = None) -> Record:
        name = name or self.active_name
        rec = self._held.get(name)
        if rec is None:
            return Record(name=name, score=0, data=None)
        return rec

    def _lock_for(self, name: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = self._locks[name] = threading.Lock()
            return lock

    def submit(self, score: float, data: Any = None, name: Optional[str] = None) -> CommitResult:
        """
        Commit ``(score, data)`` for ``name`` if it strictly beats the held score.

        Equal scores are rejected. A rejection returns the held record and
        touches neither memory nor disk. StorageError from the write
        propagates and leaves the held record unchanged.
        """
        if not self._seeded:
            raise RuntimeError("registry used before seed()")
        name = check_name(name or self.active_name)

        # held scores only go up: a loser here also loses under the lock
        held = self.current(name)
        if not score > held.score:
            logger.debug("Rejected %s: %s <= %s", name, score, held.score)
            return CommitResult(accepted=False, record=held)

        with self._lock_for(name):
            held = self.current(name)
            if not score > held.score:
                logger.debug("Rejected %s: %s <= %s", name, score, held.score)
                return CommitResult(accepted=False, record=held)

            candidate = Record(name=name, score=score, data=data)
            try:
                self.store.write(candidate)
            except OSError:
                logger.exception("Error saving model %s", name)
                raise
            self._held[name] = candidate

        logger.info("Saved model %s with score %s", name, score)
        return CommitResult(accepted=True, record=candidate)
