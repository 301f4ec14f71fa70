import threading
from collections import Counter
from typing import List, Dict

from .models import Outcome, OutcomeRecord


class OutcomeLog:
    """
    Append-only record of every contention request in a run.
    Many virtual clients append concurrently; the aggregator reads once
    after all of them have finished.
    """
    def __init__(self):
        self._lock = threading.Lock()
        self._records: List[OutcomeRecord] = []

    def append(self, record: OutcomeRecord):
        with self._lock:
            self._records.append(record)

    def records(self) -> List[OutcomeRecord]:
        """Snapshot copy, safe to iterate while writers are still active."""
        with self._lock:
            return list(self._records)

    def counts(self) -> Dict[Outcome, int]:
        counter = Counter(r.outcome for r in self.records())
        return {outcome: counter.get(outcome, 0) for outcome in Outcome}

    def __len__(self):
        with self._lock:
            return len(self._records)
