"""Domain errors for cloudant-sync."""

from typing import List, Optional


class SyncError(RuntimeError):
    """Raised when the sync run cannot continue safely."""


class PhaseError(SyncError):
    """Aggregate failure for one phase; carries every failed result."""

    def __init__(self, phase: str, failures: List, total: int, results: Optional[List] = None):
        self.phase = phase
        self.failures = list(failures)
        self.results = list(results) if results is not None else list(self.failures)
        self.total = total
        super().__init__(f"{phase}: {len(self.failures)} of {total} operations failed")
