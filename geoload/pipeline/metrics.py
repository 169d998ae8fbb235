# ========================
# geoload/pipeline/metrics.py
# ========================

"""
Ingestion Metrics Module

Per-chunk outcome counts and the running total for a whole ingestion run.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkMetrics:
    """Outcome counts of a single chunk."""

    processed: int
    imported: int
    invalid: int
    errors: int

    @classmethod
    def from_counts(cls, chunk_size: int, valid_count: int, imported_count: int) -> "ChunkMetrics":
        """
        Derive chunk metrics from the three raw counts.

        Rows that passed validation but were not written (uniqueness
        conflicts or any other store-side rejection) count as errors.
        """
        return cls(
            processed=chunk_size,
            imported=imported_count,
            invalid=chunk_size - valid_count,
            errors=valid_count - imported_count,
        )


@dataclass
class IngestionMetrics:
    """
    Running totals for an ingestion run.

    Invariant: processed == imported + invalid + errors.
    elapsed_time is set once, in microseconds, after the last chunk.
    """

    processed: int = 0
    imported: int = 0
    invalid: int = 0
    errors: int = 0
    elapsed_time: Optional[int] = None

    def add(self, chunk: ChunkMetrics) -> None:
        """Fold one chunk's counts into the running totals."""
        if self.elapsed_time is not None:
            raise RuntimeError("Metrics are already finalized")

        self.processed += chunk.processed
        self.imported += chunk.imported
        self.invalid += chunk.invalid
        self.errors += chunk.errors

    def finalize(self, elapsed_microseconds: int) -> "IngestionMetrics":
        self.elapsed_time = int(elapsed_microseconds)
        return self

    def counts(self) -> Dict[str, int]:
        """The four counters, without elapsed time."""
        return {
            'processed': self.processed,
            'imported': self.imported,
            'invalid': self.invalid,
            'errors': self.errors,
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def __str__(self) -> str:
        return (
            f"errors: {self.errors}, imported: {self.imported}, "
            f"invalid: {self.invalid}, processed: {self.processed}, "
            f"elapsed_time: {self.elapsed_time}"
        )
