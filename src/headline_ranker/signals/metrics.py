"""Lookup statistics for social signal providers."""

from dataclasses import dataclass
from typing import Dict


@dataclass
class LookupStats:
    """Counts lookups made against one provider during the process lifetime."""
    provider_id: str
    lookups: int = 0
    matches: int = 0  # lookups that returned at least one candidate
    failures: int = 0
    total_latency_seconds: float = 0.0
    consecutive_failures: int = 0

    def record_success(self, latency: float, matched: bool):
        """Record a completed lookup."""
        self.lookups += 1
        self.total_latency_seconds += latency
        self.consecutive_failures = 0
        if matched:
            self.matches += 1

    def record_failure(self):
        """Record a failed lookup."""
        self.lookups += 1
        self.failures += 1
        self.consecutive_failures += 1

    def average_latency(self) -> float:
        """Average latency of completed lookups, in seconds."""
        completed = self.lookups - self.failures
        if completed == 0:
            return 0.0
        return self.total_latency_seconds / completed

    def failure_rate(self) -> float:
        """Share of lookups that failed (0.0 to 1.0)."""
        if self.lookups == 0:
            return 0.0
        return self.failures / self.lookups

    def to_dict(self) -> Dict:
        """Convert stats to dictionary for serialization."""
        return {
            "provider_id": self.provider_id,
            "lookups": self.lookups,
            "matches": self.matches,
            "failures": self.failures,
            "failure_rate": self.failure_rate(),
            "average_latency_seconds": self.average_latency()
        }
