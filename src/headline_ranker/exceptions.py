"""Custom exceptions for pipeline operations."""


class HeadlineRankerError(Exception):
    """Base class for pipeline errors."""
    pass


class StageTimeoutError(HeadlineRankerError):
    """Raised when a pipeline stage exceeds its wall-clock budget."""

    def __init__(self, stage: str, timeout: float):
        self.stage = stage
        self.timeout = timeout
        super().__init__(f"Stage '{stage}' timed out after {timeout:g}s")


class StateStoreError(HeadlineRankerError):
    """Raised when delivered state cannot be read or written."""
    pass
