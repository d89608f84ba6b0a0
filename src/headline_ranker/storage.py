"""Persistence of the set of links already delivered to the consumer."""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Set

from .exceptions import StateStoreError
from .models import DeliveredRecord, ensure_utc, utcnow
from .logger import get_logger


DEFAULT_RETENTION_HOURS = 48


def to_epoch_ms(moment: datetime) -> int:
    """Convert a datetime to integer epoch milliseconds."""
    return int(ensure_utc(moment).timestamp() * 1000)


class DeliveredStore(ABC):
    """
    Read-modify-write access to the single delivered-links record.

    A record older than the retention window is treated as empty. Read
    failures also yield an empty set and write failures are logged and
    dropped, so a broken store can only cause a story to be shown again.
    """

    def __init__(self, retention_hours: float = DEFAULT_RETENTION_HOURS):
        self.retention_hours = retention_hours
        self.logger = get_logger()

    @abstractmethod
    def read_record(self) -> Optional[DeliveredRecord]:
        """
        Read the stored record.

        Returns:
            The record, or None if nothing has been stored yet

        Raises:
            StateStoreError: If the record exists but cannot be read
        """
        pass

    @abstractmethod
    def write_record(self, record: DeliveredRecord) -> None:
        """
        Replace the stored record.

        Raises:
            StateStoreError: If the record cannot be written
        """
        pass

    def load_urls(self, now: Optional[datetime] = None) -> Set[str]:
        """
        Links delivered within the retention window.

        Args:
            now: Reference time (default: current UTC time)

        Returns:
            Set of canonical links, empty if missing, stale or unreadable
        """
        try:
            record = self.read_record()
        except StateStoreError as e:
            self.logger.warning(f"Delivered state unreadable, starting fresh: {e}")
            return set()

        if record is None:
            return set()

        now_ms = to_epoch_ms(now or utcnow())
        age_ms = now_ms - record.timestamp
        if age_ms > self.retention_hours * 60 * 60 * 1000:
            self.logger.info(
                f"Delivered state is {age_ms / 3_600_000:.1f}h old "
                f"(retention {self.retention_hours}h), ignoring it"
            )
            return set()

        return set(record.urls)

    def save_urls(self, urls: Iterable[str], now: Optional[datetime] = None) -> bool:
        """
        Store the delivered links with a fresh timestamp.

        Args:
            urls: Complete set of canonical links to keep
            now: Timestamp to record (default: current UTC time)

        Returns:
            True if the record was written, False if the write failed
        """
        record = DeliveredRecord(urls=sorted(set(urls)), timestamp=to_epoch_ms(now or utcnow()))
        try:
            self.write_record(record)
        except StateStoreError as e:
            self.logger.error(f"Failed to persist delivered state: {e}")
            return False

        self.logger.debug(f"Saved {len(record.urls)} delivered links")
        return True


class JsonFileDeliveredStore(DeliveredStore):
    """Delivered record kept as a JSON file."""

    def __init__(self, state_file: Path, retention_hours: float = DEFAULT_RETENTION_HOURS):
        """
        Initialize file-backed store.

        Args:
            state_file: Path to the JSON state file
            retention_hours: Age after which the record is ignored
        """
        super().__init__(retention_hours)
        self.state_file = Path(state_file)

    def read_record(self) -> Optional[DeliveredRecord]:
        if not self.state_file.exists():
            self.logger.info(f"Delivered state file not found, starting fresh: {self.state_file}")
            return None

        try:
            with open(self.state_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("state file does not contain an object")
            return DeliveredRecord.from_dict(data)
        except (OSError, ValueError, TypeError) as e:
            raise StateStoreError(f"{self.state_file}: {e}") from e

    def write_record(self, record: DeliveredRecord) -> None:
        # Write to a sibling temp file and swap it in so readers never see half a record
        tmp_path = None
        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.state_file.parent,
                prefix=f".{self.state_file.name}.",
                suffix=".tmp"
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(record.to_dict(), f, ensure_ascii=False)
            os.replace(tmp_path, self.state_file)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StateStoreError(f"{self.state_file}: {e}") from e


class MemoryDeliveredStore(DeliveredStore):
    """Delivered record kept in process memory."""

    def __init__(self, record: Optional[DeliveredRecord] = None,
                 retention_hours: float = DEFAULT_RETENTION_HOURS):
        super().__init__(retention_hours)
        self.record = record

    def read_record(self) -> Optional[DeliveredRecord]:
        return self.record

    def write_record(self, record: DeliveredRecord) -> None:
        self.record = record
