"""
Per-day Web Vitals stores.

Samples are kept as one JSON array per UTC calendar day. The interface
owns the corruption policy (a day that cannot be decoded reads as empty)
and serialises appends per day key, so subclasses only provide raw reads
and writes.
"""

import asyncio
import json
import logging
import math
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional

from pydantic import ValidationError as PydanticValidationError

from vitals_api.exceptions import CorruptDataError, StorageError
from vitals_api.models import MetricEvent

logger = logging.getLogger(__name__)


class DayLoad(NamedTuple):
    """Result of loading one day store"""

    events: List[MetricEvent]
    was_corrupt: bool


def day_key(day: date) -> str:
    return day.isoformat()


def _parse_finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Out of range number: {text}")
    return value


def _reject_constant(name: str) -> float:
    raise ValueError(f"Not valid JSON: {name}")


def decode_records(raw: bytes) -> List[Any]:
    """
    Decode the contents of a day store into its raw records.

    Only strict JSON is accepted: NaN, Infinity and out-of-range numbers
    make the content corrupt.

    Raises:
        CorruptDataError: if the content is not a JSON array
    """
    try:
        data = json.loads(raw, parse_float=_parse_finite_float, parse_constant=_reject_constant)
    except ValueError as e:
        raise CorruptDataError(f"Invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise CorruptDataError(f"Expected a JSON array, got {type(data).__name__}")
    return data


def decode_day(raw: bytes) -> List[MetricEvent]:
    """
    Decode the contents of a day store into samples.

    Records that do not validate as a MetricEvent are skipped.

    Raises:
        CorruptDataError: if the content is not a JSON array
    """
    events: List[MetricEvent] = []
    for index, item in enumerate(decode_records(raw)):
        try:
            events.append(MetricEvent.model_validate(item))
        except PydanticValidationError as e:
            logger.warning(f"Skipping invalid record #{index}: {e.error_count()} validation error(s)")
    return events


def encode_records(records: List[Any]) -> bytes:
    return json.dumps(records, indent=2, allow_nan=False).encode("utf-8")


def encode_day(events: List[MetricEvent]) -> bytes:
    return encode_records([event.to_record() for event in events])


class DayLogInterface(ABC):
    """Abstract append-only log of samples, keyed by calendar day"""

    def __init__(self):
        # Only days with an append in flight hold an entry
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @abstractmethod
    async def read_raw(self, day: date) -> Optional[bytes]:
        """Return the stored content for a day, or None if nothing is stored"""
        pass

    @abstractmethod
    async def write_raw(self, day: date, content: bytes) -> None:
        """Replace the stored content for a day"""
        pass

    async def load_day(self, day: date) -> DayLoad:
        """
        Load the samples stored for a day.

        A missing day is empty. A day whose content cannot be decoded is
        reported as empty and corrupt.

        Raises:
            StorageError: if the underlying store cannot be read
        """
        raw = await self.read_raw(day)
        if raw is None:
            return DayLoad(events=[], was_corrupt=False)

        try:
            return DayLoad(events=decode_day(raw), was_corrupt=False)
        except CorruptDataError as e:
            logger.warning(f"Day store {day_key(day)} is corrupt, reading as empty: {e.message}")
            return DayLoad(events=[], was_corrupt=True)

    async def append(self, day: date, event: MetricEvent) -> int:
        """
        Append a sample to a day store and return the new number of records.

        The whole day is rewritten. Stored records are carried over as they
        are, including ones that do not validate as a MetricEvent. Appends
        to the same day are serialised; appends to different days are not.
        """
        key = day_key(day)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                return await self._append_record(day, event.to_record())
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    async def _append_record(self, day: date, record: Dict[str, Any]) -> int:
        records: List[Any] = []
        raw = await self.read_raw(day)
        if raw is not None:
            try:
                records = decode_records(raw)
            except CorruptDataError as e:
                logger.warning(f"Overwriting corrupt day store {day_key(day)}: {e.message}")

        records.append(record)
        await self.write_raw(day, encode_records(records))
        return len(records)


class JsonFileDayLog(DayLogInterface):
    """Day stores kept as <data_dir>/<YYYY-MM-DD>.json"""

    def __init__(self, data_dir: Path):
        super().__init__()
        self.data_dir = Path(data_dir)

    def path_for(self, day: date) -> Path:
        return self.data_dir / f"{day_key(day)}.json"

    async def read_raw(self, day: date) -> Optional[bytes]:
        return await asyncio.to_thread(self._read, self.path_for(day))

    async def write_raw(self, day: date, content: bytes) -> None:
        await asyncio.to_thread(self._write, self.path_for(day), content)

    def _read(self, path: Path) -> Optional[bytes]:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise StorageError(f"Failed to read {path.name}") from e

    def _write(self, path: Path, content: bytes) -> None:
        # Write to a sibling temp file and rename so readers never see a partial file
        tmp_path: Optional[str] = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "wb") as fh:
                fh.write(content)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"Failed to write {path.name}") from e


class InMemoryDayLog(DayLogInterface):
    """In-memory implementation of the day log"""

    def __init__(self):
        super().__init__()
        self._days: Dict[str, bytes] = {}

    async def read_raw(self, day: date) -> Optional[bytes]:
        return self._days.get(day_key(day))

    async def write_raw(self, day: date, content: bytes) -> None:
        self._days[day_key(day)] = content

    def days(self) -> List[str]:
        """Keys of all stored days, in order"""
        return sorted(self._days)
