"""Local recognition history with per-day aggregation."""

import json
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Protocol

from pydantic import ValidationError

from calorie_snap.domain.records import CalorieRecord, DailyTotal, PeriodSummary

STORAGE_KEY = "calorie_records"

_logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """String key-value storage holding the serialized collection."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when absent."""

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""


@dataclass
class InMemoryStorage(KeyValueStorage):
    """Process-local storage."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


@dataclass
class RecordStore:
    """Append-only collection of CalorieRecords kept under one storage key.

    Storage failures never propagate: reads fall back to an empty collection
    and writes become no-ops, both logged. Each mutation re-reads and rewrites
    the full collection, so concurrent writers race with last write winning.
    """

    storage: KeyValueStorage
    key: str = STORAGE_KEY

    def all(self) -> list[CalorieRecord]:
        """Return every stored record in storage order."""
        try:
            raw = self.storage.get(self.key)
        except Exception:
            _logger.exception("Failed to read calorie records")
            return []
        if not raw:
            return []
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError:
            _logger.exception("Stored calorie records are not valid JSON")
            return []
        if not isinstance(entries, list):
            _logger.error("Stored calorie records are not a list; ignoring")
            return []
        return [record for entry in entries if (record := _parse_entry(entry))]

    def append(self, record: CalorieRecord) -> None:
        """Add a record and persist the collection."""
        records = self.all()
        records.append(record)
        self._write(records)

    def delete(self, record_id: str) -> None:
        """Remove the record with ``record_id``; unknown ids are ignored."""
        records = self.all()
        remaining = [record for record in records if record.id != record_id]
        if len(remaining) == len(records):
            return
        self._write(remaining)

    def for_date(self, day: date) -> list[CalorieRecord]:
        """Return records logged on ``day``."""
        return [record for record in self.all() if record.date == day]

    def today_records(self, today: date | None = None) -> list[CalorieRecord]:
        """Return records logged today, newest first."""
        records = self.for_date(today or date.today())
        return sorted(records, key=lambda record: record.timestamp, reverse=True)

    def daily_totals(
        self, window_days: int, today: date | None = None
    ) -> list[DailyTotal]:
        """Sum calories per date over the last ``window_days`` days.

        Dates without records are omitted rather than reported as zero.
        """
        end = today or date.today()
        start = end - timedelta(days=window_days - 1)
        totals: dict[date, float] = defaultdict(float)
        for record in self.all():
            if start <= record.date <= end:
                totals[record.date] += record.calorie
        return [DailyTotal(day=day, total=totals[day]) for day in sorted(totals)]

    def summary(self, today: date | None = None) -> PeriodSummary:
        """Return today's total and 7/30-day averages over days with records."""
        end = today or date.today()
        today_total = sum(record.calorie for record in self.for_date(end))
        return PeriodSummary(
            today_total=today_total,
            week_average=_average(self.daily_totals(7, end)),
            month_average=_average(self.daily_totals(30, end)),
        )

    def _write(self, records: list[CalorieRecord]) -> None:
        payload = json.dumps(
            [record.to_storage() for record in records], ensure_ascii=False
        )
        try:
            self.storage.set(self.key, payload)
        except Exception:
            _logger.exception("Failed to write calorie records")


def _parse_entry(entry: object) -> CalorieRecord | None:
    try:
        return CalorieRecord.model_validate(entry)
    except ValidationError as exc:
        _logger.warning("Skipping malformed calorie record: %s", exc)
        return None


def _average(totals: list[DailyTotal]) -> float:
    if not totals:
        return 0.0
    return sum(entry.total for entry in totals) / len(totals)
