"""
Baseline comparison (drift detection).

For each baseline record the recorded key is checked on the live source and
its values are compared under the record's match mode:

- Key gone: one KEY_MISSING discrepancy, nothing else for that record.
- MatchAll: live names unknown to the baseline are VALUE_ADDED; shared names
  with different data are VALUE_CHANGED. Names that disappeared since the
  baseline are not reported unless ``strict`` is set (VALUE_REMOVED).
- MatchSpecific: each recorded name is read live; absent is VALUE_MISSING,
  different is VALUE_CHANGED. Other live values are ignored.

Values compare by structural equality over their typed representation, so a
type change (REG_SZ "1" -> REG_DWORD 1) is a change.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from core.enums import DiscrepancyKind
from core.exceptions import RegistryAccessError, RegistryKeyNotFoundError
from core.logging import get_logger
from sources.base import RegistrySource

from .callbacks import NullCallbacks, ProgressCallbacks
from .records import (
    BaselineRecord,
    DiscrepancyRecord,
    MatchAllRecord,
    MatchSpecificRecord,
    fold_name,
)
from .resolver import KeyResolver

LOGGER = get_logger("baseline.comparator")


class BaselineComparator:
    """Compare baseline records against a registry source."""

    def __init__(
        self,
        source: RegistrySource,
        strict: bool = False,
        callbacks: Optional[ProgressCallbacks] = None,
    ):
        """
        Args:
            source: Live (or offline) registry to compare against
            strict: Also report MatchAll values removed since the baseline
            callbacks: Progress observer, called after each record
        """
        self._source = source
        self._resolver = KeyResolver(source)
        self._strict = strict
        self._callbacks = callbacks or NullCallbacks()

    def compare(self, records: Iterable[BaselineRecord]) -> List[DiscrepancyRecord]:
        """
        Compare every record and collect the discrepancies.

        Returns:
            Discrepancies in record order; an empty list means no drift
        """
        records = list(records)
        total = len(records)
        discrepancies: List[DiscrepancyRecord] = []

        for index, record in enumerate(records, start=1):
            try:
                discrepancies.extend(self.compare_record(record))
            except RegistryAccessError as e:
                LOGGER.warning("Skipping unreadable key %s: %s", record.key, e)
                self._callbacks.on_error(f"Cannot read key: {record.key}", str(e))
            except ValueError as e:
                LOGGER.warning("Skipping invalid baseline key %s: %s", record.key, e)
                self._callbacks.on_error(f"Invalid baseline key: {record.key}", str(e))
            self._callbacks.on_progress(index, total, record.key)

        LOGGER.info(
            "Compared %d baseline records: %d discrepancies", total, len(discrepancies)
        )
        return discrepancies

    def compare_record(self, record: BaselineRecord) -> List[DiscrepancyRecord]:
        """
        Compare one record.

        Raises:
            RegistryAccessError: If the key exists but cannot be read
        """
        if not self._resolver.exists(record.key):
            LOGGER.debug("Baseline key missing: %s", record.key)
            return [DiscrepancyRecord.key_missing(record.key)]

        try:
            if isinstance(record, MatchAllRecord):
                return self._compare_all(record)
            if isinstance(record, MatchSpecificRecord):
                return self._compare_specific(record)
        except RegistryKeyNotFoundError:
            # Deleted between the existence check and the read
            return [DiscrepancyRecord.key_missing(record.key)]

        raise TypeError(f"Unsupported baseline record: {type(record).__name__}")

    def _compare_all(self, record: MatchAllRecord) -> List[DiscrepancyRecord]:
        found: List[DiscrepancyRecord] = []
        live_names = self._source.value_names(record.key)
        live_folded = set()

        for name in live_names:
            live_folded.add(fold_name(name))
            live_value = self._source.read_value(record.key, name)
            if live_value is None:
                continue

            index = record.index_of(name)
            if index is None:
                found.append(DiscrepancyRecord(
                    key=record.key,
                    name=name,
                    live_value=live_value,
                    baseline_value=None,
                    kind=DiscrepancyKind.VALUE_ADDED,
                ))
                continue

            baseline_value = record.values[index]
            if live_value != baseline_value:
                found.append(DiscrepancyRecord(
                    key=record.key,
                    name=record.names[index],
                    live_value=live_value,
                    baseline_value=baseline_value,
                    kind=DiscrepancyKind.VALUE_CHANGED,
                ))

        if self._strict:
            for name, baseline_value in record.items():
                if fold_name(name) not in live_folded:
                    found.append(DiscrepancyRecord(
                        key=record.key,
                        name=name,
                        live_value=None,
                        baseline_value=baseline_value,
                        kind=DiscrepancyKind.VALUE_REMOVED,
                    ))

        return found

    def _compare_specific(self, record: MatchSpecificRecord) -> List[DiscrepancyRecord]:
        found: List[DiscrepancyRecord] = []
        for name, baseline_value in record.items():
            live_value = self._source.read_value(record.key, name)
            if live_value is None:
                found.append(DiscrepancyRecord(
                    key=record.key,
                    name=name,
                    live_value=None,
                    baseline_value=baseline_value,
                    kind=DiscrepancyKind.VALUE_MISSING,
                ))
            elif live_value != baseline_value:
                found.append(DiscrepancyRecord(
                    key=record.key,
                    name=name,
                    live_value=live_value,
                    baseline_value=baseline_value,
                    kind=DiscrepancyKind.VALUE_CHANGED,
                ))
        return found


def compare_baseline(
    source: RegistrySource,
    records: Iterable[BaselineRecord],
    strict: bool = False,
    callbacks: Optional[ProgressCallbacks] = None,
) -> List[DiscrepancyRecord]:
    """Convenience wrapper around BaselineComparator.compare()."""
    return BaselineComparator(source, strict=strict, callbacks=callbacks).compare(records)
