"""
Baseline collection.

Walks a map of key patterns to watch-lists and captures the current values
of every resolved key as baseline records.
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Sequence

from core.exceptions import RegistryAccessError, RegistryKeyNotFoundError
from core.logging import get_logger
from sources.base import RegistrySource

from .callbacks import NullCallbacks, ProgressCallbacks
from .records import BaselineRecord, MatchAllRecord, MatchSpecificRecord, fold_name
from .resolver import DEFAULT_SID_FILTER, KeyResolver

LOGGER = get_logger("baseline.collector")


def _unique_names(names: Iterable[str]) -> List[str]:
    unique: List[str] = []
    seen = set()
    for name in names:
        folded = fold_name(name)
        if folded not in seen:
            seen.add(folded)
            unique.append(name)
    return unique


class BaselineCollector:
    """
    Capture baseline records from a registry source.

    An empty watch-list captures every value on the key (MatchAll); a
    non-empty one captures only the listed names that exist (MatchSpecific).
    Patterns that resolve to nothing and watched names that are absent are
    silently left out of the baseline.
    """

    def __init__(
        self,
        source: RegistrySource,
        callbacks: Optional[ProgressCallbacks] = None,
    ):
        self._source = source
        self._resolver = KeyResolver(source)
        self._callbacks = callbacks or NullCallbacks()

    def collect(
        self,
        targets: Mapping[str, Sequence[str]],
        sid_filter: str = DEFAULT_SID_FILTER,
    ) -> List[BaselineRecord]:
        """
        Collect baseline records for every pattern.

        Args:
            targets: Ordered mapping of key pattern to watch-list
            sid_filter: Value substituted for the {SID} placeholder

        Returns:
            Records in pattern order, then resolved-key order
        """
        records: List[BaselineRecord] = []
        patterns = list(targets.items())
        total = len(patterns)

        for index, (pattern, watch_list) in enumerate(patterns, start=1):
            try:
                keys = self._resolver.resolve(pattern, sid_filter)
            except ValueError as e:
                LOGGER.warning("Skipping invalid key pattern %s: %s", pattern, e)
                self._callbacks.on_error(f"Invalid key pattern: {pattern}", str(e))
                self._callbacks.on_progress(index, total, pattern)
                continue

            if not keys:
                self._callbacks.on_log(f"No keys match pattern {pattern}", "debug")

            for key in keys:
                try:
                    records.append(self._collect_key(key, watch_list))
                except RegistryKeyNotFoundError:
                    LOGGER.debug("Key %s disappeared during collection", key)
                except RegistryAccessError as e:
                    LOGGER.warning("Skipping unreadable key %s: %s", key, e)
                    self._callbacks.on_error(f"Cannot read key: {key}", str(e))

            self._callbacks.on_progress(index, total, pattern)

        LOGGER.info("Collected %d baseline records from %d patterns", len(records), total)
        return records

    def _collect_key(self, key: str, watch_list: Sequence[str]) -> BaselineRecord:
        names: List[str] = []
        values = []

        if not watch_list:
            for name in self._source.value_names(key):
                value = self._source.read_value(key, name)
                if value is None:
                    continue
                names.append(name)
                values.append(value)
            return MatchAllRecord(key=key, names=tuple(names), values=tuple(values))

        for name in _unique_names(watch_list):
            value = self._source.read_value(key, name)
            if value is None:
                continue
            names.append(name)
            values.append(value)
        return MatchSpecificRecord(key=key, names=tuple(names), values=tuple(values))


def collect_baseline(
    source: RegistrySource,
    targets: Mapping[str, Sequence[str]],
    sid_filter: str = DEFAULT_SID_FILTER,
    callbacks: Optional[ProgressCallbacks] = None,
) -> List[BaselineRecord]:
    """Convenience wrapper around BaselineCollector.collect()."""
    return BaselineCollector(source, callbacks=callbacks).collect(targets, sid_filter)
