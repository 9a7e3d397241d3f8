"""
Baseline and discrepancy records.

A baseline record is one of two variants, MatchAllRecord or
MatchSpecificRecord, sharing the same fields (key, names, values). The
variant decides how the comparator treats live values that are not in the
record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterable, Optional, Tuple, Union

from core.enums import DiscrepancyKind, MatchMode
from core.exceptions import BaselineRecordError
from core.values import RegistryValue, is_registry_value


def fold_name(name: str) -> str:
    """Registry value names compare case-insensitively."""
    return name.casefold()


@dataclass(frozen=True, slots=True)
class _BaselineRecordBase:
    key: str
    names: Tuple[str, ...]
    values: Tuple[RegistryValue, ...]

    match_mode: ClassVar[MatchMode]

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key:
            raise BaselineRecordError("Baseline record key must be a non-empty string")
        # Accept any iterable but store tuples so records stay immutable
        object.__setattr__(self, "names", tuple(self.names))
        object.__setattr__(self, "values", tuple(self.values))

        if len(self.names) != len(self.values):
            raise BaselineRecordError(
                f"Record for {self.key} has {len(self.names)} names "
                f"but {len(self.values)} values"
            )
        seen = set()
        for name in self.names:
            if not isinstance(name, str):
                raise BaselineRecordError(f"Value name must be a string in {self.key}: {name!r}")
            folded = fold_name(name)
            if folded in seen:
                raise BaselineRecordError(f"Duplicate value name {name!r} in {self.key}")
            seen.add(folded)
        for value in self.values:
            if not is_registry_value(value):
                raise BaselineRecordError(
                    f"Unsupported value object in {self.key}: {type(value).__name__}"
                )

    def items(self) -> Iterable[Tuple[str, RegistryValue]]:
        return zip(self.names, self.values)

    def index_of(self, name: str) -> Optional[int]:
        """Position of a value name (case-insensitive), or None."""
        wanted = fold_name(name)
        for index, candidate in enumerate(self.names):
            if fold_name(candidate) == wanted:
                return index
        return None


@dataclass(frozen=True, slots=True)
class MatchAllRecord(_BaselineRecordBase):
    """All values present at baseline time; unknown live names are drift."""

    match_mode: ClassVar[MatchMode] = MatchMode.MATCH_ALL


@dataclass(frozen=True, slots=True)
class MatchSpecificRecord(_BaselineRecordBase):
    """Only the watched names that existed at baseline time."""

    match_mode: ClassVar[MatchMode] = MatchMode.MATCH_SPECIFIC


BaselineRecord = Union[MatchAllRecord, MatchSpecificRecord]

_RECORD_TYPES = {
    MatchMode.MATCH_ALL: MatchAllRecord,
    MatchMode.MATCH_SPECIFIC: MatchSpecificRecord,
}


def make_baseline_record(
    mode: MatchMode | str,
    key: str,
    names: Iterable[str],
    values: Iterable[RegistryValue],
) -> BaselineRecord:
    """
    Build the record variant for a match mode.

    Raises:
        BaselineRecordError: If the mode is unknown or the record is invalid
    """
    try:
        record_type = _RECORD_TYPES[MatchMode(mode)]
    except ValueError as exc:
        raise BaselineRecordError(f"Unknown match mode: {mode!r}") from exc
    return record_type(key=key, names=tuple(names), values=tuple(values))


@dataclass(frozen=True, slots=True)
class DiscrepancyRecord:
    """One divergence between live state and the baseline."""

    key: str
    name: Optional[str]
    live_value: Optional[RegistryValue]
    baseline_value: Optional[RegistryValue]
    kind: DiscrepancyKind

    @property
    def is_key_missing(self) -> bool:
        return self.name is None

    @classmethod
    def key_missing(cls, key: str) -> "DiscrepancyRecord":
        return cls(key=key, name=None, live_value=None, baseline_value=None,
                   kind=DiscrepancyKind.KEY_MISSING)
