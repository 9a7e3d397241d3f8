"""Tests for baseline and discrepancy records."""
import pytest

from baseline.records import (
    DiscrepancyRecord,
    MatchAllRecord,
    MatchSpecificRecord,
    make_baseline_record,
)
from core.enums import DiscrepancyKind, MatchMode
from core.exceptions import BaselineRecordError
from core.values import IntValue, StringValue

KEY = "HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Run"


class TestBaselineRecordInvariants:
    """Construction-time invariants."""

    def test_valid_record(self):
        record = MatchAllRecord(KEY, ("A", "B"), (StringValue("a"), IntValue(1)))
        assert record.match_mode == MatchMode.MATCH_ALL
        assert list(record.items()) == [("A", StringValue("a")), ("B", IntValue(1))]

    def test_lists_stored_as_tuples(self):
        record = MatchSpecificRecord(KEY, ["A"], [StringValue("a")])
        assert record.names == ("A",)
        assert record.values == (StringValue("a"),)

    def test_length_mismatch_rejected(self):
        with pytest.raises(BaselineRecordError):
            MatchAllRecord(KEY, ("A", "B"), (StringValue("a"),))

    def test_duplicate_names_rejected_case_insensitive(self):
        with pytest.raises(BaselineRecordError):
            MatchAllRecord(KEY, ("Shell", "shell"), (StringValue("a"), StringValue("b")))

    def test_empty_key_rejected(self):
        with pytest.raises(BaselineRecordError):
            MatchAllRecord("", (), ())

    def test_raw_values_rejected(self):
        with pytest.raises(BaselineRecordError):
            MatchAllRecord(KEY, ("A",), ("plain string",))

    def test_record_error_is_value_error(self):
        with pytest.raises(ValueError):
            MatchSpecificRecord(KEY, ("A",), ())

    def test_records_are_immutable(self):
        record = MatchAllRecord(KEY, (), ())
        with pytest.raises(AttributeError):
            record.key = "other"

    def test_variants_with_same_fields_differ(self):
        assert MatchAllRecord(KEY, (), ()) != MatchSpecificRecord(KEY, (), ())

    def test_index_of_is_case_insensitive(self):
        record = MatchSpecificRecord(KEY, ("Shell", "Userinit"), (StringValue("a"), StringValue("b")))
        assert record.index_of("USERINIT") == 1
        assert record.index_of("Taskman") is None


class TestMakeBaselineRecord:

    def test_builds_variant_from_tag(self):
        assert isinstance(make_baseline_record("MatchAll", KEY, [], []), MatchAllRecord)
        assert isinstance(
            make_baseline_record(MatchMode.MATCH_SPECIFIC, KEY, [], []), MatchSpecificRecord
        )

    def test_unknown_mode_rejected(self):
        with pytest.raises(BaselineRecordError):
            make_baseline_record("MatchSome", KEY, [], [])


class TestDiscrepancyRecord:

    def test_key_missing_factory(self):
        record = DiscrepancyRecord.key_missing(KEY)
        assert record.is_key_missing
        assert record.name is None
        assert record.live_value is None
        assert record.baseline_value is None
        assert record.kind == DiscrepancyKind.KEY_MISSING

    def test_value_discrepancy_not_key_missing(self):
        record = DiscrepancyRecord(KEY, "Malware", StringValue("x"), None, DiscrepancyKind.VALUE_ADDED)
        assert not record.is_key_missing
