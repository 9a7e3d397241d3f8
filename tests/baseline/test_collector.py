"""Tests for baseline collection."""
from unittest.mock import MagicMock

from baseline.collector import BaselineCollector, collect_baseline
from baseline.records import MatchAllRecord, MatchSpecificRecord
from core.values import IntValue, StringListValue, StringValue
from tests.fixtures.registry import RUN_KEY, USER_SIDS, WINLOGON_KEY

USER_RUN = "HKU\\{SID}\\Software\\Microsoft\\Windows\\CurrentVersion\\Run"
SESSION_MANAGER = "HKLM\\SYSTEM\\ControlSet*\\Control\\Session Manager"


class TestMatchAllCollection:
    """Empty watch-list captures every value."""

    def test_all_values_captured(self, populated_registry):
        records = collect_baseline(populated_registry, {RUN_KEY: []})

        assert len(records) == 1
        record = records[0]
        assert isinstance(record, MatchAllRecord)
        assert record.key == RUN_KEY
        assert record.names == ("Updater", "SecurityHealth")
        assert record.values[0] == StringValue("C:\\Program Files\\Updater\\upd.exe")

    def test_empty_key_still_recorded(self, fake_registry):
        fake_registry.add_key(RUN_KEY)
        records = collect_baseline(fake_registry, {RUN_KEY: []})
        assert records == [MatchAllRecord(RUN_KEY, (), ())]


class TestMatchSpecificCollection:
    """Non-empty watch-list captures only listed names that exist."""

    def test_watched_names_only(self, populated_registry):
        records = collect_baseline(populated_registry, {WINLOGON_KEY: ["Shell", "Userinit"]})

        record = records[0]
        assert isinstance(record, MatchSpecificRecord)
        assert record.names == ("Shell", "Userinit")
        assert "AutoRestartShell" not in record.names

    def test_absent_names_silently_omitted(self, populated_registry):
        records = collect_baseline(
            populated_registry, {WINLOGON_KEY: ["Shell", "Taskman", "AppSetup"]}
        )
        assert records[0].names == ("Shell",)

    def test_no_watched_name_present_still_records_key(self, populated_registry):
        records = collect_baseline(populated_registry, {WINLOGON_KEY: ["Taskman"]})
        assert records == [MatchSpecificRecord(WINLOGON_KEY, (), ())]

    def test_duplicate_watch_names_collapsed(self, populated_registry):
        records = collect_baseline(populated_registry, {WINLOGON_KEY: ["Shell", "SHELL", "Shell"]})
        assert records[0].names == ("Shell",)

    def test_typed_values_kept(self, populated_registry):
        records = collect_baseline(
            populated_registry, {WINLOGON_KEY: ["AutoRestartShell"], SESSION_MANAGER: ["BootExecute"]}
        )
        assert records[0].values == (IntValue(1),)
        assert records[1].values == (StringListValue(("autocheck autochk *",)),)


class TestPatternExpansion:

    def test_one_record_per_resolved_key(self, populated_registry):
        records = collect_baseline(populated_registry, {SESSION_MANAGER: ["BootExecute"]})
        assert [r.key for r in records] == [
            "HKLM\\SYSTEM\\ControlSet001\\Control\\Session Manager",
            "HKLM\\SYSTEM\\ControlSet002\\Control\\Session Manager",
        ]

    def test_sid_filter_applied(self, populated_registry):
        records = collect_baseline(populated_registry, {USER_RUN: []}, sid_filter=USER_SIDS[0])
        assert len(records) == 1
        assert USER_SIDS[0] in records[0].key

    def test_missing_pattern_skipped(self, populated_registry):
        records = collect_baseline(populated_registry, {
            "HKLM\\SOFTWARE\\Absent\\Run": [],
            RUN_KEY: [],
        })
        assert [r.key for r in records] == [RUN_KEY]

    def test_order_follows_patterns_then_keys(self, populated_registry):
        records = collect_baseline(populated_registry, {
            USER_RUN: [],
            RUN_KEY: [],
        })
        assert [r.key for r in records][-1] == RUN_KEY
        assert all(r.key.startswith("HKU\\") for r in records[:-1])


class TestErrorHandling:
    """Per-key failures do not abort the walk."""

    def test_unreadable_key_skipped(self, populated_registry):
        populated_registry.deny(WINLOGON_KEY)
        callbacks = MagicMock()

        records = BaselineCollector(populated_registry, callbacks=callbacks).collect({
            WINLOGON_KEY: [],
            RUN_KEY: [],
        })

        assert [r.key for r in records] == [RUN_KEY]
        callbacks.on_error.assert_called_once()
        assert WINLOGON_KEY in callbacks.on_error.call_args[0][0]

    def test_invalid_pattern_skipped(self, populated_registry):
        callbacks = MagicMock()
        records = BaselineCollector(populated_registry, callbacks=callbacks).collect({
            "NOTAROOT\\Software": [],
            RUN_KEY: [],
        })
        assert [r.key for r in records] == [RUN_KEY]
        callbacks.on_error.assert_called_once()


class TestProgress:

    def test_progress_reported_per_pattern(self, populated_registry):
        callbacks = MagicMock()
        BaselineCollector(populated_registry, callbacks=callbacks).collect({
            RUN_KEY: [],
            WINLOGON_KEY: ["Shell"],
            "HKLM\\SOFTWARE\\Absent": [],
        })
        calls = [c.args for c in callbacks.on_progress.call_args_list]
        assert calls == [
            (1, 3, RUN_KEY),
            (2, 3, WINLOGON_KEY),
            (3, 3, "HKLM\\SOFTWARE\\Absent"),
        ]

    def test_unmatched_pattern_logged_through_callbacks(self, populated_registry):
        callbacks = MagicMock()
        BaselineCollector(populated_registry, callbacks=callbacks).collect({
            RUN_KEY: [],
            "HKLM\\SOFTWARE\\Absent": [],
        })
        callbacks.on_log.assert_called_once_with("No keys match pattern HKLM\\SOFTWARE\\Absent", "debug")
