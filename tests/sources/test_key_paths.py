"""Tests for registry key path helpers."""
import pytest

from sources.base import join_key_path, split_key_path


class TestSplitKeyPath:

    def test_short_root(self):
        assert split_key_path("HKLM\\SOFTWARE\\Run") == ("HKLM", ["SOFTWARE", "Run"])

    @pytest.mark.parametrize("path,root", [
        ("HKEY_LOCAL_MACHINE\\SOFTWARE", "HKLM"),
        ("HKEY_USERS\\S-1-5-18", "HKU"),
        ("hkcu\\Software", "HKCU"),
        ("HKLM:\\SOFTWARE", "HKLM"),
        ("HKEY_CLASSES_ROOT\\*", "HKCR"),
        ("HKEY_CURRENT_CONFIG\\System", "HKCC"),
    ])
    def test_root_aliases(self, path, root):
        assert split_key_path(path)[0] == root

    def test_forward_slashes_and_doubled_separators(self):
        assert split_key_path("HKLM/SOFTWARE\\\\Microsoft/") == ("HKLM", ["SOFTWARE", "Microsoft"])

    def test_root_only(self):
        assert split_key_path("HKU") == ("HKU", [])

    def test_empty_path_rejected(self):
        with pytest.raises(ValueError):
            split_key_path("\\\\")

    def test_unknown_root_rejected(self):
        with pytest.raises(ValueError):
            split_key_path("SOFTWARE\\Microsoft")


class TestPathHelpers:

    def test_join(self):
        assert join_key_path("HKU", ["S-1-5-18", "Software"]) == "HKU\\S-1-5-18\\Software"
        assert join_key_path("HKLM", []) == "HKLM"
