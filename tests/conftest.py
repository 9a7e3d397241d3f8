"""Global pytest configuration."""

import json
from pathlib import Path

import pytest

pytest_plugins = ["tests.fixtures.registry"]


@pytest.fixture
def write_json(tmp_path: Path):
    """Write an object as JSON to a temp file and return the path."""

    def _write(obj, name: str = "baseline.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(obj), encoding="utf-8")
        return path

    return _write
