"""
Discrepancy report rendering.

This module provides:
- DiscrepancyReport: renders comparator output as a text table, CSV, JSON
  or a standalone HTML page (Jinja2 template)

Usage:
    from reports.discrepancies import DiscrepancyReport

    report = DiscrepancyReport(discrepancies, baseline_path=Path("baseline.json"))
    print(report.to_table())
    Path("drift.html").write_text(report.to_html(), encoding="utf-8")
"""

from __future__ import annotations

import csv
import io
import json
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from baseline.records import DiscrepancyRecord
from baseline.serialization import encode_value
from core.app_version import get_app_version
from core.enums import DiscrepancyKind, ReportFormat
from core.values import format_value, value_type_name

from .paths import get_templates_dir

TEMPLATE_NAME = "discrepancies.html"
KEY_MISSING_LABEL = "(key missing)"
CLEAN_MESSAGE = "No discrepancies found."

CSV_COLUMNS = [
    "key",
    "name",
    "kind",
    "live_value",
    "live_type",
    "baseline_value",
    "baseline_type",
]


@dataclass
class ReportRow:
    """One discrepancy flattened to display strings."""

    key: str
    name: str
    kind: str
    live_value: str
    live_type: str
    baseline_value: str
    baseline_type: str

    @classmethod
    def from_record(cls, record: DiscrepancyRecord, max_length: int = 0) -> "ReportRow":
        return cls(
            key=record.key,
            name=KEY_MISSING_LABEL if record.name is None else (record.name or "(Default)"),
            kind=str(record.kind),
            live_value=format_value(record.live_value, max_length),
            live_type=value_type_name(record.live_value),
            baseline_value=format_value(record.baseline_value, max_length),
            baseline_type=value_type_name(record.baseline_value),
        )


@dataclass
class DiscrepancyReport:
    """Render comparator output in the supported report formats."""

    discrepancies: Sequence[DiscrepancyRecord]
    baseline_path: Optional[Path] = None
    source_label: Optional[str] = None
    generated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    )

    @property
    def is_clean(self) -> bool:
        return not self.discrepancies

    def summary(self) -> Dict[str, int]:
        """Count of discrepancies per kind (every kind present, zero if unused)."""
        counts = Counter(record.kind for record in self.discrepancies)
        return {str(kind): counts.get(kind, 0) for kind in DiscrepancyKind}

    def rows(self, max_length: int = 0) -> List[ReportRow]:
        return [ReportRow.from_record(record, max_length) for record in self.discrepancies]

    def to_table(self, max_width: int = 60) -> str:
        """Fixed-width text table for terminal output."""
        if self.is_clean:
            return CLEAN_MESSAGE

        headers = ["Key", "Name", "Kind", "Live", "Baseline"]
        body = [
            [row.key, row.name, row.kind, row.live_value, row.baseline_value]
            for row in self.rows(max_length=max_width)
        ]
        widths = [
            max(len(headers[col]), *(len(line[col]) for line in body))
            for col in range(len(headers))
        ]

        def _line(cells: List[str]) -> str:
            return "  ".join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()

        lines = [_line(headers), _line(["-" * width for width in widths])]
        lines.extend(_line(cells) for cells in body)
        return "\n".join(lines)

    def to_csv(self) -> str:
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, lineterminator="\n")
        writer.writeheader()
        for row in self.rows():
            writer.writerow({column: getattr(row, column) for column in CSV_COLUMNS})
        return buffer.getvalue()

    def to_dicts(self) -> List[Dict[str, Any]]:
        """Discrepancies as JSON-compatible objects (values use the baseline encoding)."""
        return [
            {
                "key": record.key,
                "name": record.name,
                "kind": str(record.kind),
                "liveValue": None if record.live_value is None else encode_value(record.live_value),
                "baselineValue": (
                    None if record.baseline_value is None else encode_value(record.baseline_value)
                ),
            }
            for record in self.discrepancies
        ]

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dicts(), indent=indent, ensure_ascii=False)

    def to_html(self) -> str:
        env = Environment(
            loader=FileSystemLoader(get_templates_dir()),
            autoescape=True,
        )
        template = env.get_template(TEMPLATE_NAME)
        return template.render(
            rows=self.rows(),
            summary=self.summary(),
            total=len(self.discrepancies),
            clean_message=CLEAN_MESSAGE,
            baseline_path=str(self.baseline_path) if self.baseline_path else None,
            source_label=self.source_label,
            generated_at=self.generated_at,
            app_version=get_app_version(),
        )

    def render(self, report_format: ReportFormat | str) -> str:
        """Render in the named format (table, csv, json, html)."""
        renderers = {
            ReportFormat.TABLE: self.to_table,
            ReportFormat.CSV: self.to_csv,
            ReportFormat.JSON: self.to_json,
            ReportFormat.HTML: self.to_html,
        }
        return renderers[ReportFormat(report_format)]()
