"""Reports module - discrepancy report rendering.

This module provides:
- DiscrepancyReport (discrepancies.py): table, CSV, JSON and HTML output
- HTML templates in reports/templates/
"""

from core.app_version import get_app_version

__version__ = get_app_version()

from .discrepancies import DiscrepancyReport, ReportRow  # noqa: E402

__all__ = ["DiscrepancyReport", "ReportRow"]
