"""
Report Repository - monthly PDF reports per founder.
"""

from contentops.kernel.reports.report_repository import MAX_REPORT_BYTES, REPORT_CONTENT_TYPE, ReportRepository

__all__ = [
    "MAX_REPORT_BYTES",
    "REPORT_CONTENT_TYPE",
    "ReportRepository",
]
