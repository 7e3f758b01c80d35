"""Report generation package."""

from avif_optimizer.infrastructure.reports.report_generator import (
    format_size,
    generate_markdown_report,
    generate_json_report,
    save_reports,
)

__all__ = [
    "format_size",
    "generate_markdown_report",
    "generate_json_report",
    "save_reports",
]
