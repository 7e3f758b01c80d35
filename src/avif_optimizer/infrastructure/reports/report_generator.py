"""Markdown and JSON conversion reports."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from avif_optimizer.domain.models import ReportRow
from avif_optimizer.infrastructure.config.loader import OptimizerConfig
from avif_optimizer.shared.logging import get_logger

logger = get_logger(__name__)

REPORTS_DIRNAME = 'reports'
REPORT_PREFIX = 'avif-report'


def format_size(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):.2f} MB"
    if size >= 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size} B"


def _escape_cell(text: str) -> str:
    return text.replace('|', '\\|')


def _statistics(rows: Sequence[ReportRow]) -> Dict[str, Any]:
    successful = [r for r in rows if r.success]
    average_reduction = (
        sum(r.reduction for r in successful) / len(successful) if successful else 0.0
    )
    return {
        'total': len(rows),
        'successful': len(successful),
        'failed': len(rows) - len(successful),
        'original_size': sum(r.original_size for r in rows),
        'avif_size': sum(r.avif_size for r in successful),
        'average_reduction': average_reduction,
        'total_time': sum(r.time_ms for r in rows) / 1000,
    }


def _configuration(config: OptimizerConfig) -> Dict[str, Any]:
    return {
        'quality': config.quality,
        'effort': config.effort,
        'maxWidth': config.max_width,
        'maxHeight': config.max_height,
        'outputDir': str(config.output_dir) if config.output_dir else None,
    }


def generate_markdown_report(rows: Sequence[ReportRow], config: OptimizerConfig) -> str:
    """Render a Markdown report for a conversion run."""
    stats = _statistics(rows)
    settings = _configuration(config)

    lines = [
        '# AVIF Image Optimization Report',
        '',
        '## Summary',
        f"- **Total Images Processed**: {stats['total']}",
        f"- **Successful Conversions**: {stats['successful']}",
        f"- **Failed Conversions**: {stats['failed']}",
        f"- **Total Original Size**: {format_size(stats['original_size'])}",
        f"- **Total AVIF Size**: {format_size(stats['avif_size'])}",
        f"- **Average Size Reduction**: {stats['average_reduction']:.2f}%",
        f"- **Total Processing Time**: {stats['total_time']:.2f} seconds",
        '',
        '## Configuration',
        f"- **Quality**: {settings['quality']}",
        f"- **Effort**: {settings['effort']}",
        f"- **Max Width**: {settings['maxWidth']}",
        f"- **Max Height**: {settings['maxHeight']}",
        f"- **Output Directory**: {settings['outputDir'] or 'Same as input'}",
        '',
        '## Results',
        '',
    ]

    if not rows:
        lines.append('No images were processed.')
        return '\n'.join(lines) + '\n'

    lines.append('| File | Original Size | AVIF Size | Reduction | Time |')
    lines.append('|------|--------------|-----------|-----------|------|')
    for row in rows:
        name = _escape_cell(row.file)
        if row.success:
            lines.append(
                f"| {name} | {format_size(row.original_size)} | {format_size(row.avif_size)} "
                f"| {row.reduction:.2f}% | {row.time_ms / 1000:.2f}s |"
            )
        else:
            error = _escape_cell(row.error or 'unknown error')
            lines.append(f"| {name} | - | - | Failed: {error} | - |")

    return '\n'.join(lines) + '\n'


def generate_json_report(rows: Sequence[ReportRow], config: OptimizerConfig) -> Dict[str, Any]:
    """Build a JSON-serializable report for a conversion run."""
    stats = _statistics(rows)

    results = []
    for row in rows:
        entry: Dict[str, Any] = {
            'file': row.file,
            'path': str(row.path),
            'originalSize': row.original_size,
            'avifSize': row.avif_size,
            'reduction': row.reduction,
            'time': row.time_ms,
            'success': row.success,
        }
        if not row.success:
            entry['error'] = row.error
        results.append(entry)

    return {
        'summary': {
            'totalProcessed': stats['total'],
            'successful': stats['successful'],
            'failed': stats['failed'],
            'totalOriginalSize': stats['original_size'],
            'totalAvifSize': stats['avif_size'],
            'averageReduction': round(stats['average_reduction'], 2),
            'totalTime': round(stats['total_time'], 2),
        },
        'configuration': _configuration(config),
        'results': results,
    }


def save_reports(
    rows: Sequence[ReportRow],
    config: OptimizerConfig,
    base_dir: Optional[Path] = None
) -> Tuple[Path, Path]:
    """
    Write Markdown and JSON reports to ``<base_dir>/reports``.

    File names carry a microsecond timestamp so consecutive runs never
    overwrite each other.

    Returns:
        Paths of the Markdown and JSON reports

    Raises:
        OSError: If the reports cannot be written
    """
    reports_dir = Path(base_dir or Path.cwd()) / REPORTS_DIRNAME
    reports_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now().strftime('%Y%m%d-%H%M%S-%f')
    markdown_path = reports_dir / f"{REPORT_PREFIX}-{stamp}.md"
    json_path = reports_dir / f"{REPORT_PREFIX}-{stamp}.json"

    markdown_path.write_text(generate_markdown_report(rows, config), encoding='utf-8')
    json_path.write_text(json.dumps(generate_json_report(rows, config), indent=2), encoding='utf-8')

    logger.info(f"Reports saved to {markdown_path} and {json_path}")
    return markdown_path, json_path
