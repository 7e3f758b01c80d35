"""CLI interface for the AVIF image optimizer."""
import sys
import asyncio
import argparse
from pathlib import Path
from typing import Callable, List, Optional

from avif_optimizer import __version__
from avif_optimizer.domain.exceptions import (
    DomainException, InputValidationError, NoImagesFoundError
)
from avif_optimizer.application.observers import LoggingObserver
from avif_optimizer.application.optimizer import ImageOptimizer
from avif_optimizer.application.scheduler import BatchScheduler
from avif_optimizer.infrastructure.config import ConfigLoader
from avif_optimizer.infrastructure.media import AvifConverter
from avif_optimizer.infrastructure.reports import save_reports
from avif_optimizer.infrastructure.system import SystemResources
from avif_optimizer.presentation.console import ConsoleReporter
from avif_optimizer.presentation import validation
from avif_optimizer.shared.logging import setup_logger, get_logger, OutputSettings
from avif_optimizer.shared.metrics import MetricsCollector

EPILOG = """
Examples:
  $ avif-optimizer image.jpg
  $ avif-optimizer photo.png --quality 80
  $ avif-optimizer ./images --recursive
  $ avif-optimizer "*.{jpg,png}" --max-width 800
  $ avif-optimizer ./photos --output-dir ./optimized
  $ avif-optimizer ./images --force --concurrency 4
  $ avif-optimizer ./images --dry-run
  $ avif-optimizer ./images --exclude "*.thumb.*"
  $ avif-optimizer ./images --json > report.json
"""


def _arg_type(validator: Callable[[str], int]) -> Callable[[str], int]:
    """Turn a validator into an argparse ``type`` callable."""
    def parse(value: str) -> int:
        try:
            return validator(value)
        except InputValidationError as e:
            raise argparse.ArgumentTypeError(str(e)) from e
    parse.__name__ = validator.__name__
    return parse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='avif-optimizer',
        description='Convert JPG, PNG and other image formats to AVIF with intelligent optimization',
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('input', help='Input image file, directory, or glob pattern')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--config', type=Path, help='Config YAML file')
    parser.add_argument('-w', '--max-width', type=_arg_type(validation.validate_width), help='Maximum width in pixels (default: 1200)')
    parser.add_argument('-H', '--max-height', type=_arg_type(validation.validate_height), help='Maximum height in pixels (default: 1200)')
    parser.add_argument('-q', '--quality', type=_arg_type(validation.validate_quality), help='AVIF quality 1-100 (default: 60)')
    parser.add_argument('-e', '--effort', type=_arg_type(validation.validate_effort), help='Compression effort 1-10 (default: 6)')
    parser.add_argument('-o', '--output-dir', type=Path, help='Output directory (default: same as input)')
    parser.add_argument('-r', '--recursive', action='store_true', default=None, help='Search recursively in subdirectories')
    parser.add_argument('-f', '--force', action='store_true', default=None, help='Overwrite existing .avif files')
    parser.add_argument('-d', '--dry-run', action='store_true', default=None, help='Show what would be processed without converting')
    parser.add_argument('-x', '--exclude', action='append', default=None, metavar='PATTERN', help='Glob pattern to exclude (repeatable)')
    parser.add_argument('--no-preserve-original', dest='preserve_original', action='store_false', default=None, help='Delete original files after conversion')
    parser.add_argument('--preserve-exif', action='store_true', default=None, help='Preserve EXIF metadata (increases file size)')
    parser.add_argument('-c', '--concurrency', type=_arg_type(validation.validate_concurrency), help='Files converted in parallel (default: sized from CPU count and workload)')
    parser.add_argument('--timeout', dest='timeout_seconds', type=float, help='Per-file timeout in seconds')
    parser.add_argument('--retries', type=int, help='Retries per failed file (default: 0)')
    parser.add_argument('--report', nargs='?', const='.', type=Path, metavar='DIR', help='Save Markdown and JSON reports under DIR/reports')
    parser.add_argument('--json', action='store_true', help='Output results as JSON')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output')
    parser.add_argument('--quiet', action='store_true', help='Only print errors and the final summary')
    return parser


def create_optimizer(reporter: ConsoleReporter) -> ImageOptimizer:
    """Create the optimizer with all of its dependencies."""
    return ImageOptimizer(
        converter=AvifConverter(),
        scheduler=BatchScheduler(SystemResources()),
        metrics=MetricsCollector(),
        observers=[reporter, LoggingObserver(get_logger('avif_optimizer.batch'))],
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    settings = OutputSettings.from_flags(verbose=args.verbose, quiet=args.quiet, json=args.json)
    setup_logger('avif_optimizer', level=settings.log_level)
    logger = get_logger(__name__)
    reporter = ConsoleReporter(settings)

    try:
        validation.validate_input_exists(args.input)
        output_dir = validation.validate_output_directory(args.output_dir)

        overrides = {
            'max_width': args.max_width,
            'max_height': args.max_height,
            'quality': args.quality,
            'effort': args.effort,
            'output_dir': output_dir,
            'recursive': args.recursive,
            'force': args.force,
            'dry_run': args.dry_run,
            'exclude': args.exclude,
            'preserve_original': args.preserve_original,
            'preserve_exif': args.preserve_exif,
            'concurrency': args.concurrency,
            'timeout_seconds': args.timeout_seconds,
            'retries': args.retries,
        }
        config = ConfigLoader(config_path=args.config).load(overrides=overrides)
        logger.debug(f"Configuration: {config.to_dict()}")

        reporter.banner(config)
        optimizer = create_optimizer(reporter)
        summary = asyncio.run(optimizer.optimize(args.input, config))
        reporter.summary(summary)

        if args.report is not None:
            markdown_path, json_path = save_reports(summary.report_rows(), config, args.report)
            logger.info(f"Markdown report: {markdown_path}")
            logger.info(f"JSON report: {json_path}")

        if summary.failed and not summary.processed and not summary.skipped:
            logger.error(f"All {summary.failed} file(s) failed")
            return 1
        if summary.failed:
            logger.warning(f"{summary.failed} file(s) failed, see errors above")
        return 0

    except InputValidationError as e:
        reporter.error(str(e), e.suggestions)
        return 1
    except NoImagesFoundError:
        reporter.no_images(args.input)
        return 1
    except DomainException as e:
        logger.error(f"Optimization failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130
    except Exception as e:
        logger.exception(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
