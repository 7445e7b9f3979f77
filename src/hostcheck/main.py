#!/usr/bin/env python3
"""
hostcheck - Linux host health diagnostics

Usage:
    hostcheck                    # Full scan with live output
    sudo hostcheck               # Full scan including root-only checks
    hostcheck --json             # JSON report on stdout
    hostcheck -o report.json     # Live output, JSON report saved to a file

Exit codes:
    0  healthy
    1  high priority issues
    2  more failed checks than passed checks
    3  critical issues
    4  invalid fix catalog
    130 interrupted
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.markup import escape

from .__version__ import get_full_version
from .core.diagnostics.engine import DiagnosticEngine
from .core.diagnostics.models import DiagnosticReport
from .core.diagnostics.scoring import exit_code_for
from .ui.report import ReportRenderer
from .utils.catalog import CatalogError
from .utils.console import get_console
from .utils.env_config import HostcheckConfig, load_env_file
from .utils.logging_config import parse_level, setup_logging
from .utils.system import get_system_info

logger = logging.getLogger(__name__)

EXIT_CATALOG_ERROR = 4
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hostcheck',
        description="Linux host health check with hardware-aware remediation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hostcheck                      # Full scan
  sudo hostcheck                 # Include SMART, firewall and journal checks
  hostcheck --json > report.json # Machine-readable report
  hostcheck --ascii --no-color   # Plain output for logs and dumb terminals
        """
    )

    parser.add_argument('--json', action='store_true',
                        help='Print the report as JSON instead of the live view')
    parser.add_argument('-o', '--output', metavar='FILE',
                        help='Also write the JSON report to FILE')
    parser.add_argument('--no-color', action='store_true',
                        help='Disable colored output')
    parser.add_argument('--ascii', action='store_true',
                        help='Use ASCII status symbols ([OK], [FAIL], ...)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log progress to stderr')
    parser.add_argument('--debug', action='store_true',
                        help='Log every probe invocation to stderr')
    parser.add_argument('--log-file', metavar='FILE',
                        help='Write a debug log to FILE')
    parser.add_argument('--catalog', metavar='FILE',
                        help='Use an alternative fix catalog YAML')
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {get_full_version()}')
    return parser


def configure(args: argparse.Namespace) -> HostcheckConfig:
    """Environment/.env configuration with command line overrides."""
    load_env_file()
    config = HostcheckConfig.from_env()
    if args.catalog:
        config.catalog_path = args.catalog
    if args.log_file:
        config.log_file = args.log_file

    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = parse_level(config.log_level)

    setup_logging(level=level, log_file=config.log_file, use_colors=not args.no_color)
    return config


def write_report(report: DiagnosticReport, path: str):
    """Save the JSON report, creating parent directories."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(report.to_dict(), f, indent=2)
    logger.info(f"Report written to {output_path}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = configure(args)
    console = get_console(no_color=True if args.no_color else None)

    try:
        engine = DiagnosticEngine(config)
    except CatalogError as e:
        logger.error(f"Invalid fix catalog: {e}")
        print(f"hostcheck: {e}", file=sys.stderr)
        return EXIT_CATALOG_ERROR

    renderer = ReportRenderer(
        console,
        ascii_only=args.ascii,
        max_fixes=config.max_fixes,
        max_high=config.max_high_issues,
    )

    if not args.json:
        descriptions = {group.title: group.description for group in engine.groups}
        renderer.render_header(get_system_info(), engine.is_root)
        engine.register_progress_callback(
            lambda title, current, total: renderer.render_section(title, descriptions.get(title, ""))
        )
        engine.register_check_callback(lambda result: renderer.render_result(result, engine.ledger))

    try:
        ledger = engine.run_all()
        report = engine.generate_report()
    except KeyboardInterrupt:
        console.print("\n[warn]Interrupted[/warn]")
        return EXIT_INTERRUPTED

    if args.json:
        sys.stdout.write(json.dumps(report.to_dict(), indent=2) + "\n")
    else:
        renderer.render_summary(report)

    if args.output:
        try:
            write_report(report, args.output)
        except OSError as e:
            logger.error(f"Could not write report: {e}")
            console.print(f"[fail]Could not write report to {escape(args.output)}: {escape(str(e))}[/fail]")

    return exit_code_for(ledger)


if __name__ == '__main__':
    sys.exit(main())
