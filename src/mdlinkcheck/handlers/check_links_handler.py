# src/mdlinkcheck/handlers/check_links_handler.py
import argparse
import logging
from typing import List, Optional

from mdlinkcheck.controllers.link_check_controller import LinkCheckController
from mdlinkcheck.managers.config_manager import config_manager
from mdlinkcheck.managers.report_manager import ReportManager
from mdlinkcheck.model import DEFAULT_IGNORE, ScanOptions

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdlinkcheck",
        description="Check for broken links in markdown files",
    )
    parser.add_argument("directory", nargs="?", default=".", help="Directory to check")
    parser.add_argument("-p", "--pattern", default=None, help="Glob pattern for files (default: **/*.md)")
    parser.add_argument("-i", "--ignore", nargs="+", default=None, help="Patterns to ignore")
    parser.add_argument("-o", "--output", default=None, help="Save report to file")
    parser.add_argument(
        "-e", "--external", action="store_true", default=None,
        help="Also check external URLs (best-effort; warnings only)",
    )
    parser.add_argument("--external-timeout-ms", type=int, default=None, help="External URL timeout (ms)")
    parser.add_argument(
        "--set", dest="overrides", action="append", default=[], metavar="KEY=VALUE",
        help="Override a settings.json value for this run, e.g. scan.show_progress=true (repeatable)",
    )
    return parser


def build_options(args: argparse.Namespace) -> ScanOptions:
    """Merges CLI arguments over the configured defaults."""
    return ScanOptions(
        pattern=args.pattern or config_manager.get_nested("scan.pattern", "**/*.md"),
        ignore=args.ignore or config_manager.get_nested("scan.ignore", list(DEFAULT_IGNORE)),
        check_external=bool(
            args.external if args.external is not None
            else config_manager.get_nested("link_checker.check_external", False)
        ),
        external_timeout_ms=(
            args.external_timeout_ms if args.external_timeout_ms is not None
            else config_manager.get_nested("link_checker.timeout_ms", 10000)
        ),
        show_progress=bool(config_manager.get_nested("scan.show_progress", False)),
    )


def handle_check_links(argv: Optional[List[str]] = None) -> int:
    """
    Runs a link check and returns the process exit code:
    0 when no links are broken and every file was readable, 1 otherwise.
    """
    args = build_parser().parse_args(argv)
    try:
        config_manager.apply_overrides(args.overrides)
    except ValueError as e:
        print(f"❌ Error: {e}")
        return 1

    options = build_options(args)
    controller = LinkCheckController(options, config=config_manager.get_all())
    report_manager = ReportManager()

    print(f"🔍 Checking links in {args.directory}...")
    try:
        report = controller.run(args.directory)
    except (FileNotFoundError, NotADirectoryError) as e:
        print(f"❌ Error: {e}")
        return 1
    except (ValueError, NotImplementedError) as e:
        # Unusable glob pattern, raised before any file is read.
        print(f"❌ Error: Invalid pattern: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n🛑 Link check interrupted by user.")
        return 1

    print(report_manager.format_summary(report))

    if args.output:
        try:
            path = report_manager.save_report(report, args.output)
            print(f"\n📄 Report saved to: {path}")
        except OSError as e:
            logger.error("Could not write report to %s: %s", args.output, e)
            print(f"❌ Error: Could not write report: {e}")
            return 1

    return 0 if report.summary.success else 1
