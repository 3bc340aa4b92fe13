"""Load test report CLI - inspect reports written by the load tester."""

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from common.models.report import Report, StepKind
from common.utils import format_duration
from loadtest.config import get_settings
from loadtest.core.reporter import ReportWriter


def load_report(path: str) -> Report:
    """Load a report or exit with a message."""
    try:
        return ReportWriter.load(path)
    except FileNotFoundError:
        print(f"Error: No such report: {path}")
        sys.exit(1)
    except ValidationError as e:
        print(f"Error: {path} is not a load test report ({e.error_count()} errors)")
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


def cmd_list(args):
    """List report files."""
    settings = get_settings()
    writer = ReportWriter(args.dir or settings.report_dir, prefix=settings.report_prefix, suffix=settings.report_suffix)
    reports = writer.list_reports()

    if not reports:
        print(f"No reports found in {writer.report_dir}")
        return

    for path in reports:
        print(path)


def cmd_summary(args):
    """Show per-cycle timing summary."""
    report = load_report(args.path)

    duration = 0
    if report.finished:
        duration = int((report.finished - report.started).total_seconds())
    print(f"Report: {report.id}")
    print(f"Host: {report.host or '—'}")
    print(f"Cycles: {len(report.runs)}/{report.cycles}  Users per cycle: {report.concurrency}")
    print(f"Duration: {format_duration(duration)}")
    print(f"Failed workflows: {report.failed_users}")
    print()

    print(f"{'Cycle':<7} {'Users':<7} {'Failed':<8} {'Upload avg':<12} {'Upload max':<12} {'Download avg':<14} {'Download max':<12}")
    print("-" * 80)
    for run in report.runs:
        up = run.step_stats(StepKind.UPLOAD)
        down = run.step_stats(StepKind.DOWNLOAD)
        print(
            f"{run.run_number:<7} {len(run.users):<7} {len(run.failed_users):<8} "
            f"{up.avg_ms:<12.0f} {up.max_ms:<12} {down.avg_ms:<14.0f} {down.max_ms:<12}"
        )


def cmd_failures(args):
    """List failed workflows."""
    report = load_report(args.path)

    failed = [(run.run_number, user) for run in report.runs for user in run.failed_users]
    if not failed:
        print("No failed workflows")
        return

    print(f"{'Cycle':<7} {'User':<6} {'Account':<32} {'Steps':<6} Error")
    print("-" * 80)
    for run_number, user in failed:
        username = user.account.username if user.account else "—"
        print(f"{run_number:<7} {user.user_index:<6} {username:<32} {user.step_count:<6} {user.error}")


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Load test report tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # list
    list_parser = subparsers.add_parser("list", help="List report files, newest first")
    list_parser.add_argument("dir", nargs="?", type=Path, help="Report directory")
    list_parser.set_defaults(func=cmd_list)

    # summary
    summary_parser = subparsers.add_parser("summary", help="Per-cycle timing summary")
    summary_parser.add_argument("path", help="Report file")
    summary_parser.set_defaults(func=cmd_summary)

    # failures
    failures_parser = subparsers.add_parser("failures", help="List failed workflows")
    failures_parser.add_argument("path", help="Report file")
    failures_parser.set_defaults(func=cmd_failures)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
