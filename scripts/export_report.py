#!/usr/bin/env python3
"""Export a user's expense report to CSV and/or PDF files."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fintrack import store
from fintrack.auth import AuthService
from fintrack.config import EXPORTS_DIR, configure_logging
from fintrack.errors import FinTrackError
from fintrack.export import EXPORT_KINDS, export_report
from fintrack.filters import RANGE_KINDS, RangeSpec
from fintrack.models import CategorySet
from fintrack.reports import build_report

logger = logging.getLogger("fintrack.scripts.export_report")


def main(email: str, range_kind: str, start: str | None, end: str | None,
         kinds: list[str], output: Path) -> int:
    store.init_db()
    user = AuthService().find_user(email)
    if user is None:
        print(f"No account found for {email}")
        return 1

    spec = RangeSpec.custom(start, end) if range_kind == 'custom' else RangeSpec(range_kind)
    try:
        records = store.ExpenseStore(user.uid).list()
        custom = store.CategoryStore(user.uid).list()
    except FinTrackError as exc:
        logger.error("Could not load data for %s: %s", email, exc)
        return 1

    report = build_report(records, spec, categories=CategorySet.merge(custom).names())
    print(f"{report.range_label}: {report.count} expenses")
    for path in export_report(report, kinds, output):
        print(f"  wrote {path}")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Export an expense report for one account.')
    parser.add_argument('email', help='Account email')
    parser.add_argument('--range', dest='range_kind', choices=RANGE_KINDS, default='all',
                        help='Date range to report on')
    parser.add_argument('--start', help='Custom range start (YYYY-MM-DD)')
    parser.add_argument('--end', help='Custom range end (YYYY-MM-DD)')
    parser.add_argument('--format', dest='kinds', nargs='+', choices=EXPORT_KINDS, default=list(EXPORT_KINDS),
                        help='Export formats to write')
    parser.add_argument('--output', type=Path, default=EXPORTS_DIR, help='Output directory')
    parser.add_argument('--log-level', default=None, help='Logging level (default from FINTRACK_LOG_LEVEL)')
    args = parser.parse_args()
    if args.range_kind == 'custom' and not (args.start and args.end):
        parser.error('--range custom requires --start and --end')
    configure_logging(args.log_level)
    raise SystemExit(main(args.email, args.range_kind, args.start, args.end, args.kinds, args.output))
