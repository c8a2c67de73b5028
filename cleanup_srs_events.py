#!/usr/bin/env python3
"""Cleanup script: preview or delete Kindle SRS review events.

Events whose title starts with "Kindle SRS Review — " or whose description
carries an SRS_DATE=YYYY-MM-DD marker are treated as SRS events.

    python cleanup_srs_events.py preview
    python cleanup_srs_events.py cleanup
    python cleanup_srs_events.py range 2025-01-01 2025-02-01
"""

import sys
import logging
import argparse

from srs_cleanup import (
    SrsCleanupConfig,
    SrsCleanupError,
    cleanup_srs_from_tomorrow,
    cleanup_srs_in_range,
    preview_srs_to_delete,
)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Remove Kindle SRS review events from Google Calendar.')
    parser.add_argument('--calendar-id', help='Calendar id, or "primary" (default: $CALENDAR_ID)')
    parser.add_argument('--timezone', help='IANA timezone for local midnights (default: $TIMEZONE)')
    parser.add_argument('--token-file', help='Authorized-user token JSON (default: $GOOGLE_TOKEN_FILE)')

    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('preview', help='List SRS events that would be deleted from tomorrow onward')
    sub.add_parser('cleanup', help='Delete SRS events from tomorrow onward')
    range_parser = sub.add_parser('range', help='Delete SRS events in [START, END) local time')
    range_parser.add_argument('start', help='YYYY-MM-DD')
    range_parser.add_argument('end', help='YYYY-MM-DD')
    return parser


def load_config(args) -> SrsCleanupConfig:
    return SrsCleanupConfig.from_env(
        calendar_id=args.calendar_id,
        timezone=args.timezone,
        token_file=args.token_file,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
        if args.command == 'preview':
            summary = preview_srs_to_delete(config)
        elif args.command == 'cleanup':
            summary = cleanup_srs_from_tomorrow(config)
        else:
            summary = cleanup_srs_in_range(args.start, args.end, config)
    except (SrsCleanupError, ValueError) as e:
        logger.error(f"✗ {e}")
        return 2

    if summary.failures:
        logger.warning(f"⚠ {len(summary.failures)} SRS events could not be deleted:")
        for failure in summary.failures:
            logger.warning(f"  {failure}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
