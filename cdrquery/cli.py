"""
cdrquery/cli.py
Command-line interface for CDR queries. Loads the source directory once,
runs one query, prints the result as JSON.

USAGE:
  python -m cdrquery.cli --dir ./data reference C5DA9724701EEBBA95CA2CC5617BA93E4
  python -m cdrquery.cli --dir ./data summary --start 01/08/2016 --end 31/08/2016
  python -m cdrquery.cli --dir ./data caller 441215598896 --start 01/08/2016 --end 31/08/2016
  python -m cdrquery.cli --dir ./data top 441215598896 --start 01/08/2016 --end 31/08/2016 --count 3

Without --dir the directory comes from CDR_SOURCE_DIR or cdrquery_config.json.
Dates use the source file format, dd/mm/yyyy.
"""

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path

from cdrquery.config import load_config, resolve_source_dir
from cdrquery.query import CDRQueryEngine
from cdrquery.report import cdr_to_dict, cdrs_to_dict, summary_to_dict, to_json
from cdrquery.store import RecordStore

logger = logging.getLogger(__name__)


def _date_arg(text: str) -> date:
    try:
        return datetime.strptime(text, '%d/%m/%Y').date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected dd/mm/yyyy, got {text!r}")


def _add_window(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--start', required=True, type=_date_arg,
                        help='First call date, inclusive (dd/mm/yyyy)')
    parser.add_argument('--end', required=True, type=_date_arg,
                        help='Last call date, inclusive (dd/mm/yyyy)')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog        = 'cdrquery',
        description = 'Read-only queries over call detail records in *.csv files',
    )
    parser.add_argument(
        '--dir', '-d',
        type    = Path,
        default = None,
        help    = 'Directory containing *.csv CDR files (default: config/CDR_SOURCE_DIR)',
    )
    parser.add_argument(
        '--verbose', '-v',
        action  = 'store_true',
        help    = 'Enable debug logging',
    )

    sub = parser.add_subparsers(dest='command', required=True)

    p_ref = sub.add_parser('reference', help='Look up one CDR by reference')
    p_ref.add_argument('reference')

    p_sum = sub.add_parser('summary', help='Call count and total duration in a window')
    _add_window(p_sum)

    p_caller = sub.add_parser('caller', help="A caller's CDRs in a window")
    p_caller.add_argument('caller_id')
    _add_window(p_caller)

    p_top = sub.add_parser('top', help="A caller's most expensive calls in a window")
    p_top.add_argument('caller_id')
    _add_window(p_top)
    p_top.add_argument('--count', '-n', type=int, default=5,
                       help='Number of calls to return (default: 5)')

    return parser


def run(args: argparse.Namespace, engine: CDRQueryEngine):
    """Dispatch one parsed command. Returns (payload, exit_code)."""
    if args.command == 'reference':
        record = engine.get_by_reference(args.reference)
        if record is None:
            return {'error': f'CDR not found: {args.reference}'}, 1
        return cdr_to_dict(record), 0

    if args.command == 'summary':
        return summary_to_dict(
            engine.get_call_count_and_total_duration(args.start, args.end)
        ), 0

    if args.command == 'caller':
        return cdrs_to_dict(
            engine.get_cdrs_by_caller_id(args.caller_id, args.start, args.end)
        ), 0

    if args.command == 'top':
        return cdrs_to_dict(
            engine.get_most_expensive_calls(args.caller_id, args.start, args.end, args.count)
        ), 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv=None) -> int:
    args   = build_parser().parse_args(argv)
    config = load_config()

    # ── LOGGING SETUP ────────────────────────────────────────
    log_level = logging.DEBUG if args.verbose else getattr(
        logging, str(config['log_level']).upper(), logging.INFO
    )
    logging.basicConfig(
        level   = log_level,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
        stream  = sys.stderr,
    )

    # ── LOAD ─────────────────────────────────────────────────
    try:
        source_dir = resolve_source_dir(args.dir, config)
        store      = RecordStore.load(source_dir)
    except (ValueError, OSError) as e:   # OSError covers DirectoryNotFound
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # ── QUERY ────────────────────────────────────────────────
    payload, code = run(args, CDRQueryEngine(store))
    if code:
        print(payload['error'], file=sys.stderr)
    else:
        print(to_json(payload))
    return code


if __name__ == '__main__':
    sys.exit(main())
