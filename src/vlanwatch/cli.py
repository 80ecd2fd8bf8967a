"""Command-line front end for vlanwatch.

Examples:
    vlanwatch parse report.txt
    vlanwatch save report.txt --date 2024-01-02 --network network_1
    vlanwatch fetch --if-due
    vlanwatch alerts --date 2024-01-02
    vlanwatch table --port E3 --down-only
    vlanwatch export-xlsx usage.xlsx
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from datetime import date as date_cls
from pathlib import Path

from vlanwatch.client.errors import VlanWatchError
from vlanwatch.client.feed import ReportFeed
from vlanwatch.config import Settings, load_settings
from vlanwatch.parser.port import classify_port
from vlanwatch.parser.report import parse_report
from vlanwatch.storage.backup import export_backup, import_backup
from vlanwatch.storage.db import KeyValueDatabase
from vlanwatch.storage.state import StateStore
from vlanwatch.tracker import ReportTracker
from vlanwatch.utils.export import build_usage_table, list_down_vlans, write_usage_xlsx
from vlanwatch.utils.render import alert_record_to_dict, reading_to_dict

logger = logging.getLogger(__name__)


def setup_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="vlanwatch",
        description="Track daily VLAN usage reports and day-over-day alerts",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--db", default=None, help="State database (default: $VLANWATCH_DB)")
    parser.add_argument("-n", "--network", default=None, help="Network id (default: selected)")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Parse a report file and print the readings")
    p.add_argument("file", help="Report text file ('-' for stdin)")

    p = sub.add_parser("save", help="Parse a report file and save it")
    p.add_argument("file", help="Report text file ('-' for stdin)")
    p.add_argument("--date", default=None, help="Report date YYYY-MM-DD (default: today)")

    p = sub.add_parser("fetch", help="Fetch today's reports from the feed and save them")
    p.add_argument("--date", default=None, help="Save under this date (default: today)")
    p.add_argument("--if-due", action="store_true", help="Only fetch when the daily fetch is due")

    p = sub.add_parser("alerts", help="Show stored alerts")
    p.add_argument("--date", default=None, help="Analysed date (default: newest)")

    p = sub.add_parser("compare", help="Show day-over-day deltas for a date")
    p.add_argument("date", help="Date YYYY-MM-DD")

    p = sub.add_parser("table", help="Print the usage table")
    p.add_argument("--port", default=None, help="Only VLANs on this port label")
    p.add_argument("--down-only", action="store_true", help="Only VLANs near zero on newest day")

    p = sub.add_parser("export-xlsx", help="Write the usage table to an xlsx file")
    p.add_argument("path")
    p.add_argument("--port", default=None)
    p.add_argument("--down-only", action="store_true")

    sub.add_parser("networks", help="List networks")
    sub.add_parser("down", help="List VLANs that were ever reported down")

    p = sub.add_parser("select", help="Select the current network")
    p.add_argument("network_id")

    p = sub.add_parser("rename", help="Rename a VLAN")
    p.add_argument("vlan", type=int)
    p.add_argument("name")

    p = sub.add_parser("delete-vlan", help="Delete a VLAN and all its readings")
    p.add_argument("vlan", type=int)

    p = sub.add_parser("delete-report", help="Delete one day's report")
    p.add_argument("date")

    sub.add_parser("clear", help="Delete every report of the network")

    p = sub.add_parser("backup-export", help="Write a JSON backup")
    p.add_argument("path")

    p = sub.add_parser("backup-import", help="Replace all state from a JSON backup")
    p.add_argument("path")

    return parser


def _read_text(file: str) -> str:
    if file == "-":
        return sys.stdin.read()
    return Path(file).read_text(encoding="utf-8")


def _print_json(data: object) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def run(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the parsed command; returns the process exit status."""
    if args.command == "parse":
        result = parse_report(_read_text(args.file))
        _print_json({
            "stats": vars(result.stats),
            "readings": [
                {**reading_to_dict(r), "port": classify_port(r.name)} for r in result.readings
            ],
        })
        return 0 if result.stats.success else 1

    db = KeyValueDatabase(Path(args.db) if args.db else settings.db_path)
    store = StateStore(db)
    tracker = ReportTracker(store)
    nid = args.network
    try:
        if args.command == "save":
            day = args.date or date_cls.today().isoformat()
            count = tracker.save_report(_read_text(args.file), day, nid)
            print(f"Saved {count} VLAN(s) for {day}")
            return 0 if count else 1

        if args.command == "fetch":
            if args.if_due and not tracker.auto_fetch_due(settings.fetch_hour):
                print("Daily fetch not due")
                return 0
            with ReportFeed(settings.feed_url, settings.timeout_s, settings.verify_tls) as feed:
                counts = tracker.run_daily_fetch(
                    feed,
                    date=args.date,
                    labels=settings.network_labels,
                    pause_s=settings.fetch_pause_s,
                )
            for label, count in counts.items():
                print(f"{label}: {count} VLAN(s) saved")
            return 0

        if args.command == "alerts":
            record = tracker.alerts(args.date, nid)
            if record is None:
                print("No alerts")
                return 0
            _print_json(alert_record_to_dict(record))
            return 0

        if args.command == "compare":
            deltas = tracker.consumption_deltas(args.date, nid)
            _print_json({f"V{n}": vars(d) for n, d in deltas.items()})
            return 0

        if args.command in ("table", "export-xlsx"):
            network = tracker.get_network(nid)
            table = build_usage_table(network, port=args.port, down_only=args.down_only)
            if args.command == "export-xlsx":
                path = write_usage_xlsx(table, args.path, title=network.name)
                print(f"Wrote {path}")
            else:
                print("\t".join(table.columns))
                for row in [*table.rows, table.totals]:
                    print("\t".join(str(row.get(c, "")) for c in table.columns))
            return 0

        if args.command == "networks":
            current = store.load_current_network_id()
            for network_id, network in tracker.networks().items():
                marker = "*" if network_id == current else " "
                print(f"{marker} {network_id}\t{network.name}\t{len(network.dates)} day(s)")
            return 0

        if args.command == "down":
            for vlan in list_down_vlans(tracker.get_network(nid)):
                print(f"V{vlan.number}\t{vlan.name}")
            return 0

        if args.command == "select":
            tracker.select_network(args.network_id)
            return 0

        if args.command == "rename":
            return 0 if tracker.rename_vlan(args.vlan, args.name, nid) else 1

        if args.command == "delete-vlan":
            return 0 if tracker.delete_vlan(args.vlan, nid) else 1

        if args.command == "delete-report":
            return 0 if tracker.delete_report(args.date, nid) else 1

        if args.command == "clear":
            tracker.delete_all_reports(nid)
            return 0

        if args.command == "backup-export":
            print(f"Wrote {export_backup(store, args.path)}")
            return 0

        if args.command == "backup-import":
            print(f"Imported {import_backup(store, args.path)} network(s)")
            return 0
    finally:
        db.close()

    return 2


def main(argv: Sequence[str] | None = None) -> int:
    parser = setup_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return run(args, load_settings())
    except (VlanWatchError, OSError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
