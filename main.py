"""
StoreHealth: command-line entry point.

Runs scans and cleanups against the store named by STOREHEALTH_* settings.
Suitable for cron or any external scheduler.

Usage:
  python main.py init             Create the metric snapshot table
  python main.py scan             Run a health scan and print the result
  python main.py last             Print the last stored scan
  python main.py counts           Eligible items per cleanup type
  python main.py preview TYPE     Count items a cleanup would remove
  python main.py clean TYPE       Run a cleanup
  python main.py settings [--keep N]  Show or set runtime settings
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config.settings import CLEANUP_TYPES, load_settings
from framework.context import AppContext

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("storehealth.main")


def print_scan(scan: dict, age: str = None) -> None:
    print("\n" + "=" * 70)
    print(f"  STORE HEALTH: {scan['health_score']}/100 ({scan['score_label']})")
    print(f"  Scanned at: {scan['scanned_at']}" + (f" ({age} ago)" if age else ""))
    print("=" * 70)

    print("\n  Breakdown:")
    for category, entry in scan["breakdown"].items():
        ratio = f" [{entry['ratio']}]" if entry.get("ratio") else ""
        print(f"    {category:<20} {entry['score']:>3}  {entry['status']:<9} {entry['value']}{ratio}")

    recommendations = scan["recommendations"]
    print(f"\n  Recommendations: {len(recommendations)}")
    for rec in recommendations:
        print(f"    [{rec['type'].upper()}] {rec['message']}")
        print(f"        -> {rec['action']}")
    print()


def cmd_init(context: AppContext, args) -> int:
    result = context.initialize()
    print(result)
    return 0 if result.success else 1


def cmd_scan(context: AppContext, args) -> int:
    result = context.run_scan()
    if not result.success:
        print(f"Scan failed: {result.message}")
        return 1
    print_scan(result.data)
    return 0


def cmd_last(context: AppContext, args) -> int:
    result = context.run_operation("get_last_scan", lambda: {"scan": context.get_last_scan()})
    if not result.success:
        print(f"Could not read last scan: {result.message}")
        return 1
    scan = result.data["scan"]
    if scan is None:
        print("No scan data. Run 'scan' first.")
        return 1
    print_scan(scan.to_dict(), context.scanner.time_since_scan())
    return 0


def cmd_counts(context: AppContext, args) -> int:
    labels = context.cleanup.get_available_types()
    print("\n  Cleanup candidates:")
    for cleanup_type, count in context.cleanup.get_all_counts().items():
        print(f"    {labels.get(cleanup_type, cleanup_type):<24} {count}")
    print()
    return 0


def cmd_preview(context: AppContext, args) -> int:
    result = context.cleanup.preview(args.type)
    print(f"{args.type}: {result.message}")
    return 0 if result.success else 1


def cmd_clean(context: AppContext, args) -> int:
    result = context.cleanup.execute(args.type)
    if not result.success:
        print(f"{args.type}: {result.message}")
        return 1
    print(f"{args.type}: {result.message} (before={result.before}, after={result.after})")
    return 0


def cmd_settings(context: AppContext, args) -> int:
    if args.keep is not None:
        result = context.run_operation(
            "update_runtime_settings", context.update_runtime_settings,
            changes={"cleanup_revisions_keep": args.keep},
        )
    else:
        result = context.run_operation("get_runtime_settings", context.get_runtime_settings)
    if not result.success:
        print(f"Settings unavailable: {result.message}")
        return 1
    if args.keep is not None:
        print("Settings saved.")
    for key, value in result.data.items():
        print(f"  {key}: {value}")
    return 0


COMMANDS = {
    "init": cmd_init,
    "scan": cmd_scan,
    "last": cmd_last,
    "counts": cmd_counts,
    "preview": cmd_preview,
    "clean": cmd_clean,
    "settings": cmd_settings,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storehealth", description="Store health scanner and cleanup")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("init", help="Create the metric snapshot table")
    sub.add_parser("scan", help="Run a health scan")
    sub.add_parser("last", help="Show the last stored scan")
    sub.add_parser("counts", help="Eligible items per cleanup type")
    for name, help_text in (("preview", "Count items a cleanup would remove"), ("clean", "Run a cleanup")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("type", help=f"Cleanup type ({', '.join(CLEANUP_TYPES)})")
    settings_cmd = sub.add_parser("settings", help="Show or change runtime settings")
    settings_cmd.add_argument("--keep", type=int, help="Revisions to keep per post (0..50)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    context = AppContext.from_settings(settings)
    try:
        return COMMANDS[args.command](context, args)
    finally:
        context.close()


if __name__ == "__main__":
    sys.exit(main())
