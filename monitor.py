#!/usr/bin/env python3
"""
Command-line status monitor.

Runs one check cycle (default) or keeps running cycles on a fixed interval
and prints a readable summary of each.
"""

import argparse
import asyncio
import json
import logging
import sys
import time

from config import get_config
from status_monitoring.exceptions import CycleFailedError
from status_monitoring.models import SystemStatus
from status_monitoring.status_manager import StatusCheckManager

logger = logging.getLogger(__name__)

EXIT_CODES = {
    SystemStatus.HEALTHY: 0,
    SystemStatus.WARNING: 1,
    SystemStatus.CRITICAL: 2,
}
EXIT_CYCLE_FAILED = 3
EXIT_USAGE = 4

STATUS_EMOJI = {
    'online': "✅",
    'degraded': "⚠️",
    'offline': "❌",
}

SYSTEM_EMOJI = {
    'healthy': "🟢",
    'warning': "🟡",
    'critical': "🔴",
}


def display_status(record):
    """Display a cycle record in a readable format."""
    print(f"🕒 {record['timestamp']}")
    print(f"{SYSTEM_EMOJI[record['status']]} System Status: {record['status'].upper()}")

    summary = record['summary']
    print(f"   Total: {summary['total']}  Online: {summary['online']}  "
          f"Degraded: {summary['degraded']}  Offline: {summary['offline']}")
    print()

    for server in record['servers']:
        emoji = STATUS_EMOJI[server['status']]
        line = f"{emoji} {server['name']} ({server['id']}): {server['status']}"
        if server['status'] != 'offline':
            line += f" - {server['responseTime']}ms"
            if server['httpStatus'] is not None:
                line += f" [HTTP {server['httpStatus']}]"
        else:
            line += f" - {server['failureReason']}"
        print(line)


def run_once(manager, as_json=False):
    """Run a single cycle and print it.

    Returns:
        Process exit code for the cycle
    """
    try:
        cycle = asyncio.run(manager.run_cycle())
    except CycleFailedError as e:
        logger.error(f"Status check cycle failed: {e}")
        if as_json:
            print(json.dumps({'status': 'error', 'error': e.to_dict()}))
        else:
            print(f"❌ Status check cycle failed: {e}")
        return EXIT_CYCLE_FAILED

    record = cycle.to_dict()
    if as_json:
        print(json.dumps(record))
    else:
        display_status(record)

    return EXIT_CODES[cycle.report.system_status]


def continuous_monitoring(manager, interval, as_json=False):
    """Run cycles until interrupted."""
    if not as_json:
        print("🔄 CONTINUOUS MONITORING MODE")
        print("Press Ctrl+C to stop monitoring")
        print("=" * 50)

    try:
        while True:
            if not as_json:
                print("\n" + "=" * 60)
            started = time.monotonic()
            run_once(manager, as_json)

            # Interval is measured from the start of each cycle
            delay = max(0.0, interval - (time.monotonic() - started))
            if not as_json:
                print(f"\n💤 Next check in {delay:.0f} seconds...")
            time.sleep(delay)

    except KeyboardInterrupt:
        if not as_json:
            print("\n\n🛑 Monitoring stopped")


def build_parser():
    parser = argparse.ArgumentParser(description="Check the status of all monitored servers.")
    parser.add_argument('--continuous', action='store_true',
                        help="Keep running cycles on a fixed interval")
    parser.add_argument('--interval', type=float, default=None,
                        help="Seconds between cycles in continuous mode (default from config)")
    parser.add_argument('--endpoints-file', default=None,
                        help="JSON file listing endpoints (overrides ENDPOINTS_FILE)")
    parser.add_argument('--timeout', type=float, default=None,
                        help="Probe timeout in seconds (overrides PROBE_TIMEOUT_SECONDS)")
    parser.add_argument('--json', action='store_true',
                        help="Print each cycle as a JSON record")
    return parser


def main(argv=None):
    """Main monitoring function."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    overrides = {}
    if args.endpoints_file:
        overrides['endpoints_file'] = args.endpoints_file
    if args.timeout is not None:
        if args.timeout <= 0:
            print("❌ --timeout must be positive", file=sys.stderr)
            return EXIT_USAGE
        overrides['probe_timeout_seconds'] = args.timeout

    config = get_config().model_copy(update=overrides)
    try:
        manager = StatusCheckManager.from_config(config)
    except CycleFailedError as e:
        print(f"❌ Invalid endpoint configuration: {e}", file=sys.stderr)
        return EXIT_CYCLE_FAILED

    if args.continuous:
        interval = args.interval if args.interval is not None else config.monitor_interval_seconds
        if interval <= 0:
            print("❌ --interval must be positive", file=sys.stderr)
            return EXIT_USAGE
        continuous_monitoring(manager, interval, args.json)
        return 0

    return run_once(manager, args.json)


if __name__ == "__main__":
    sys.exit(main())
