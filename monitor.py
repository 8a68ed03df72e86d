"""
Docker & Server Performance Monitor - command line entry point
"""

import argparse
import signal
import sys
import threading
from typing import List, Optional

import structlog

from perfmon import __version__
from perfmon.config_loader import load_config
from perfmon.errors import RuntimeConnectionError
from perfmon.logging_config import setup_logging
from perfmon.orchestrator import VERDICT_ALERT, VERDICT_OK, PerformanceMonitor

logger = structlog.get_logger("perfmon.cli")


def build_parser() -> argparse.ArgumentParser:
    """Command line options"""
    parser = argparse.ArgumentParser(
        prog='perfmon',
        description='Docker & Server Performance Monitor'
    )
    parser.add_argument('-c', '--config', default='config.json', metavar='FILE',
                        help='Configuration file path (default: config.json)')
    parser.add_argument('-s', '--status', action='store_true',
                        help='Show current system status')
    parser.add_argument('-t', '--test-email', action='store_true',
                        help='Test email configuration')
    parser.add_argument('-r', '--continuous', action='store_true',
                        help='Run continuous monitoring')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def _install_stop_handlers(stop_event: threading.Event):
    """Set stop_event on SIGINT/SIGTERM so the loop ends between cycles"""
    def handle_signal(signum, frame):
        logger.info("Stop requested", signal=signal.Signals(signum).name)
        stop_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the monitor

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)

    setup_logging()
    config = load_config(args.config)
    setup_logging(config)

    try:
        monitor = PerformanceMonitor.create(config)
    except RuntimeConnectionError as e:
        logger.error("Failed to initialize Docker monitor", error=str(e))
        return 1

    if args.test_email:
        monitor.test_email()
    elif args.status:
        monitor.print_status_summary()
    elif args.continuous:
        stop_event = threading.Event()
        _install_stop_handlers(stop_event)
        monitor.run_continuous(stop_event)
    else:
        print(VERDICT_ALERT if monitor.run_monitoring() else VERDICT_OK)

    return 0


if __name__ == '__main__':
    sys.exit(main())
