# Area: Shared
"""
spring_autohost.cli — Command-line monitor
===========================================

Listens on the autohost port and logs every command the game server
sends, along with session state changes. Useful to check a server's
autohost setup without a full bot.

Usage:
    python -m spring_autohost                      # Listen on 127.0.0.1:8454
    python -m spring_autohost --port 8452 -s 5     # Trace everything
    python -m spring_autohost --config autohost.json --log-file autohost.log
"""

import argparse
import logging
import signal
import sys
import time
from typing import List, Optional

from ._dispatch import ALL_COMMANDS
from ._logging_config import setup_logging, severity_to_level
from .config import load_config
from .errors import ConfigError
from .interface import AutoHostInterface

logger = logging.getLogger("spring_autohost.cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Monitor a game server's autohost interface",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m spring_autohost
  python -m spring_autohost --port 8452
  AUTOHOST_PORT=8452 python -m spring_autohost --severity 5
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to JSON config file",
    )

    parser.add_argument(
        "--port",
        type=int,
        help="Autohost UDP port (overrides config and AUTOHOST_PORT)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write JSON logs to this file",
    )

    parser.add_argument(
        "-s", "--severity",
        type=int,
        default=3,
        choices=range(0, 6),
        help="Log verbosity, 0 (fatal only) to 5 (trace). Default: 3",
    )

    parser.add_argument(
        "--interval",
        type=float,
        default=0.05,
        help="Seconds to sleep after a receive attempt that found nothing (default: 0.05)",
    )

    return parser.parse_args(argv)


def log_command(command) -> None:
    logger.info(f"[{command.name}] {command.fields()}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)
    setup_logging(log_file_path=args.log_file, level=severity_to_level(args.severity))

    try:
        config = load_config(args.config)
        if args.port is not None:
            config = config.with_overrides(auto_host_port=args.port)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    interface = AutoHostInterface(config=config)
    interface.add_pre_callbacks({ALL_COMMANDS: log_command}, priority=0)
    if not interface.open():
        return 1

    stopping = False

    def _stop(signum, frame):
        nonlocal stopping
        stopping = True

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    last_state = interface.get_state()
    try:
        while not stopping:
            if not interface.pump() and not interface.is_open:
                break
            state = interface.get_state()
            if state != last_state:
                logger.info(f"Session is now {state.name} ({len(interface.get_players())} players)")
                if logger.isEnabledFor(logging.DEBUG):
                    interface.dump_state()
                last_state = state
            if not interface.received:
                time.sleep(args.interval)
    finally:
        interface.close()
    return 0
