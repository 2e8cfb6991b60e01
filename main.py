#main.py

"""
folderwatch - report created, updated and deleted files on a cron schedule
"""
import sys
import signal
import asyncio
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from folderwatch.errors import ConfigurationError
from folderwatch.utils.config import Config, load_config
from folderwatch.utils.logger import setup_logging
from folderwatch.watchdog.monitor import DirectoryMonitor

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Watch a folder and log which files changed, on a cron schedule"
    )
    parser.add_argument("-c", "--config", help="YAML or JSON configuration file")
    parser.add_argument("-f", "--folder", help="Folder to watch (FolderPath)")
    parser.add_argument("--cron", help="5-field cron expression (CronExpression)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-file", help="Also log to this rotating file")
    parser.add_argument("--log-format", choices=["text", "json", "color"])
    parser.add_argument("--print-config", action="store_true",
                        help="Print the effective configuration and exit")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    """Load configuration and apply command line overrides"""
    config = load_config(args.config)

    if args.folder:
        config.folder_path = Path(args.folder)
    if args.cron:
        config.cron_expression = args.cron
    if args.log_level:
        config.logging.level = args.log_level
    if args.log_file:
        config.logging.file = args.log_file
    if args.log_format:
        config.logging.format = args.log_format

    return config


async def run(config: Config):
    """Run the monitor until SIGINT/SIGTERM"""
    monitor = DirectoryMonitor(config)
    loop = asyncio.get_running_loop()

    def request_stop():
        logger.info("Shutdown requested")
        loop.create_task(monitor.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_stop)
        except (NotImplementedError, RuntimeError):
            # Windows: KeyboardInterrupt cancels the task instead
            pass

    print(f"Watching: {config.folder_path}")
    print(f"Schedule: {config.cron_expression}")

    await monitor.start()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = parse_args(argv)

    try:
        config = build_config(args)
        try:
            setup_logging(
                log_level=config.logging.level,
                log_file=config.logging.file,
                log_format=config.logging.format,
            )
        except OSError as e:
            raise ConfigurationError(f"Cannot open log file {config.logging.file}: {e}") from e

        if args.print_config:
            print(config.to_yaml())
            return 0

        config.validate()
        asyncio.run(run(config))

    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        logger.error(f"Configuration error: {e}")
        return 1

    except KeyboardInterrupt:
        print("\nShutting down...")

    return 0


if __name__ == "__main__":
    sys.exit(main())
