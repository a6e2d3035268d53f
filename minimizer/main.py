"""Main entry point for the minimizer."""
import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import List, Optional

from minimizer.compositor.hyprland import HyprlandCompositor
from minimizer.lifecycle import Minimizer
from minimizer.tray.dbus_service import TrayBus
from minimizer.utils.config import MENU_VARIANTS, load_config
from minimizer.utils.exceptions import ConfigError, NoTargetWindow, PortError, RegistrationFailure
from minimizer.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hyprland-minimizer",
        description="Minimize a Hyprland window to the system tray.",
    )
    parser.add_argument("--address", help="window address to minimize (default: the focused window)")
    parser.add_argument("--menu", choices=MENU_VARIANTS, help="tray menu layout")
    parser.add_argument("--poll-interval", type=float, help="seconds between window state checks")
    parser.add_argument("--log-file", type=Path, help="also write logs to this file")
    parser.add_argument("--debug", action="store_true", default=None, help="enable debug logging")
    return parser.parse_args(argv)

async def async_main(args: argparse.Namespace) -> int:
    """Async main entry point."""
    try:
        config = load_config({
            "menu_variant": args.menu,
            "poll_interval": args.poll_interval,
            "log_file": args.log_file,
            "development": args.debug,
        })
    except ConfigError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG

    log_file = config.get("log_file")
    try:
        configure_logging(development=config["development"], log_file=Path(log_file) if log_file else None)
    except OSError as e:
        configure_logging(development=config["development"])
        logger.error(f"Cannot open log file {log_file}: {e}")
        return EXIT_CONFIG

    compositor = HyprlandCompositor(hyprctl=config["hyprctl"], timeout=config["command_timeout"])
    app = Minimizer(config, compositor, TrayBus())

    interrupt = asyncio.Event()
    loop = asyncio.get_running_loop()
    for s in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(s, interrupt.set)

    try:
        await app.run(address=args.address, interrupt=interrupt)
    except NoTargetWindow as e:
        logger.error(f"{e}")
        return EXIT_FAILURE
    except RegistrationFailure as e:
        logger.error(f"Failed to register tray icon: {e}")
        return EXIT_FAILURE
    except PortError as e:
        logger.error(f"Failed to minimize window: {e}")
        return EXIT_FAILURE
    finally:
        for s in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(s)

    return EXIT_OK

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    return asyncio.run(async_main(parse_args(argv)))

if __name__ == "__main__":
    sys.exit(main())
