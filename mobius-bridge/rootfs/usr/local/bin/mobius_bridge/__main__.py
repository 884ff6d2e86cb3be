#!/usr/bin/env python3
"""Entry point: `python -m mobius_bridge` or the `mobius-bridge` script."""
import logging
import signal
import sys

from .bridge import MobiusBridge
from .config import Settings
from .exceptions import ConfigError

_LOGGER = logging.getLogger("mobius_bridge")


def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # urllib3 is noisy at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO)


def main() -> int:
    try:
        settings = Settings.from_env()
    except ConfigError as err:
        setup_logging(False)
        _LOGGER.error("Invalid configuration: %s", err)
        return 2

    setup_logging(settings.debug)
    _LOGGER.info("startup: %s", settings.describe())

    bridge = MobiusBridge(settings)
    signal.signal(signal.SIGTERM, lambda signum, frame: bridge.shutdown())
    try:
        bridge.run()
    except KeyboardInterrupt:
        bridge.shutdown()
    _LOGGER.info("stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
