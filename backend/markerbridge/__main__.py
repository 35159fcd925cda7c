"""
Entry point: python -m markerbridge

All configuration comes from BRIDGE_* environment variables (see config.py).
Exit status is 1 when the configuration is invalid or the port is taken.
"""

import logging
import sys

from pydantic import ValidationError

from markerbridge.config import Settings
from markerbridge.main import setup_logging
from markerbridge.server import BridgeServer
from markerbridge.services.sinks import build_sink

logger = logging.getLogger("markerbridge")


def main() -> int:
    try:
        settings = Settings()
    except ValidationError as e:
        setup_logging()
        logger.error("Configuration error: %s", e)
        return 1

    # stdout belongs to the sink when the host reads markers from it
    log_stream = sys.stderr if settings.sink_kind == "stdout" else sys.stdout
    setup_logging(settings.log_level, stream=log_stream)

    try:
        sink = build_sink(settings)
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        return 1

    server = BridgeServer(settings, sink)
    return 0 if server.serve() else 1


if __name__ == "__main__":
    sys.exit(main())
