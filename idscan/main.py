"""Entry point for the identity document scanner HTTP service."""

import argparse

import uvicorn

from idscan.api.app import app
from idscan.utils.config import load_config
from idscan.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Start the scan service with uvicorn.

    Host and port come from the ``server`` section of the configuration
    unless given on the command line.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(description="Identity Document Scanner API")
    parser.add_argument("--host", help="Bind address")
    parser.add_argument("--port", type=int, help="Bind port")
    args = parser.parse_args(argv)

    config = load_config()
    setup_logging(config.log_level)

    host = args.host or config.server.host
    port = args.port or config.server.port
    logger.info("Serving providers %s on %s:%d", config.ocr.providers, host, port)
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
