"""
Status Proxy command line entry point.

Usage:
    python -m status_proxy -h 127.0.0.1 -p 3000 -c ./cache
"""

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from .app import create_app
from .config import ProxyConfig
from .exceptions import CacheIOError

logger = logging.getLogger("status_proxy")


def build_parser() -> argparse.ArgumentParser:
    # -h is the host flag, so help is only available as --help
    parser = argparse.ArgumentParser(
        prog="status-proxy",
        description="Caching proxy for HTTP status-code images",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="show this help message and exit")
    parser.add_argument("-h", "--host", required=True, help="Server address")
    parser.add_argument("-p", "--port", required=True, type=int, help="Server port")
    parser.add_argument(
        "-c", "--cache", required=True, help="Directory that holds cached images"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    config = ProxyConfig.from_args(args.host, args.port, args.cache)

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        app = create_app(config)
    except CacheIOError as e:
        logger.error(f"Fatal error during initialization: {e.__cause__ or e}")
        sys.exit(1)

    logger.info(f"Proxy server running at http://{config.host}:{config.port}/")
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    main()
