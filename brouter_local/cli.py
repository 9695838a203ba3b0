"""
local-brouter: download BRouter into the user's data directory, start it and
keep it running until interrupted (Ctrl-C).
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from brouter.config import settings

from .server import BRouterServer

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    argparse.ArgumentParser(prog="local-brouter", description=__doc__).parse_args(argv)

    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    with BRouterServer.home() as server:
        logger.info(f"Starting BRouter server at {server.base_path}")
        server.install()
        url = server.start()
        logger.info(f"BRouter server started at {url}")
        try:
            while True:
                time.sleep(3600)
        except KeyboardInterrupt:
            logger.info("Interrupted, stopping BRouter server")
    return 0


if __name__ == "__main__":
    sys.exit(main())
