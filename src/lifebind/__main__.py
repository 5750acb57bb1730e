import logging
import sys

import uvicorn

from .app import create_app
from .config import get_settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stdout,
    )


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    # log_config=None leaves uvicorn's loggers propagating to the root handler above
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
