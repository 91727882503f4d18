"""Run the directory API: ``python -m pdadirectory``."""

import logging
import sys

import uvicorn

from pdadirectory.app import build_app
from pdadirectory.config import Settings
from pdadirectory.errors import ConfigurationError


def main() -> None:
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        print(f"configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        build_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
