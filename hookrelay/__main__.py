"""Run the relay with uvicorn: ``python -m hookrelay``."""

import logging

import uvicorn

from .config_loader import load_config
from .logging import resolve_level, setup_logging
from .main import create_app
from .settings import RelaySettings


def main() -> None:
    config = load_config()
    settings = RelaySettings.from_config(config)
    level = resolve_level(settings.log_level)
    setup_logging(level)
    uvicorn.run(
        create_app(config),
        host=settings.host,
        port=settings.port,
        log_level=logging.getLevelName(level).lower(),
    )


if __name__ == "__main__":
    main()
