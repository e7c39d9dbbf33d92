from __future__ import annotations

import uvicorn

from tasktime.api.app import create_app
from tasktime.config import load_settings
from tasktime.infra.logging import setup_logging, shutdown_logging


def main() -> None:
    settings = load_settings()
    handlers = setup_logging(settings)
    try:
        app = create_app(settings)
        uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    finally:
        shutdown_logging(handlers)


if __name__ == "__main__":
    main()
