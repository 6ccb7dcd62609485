#!/usr/bin/env python3
"""
Run the Social Engagement API with uvicorn.

    python -m server.server
    uvicorn server.server:app --port 3001

Host, port and log level come from HOST / PORT / LOG_LEVEL (see config.py).
"""

import logging

try:
    from .app import app
    from .config import get_config
except ImportError:
    from app import app
    from config import get_config

logger = logging.getLogger(__name__)


def main() -> None:
    import uvicorn

    config = get_config()
    ok, errors = config.validate()
    if not ok:
        for err in errors:
            logger.error("[server] invalid config: %s", err)
        raise SystemExit(1)
    logger.info("[server] listening on %s:%d (data source: %s)", config.host, config.port, config.data_source)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
