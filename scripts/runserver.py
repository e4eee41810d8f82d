#!/usr/bin/env python
"""Container entrypoint.

With RUN_DB_MIGRATIONS=1 the schema is upgraded before Uvicorn starts; the
app's own startup upgrade then sees it has already run in this process.
"""

from __future__ import annotations

import logging
import os
import sys

import uvicorn
from sqlalchemy.exc import SQLAlchemyError

from teamclock.config import get_settings
from teamclock.migration_runner import run_migrations_once

logger = logging.getLogger("runserver")


def main() -> int:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="[runserver] %(levelname)s %(message)s")

    if os.getenv("RUN_DB_MIGRATIONS") == "1":
        try:
            run_migrations_once()
        except SQLAlchemyError as exc:
            logger.error("Migrations failed: %s", exc)
            return 1

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info("Starting %s on %s:%s (%s)", settings.app_name, host, port, settings.environment)
    uvicorn.run("teamclock.main:app", host=host, port=port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
