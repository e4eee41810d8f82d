from __future__ import annotations

import logging
from pathlib import Path
from threading import Lock

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import make_url

from .config import get_settings

logger = logging.getLogger(__name__)
_run_lock = Lock()
_has_run = False

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def alembic_config(database_url: str | None = None) -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url or get_settings().database_url)
    return cfg


def run_migrations_once(database_url: str | None = None) -> None:
    """Upgrade the schema to head once per process."""
    global _has_run
    if _has_run:
        return

    with _run_lock:
        if _has_run:
            return
        cfg = alembic_config(database_url)
        target = make_url(cfg.get_main_option("sqlalchemy.url")).render_as_string(hide_password=True)
        logger.info("Applying database migrations to %s", target)
        command.upgrade(cfg, "head")
        _has_run = True
        logger.info("Database schema is up to date.")
