"""Database connection built from the ``dbconfig`` settings."""

from __future__ import annotations

import logging
from urllib.parse import quote

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from .models import create_schema

_log = logging.getLogger("salesanalytics")


def build_dsn(settings):
    """Return the MySQL URL described by the ``dbconfig`` settings file."""
    user = settings.get("dbconfig", "user")
    pwd = settings.get("dbconfig", "password")
    host = settings.get("dbconfig", "host")
    db_name = settings.get("dbconfig", "db")
    if not (user and pwd and host and db_name):
        raise ValueError("database configuration values are missing")
    return f"mysql+pymysql://{quote(user, safe='')}:{quote(pwd, safe='')}@{host}/{db_name}"


def create_db_engine(url):
    """Create an engine; an in-memory SQLite database is shared by all connections."""
    parsed = make_url(url)
    options = {}
    if parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    return create_engine(parsed, **options)


def connect(settings):
    """Open the configured database and create any missing tables."""
    engine = create_db_engine(build_dsn(settings))
    try:
        with engine.connect():
            pass
    except SQLAlchemyError as exc:
        engine.dispose()
        raise ConnectionError(f"failed to connect to database: {exc}") from exc
    _log.info("Database connection established")

    try:
        create_schema(engine)
    except SQLAlchemyError as exc:
        engine.dispose()
        raise RuntimeError(f"failed to auto-migrate models: {exc}") from exc
    _log.info("Database migrated successfully")
    return engine