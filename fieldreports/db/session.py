from __future__ import annotations

import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from fieldreports.core.config import normalize_database_url

logger = logging.getLogger(__name__)


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """
    pysqlite starts transactions lazily, which breaks SAVEPOINT.
    Take over transaction control so begin_nested() works like on Postgres.
    """

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")


class Database:
    """
    Owns the engine and session factory for one application instance.

    Created by the app lifespan and disposed on shutdown; request handlers
    reach it through get_db().
    """

    def __init__(self, url: str):
        if not url:
            raise RuntimeError("DATABASE_URL is not set.")

        self.url = normalize_database_url(url)

        connect_args: dict = {}
        if self.url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        self.engine = create_engine(
            self.url,
            future=True,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        if self.url.startswith("sqlite"):
            _enable_sqlite_savepoints(self.engine)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine)

    def create_all(self) -> None:
        from fieldreports.db.base import Base
        import fieldreports.models  # noqa: F401  (registers every table on Base)

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")


def get_db(request: Request) -> Iterator[Session]:
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
