# pos_admin/database.py

import logging
import os
import threading
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from pos_admin.core.config import settings

Base = declarative_base()

logger = logging.getLogger("app")


class Datastore:
    """
    Owns the engine, the session factory and the single-writer lock.

    Reads go through ``session()`` and run concurrently. Every mutation goes
    through ``transaction()``, which holds the writer lock for the whole
    unit of work and commits or rolls back before releasing it.
    """

    def __init__(self, database_url: str, busy_timeout: int = 30, echo: bool = False):
        url = make_url(database_url)
        connect_args = {}

        if url.get_backend_name() == "sqlite":
            connect_args = {"check_same_thread": False, "timeout": busy_timeout}

            if url.database and url.database != ":memory:":
                directory = os.path.dirname(os.path.abspath(url.database))
                os.makedirs(directory, exist_ok=True)

        self.engine = create_engine(
            database_url,
            echo=echo,
            pool_pre_ping=True,
            connect_args=connect_args,
        )

        if url.get_backend_name() == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )

        self._write_lock = threading.Lock()

    def create_all(self):
        # Every table must be registered on Base.metadata before create_all
        from pos_admin.models import categories, products, sale_items, sales, users  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    @contextmanager
    def transaction(self):
        with self._write_lock:
            db = self.SessionLocal()
            try:
                yield db
                db.commit()
            except BaseException:
                db.rollback()
                raise
            finally:
                db.close()

    def dispose(self):
        self.engine.dispose()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_datastore(database_url: str | None = None) -> Datastore:
    return Datastore(
        database_url or settings.DATABASE_URL,
        busy_timeout=settings.DATABASE_BUSY_TIMEOUT,
        echo=settings.DEBUG,
    )


def get_datastore(request: Request) -> Datastore:
    return request.app.state.datastore


def get_db(request: Request):
    db = get_datastore(request).session()
    try:
        yield db
    finally:
        db.close()
