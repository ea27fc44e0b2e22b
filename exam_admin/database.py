import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import JSON, create_engine, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from exam_admin.config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# JSONB on PostgreSQL so array containment can use @>, plain JSON elsewhere
JSONType = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


class Database:
    """
    Application-scoped storage handle.

    Built once when the application starts (see main.lifespan), disposed on
    shutdown and handed to the routers through the get_db / get_database
    dependencies.
    """

    def __init__(self, url: str, password: Optional[str] = None, echo: bool = False):
        if not url or not url.strip():
            raise RuntimeError("DATABASE_URL is not set")
        db_url = make_url(url.strip())
        if password:
            db_url = db_url.set(password=password)
        self.url = db_url
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None
        self._echo = echo

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, settings.database_password, settings.database_echo)

    @property
    def dialect(self) -> str:
        return self.url.get_backend_name()

    def init(self) -> None:
        if self.dialect == "sqlite":
            engine = create_engine(self.url, echo=self._echo, connect_args={"check_same_thread": False})
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        else:
            engine = create_engine(self.url, echo=self._echo, pool_pre_ping=True)

        # model modules must be imported before create_all sees the tables
        from exam_admin import models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        logger.info("Database ready (%s)", self.dialect)

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database connections closed")
        self.engine = None
        self.SessionLocal = None

    @contextmanager
    def session(self) -> Iterator[Session]:
        if self.SessionLocal is None:
            raise RuntimeError("Database.init() has not been called")
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Iterator[Session]:
    with get_database(request).session() as db:
        yield db
