"""Database session management."""
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from homestay.config.settings import Settings, get_settings
from homestay.core.logging import get_logger

logger = get_logger(__name__)

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def use_immediate_transactions(engine: Engine) -> None:
    """
    Make every SQLite transaction start with ``BEGIN IMMEDIATE``.

    pysqlite defers ``BEGIN`` until the first write and SQLite ignores
    ``FOR UPDATE``, so without this a read-then-write such as the
    availability check runs outside any lock. Driver-level transaction
    handling is switched off and SQLAlchemy emits the BEGIN itself, so the
    database write lock is held from the first statement to commit.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """
    Owns the engine and session factory for one configured store.

    Built by the application factory and kept on ``app.state`` so tests
    and alternative deployments can wire their own instance.
    """

    def __init__(self, url: Optional[str] = None, settings: Optional[Settings] = None, engine: Optional[Engine] = None):
        self.settings = settings or get_settings()
        self.url = url or self.settings.DATABASE_URL
        self.engine = engine or self._build_engine()
        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    def _build_engine(self) -> Engine:
        echo = self.settings.DATABASE_ECHO or self.settings.LOG_SQL_QUERIES
        if self.url.startswith("sqlite"):
            if self.url in _MEMORY_URLS:
                # One shared connection; only the test suite uses this.
                return create_engine(
                    self.url,
                    echo=echo,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )

            engine = create_engine(
                self.url,
                echo=echo,
                connect_args={
                    "check_same_thread": False,
                    "timeout": self.settings.DB_LOCK_TIMEOUT_SECONDS,
                },
            )
            use_immediate_transactions(engine)
            return engine

        return create_engine(
            self.url,
            pool_pre_ping=True,
            echo=echo,
            pool_size=self.settings.DB_POOL_SIZE,
            max_overflow=self.settings.DB_POOL_OVERFLOW,
        )

    def create_all(self) -> None:
        """Create all tables (development and tests; production uses migrations)."""
        from homestay.models import Base

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema created", extra={"dialect": self.engine.dialect.name})

    def drop_all(self) -> None:
        from homestay.models import Base

        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def get_db(self) -> Generator[Session, None, None]:
        """
        Dependency-style generator yielding a request-scoped session.

        Usage in FastAPI endpoints:
            def read_items(db: Session = Depends(get_db)):
                ...
        """
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
