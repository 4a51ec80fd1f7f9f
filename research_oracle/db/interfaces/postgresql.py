import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from research_oracle.config import PostgresSettings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class PostgreSQLDatabase:
    """Read-only access to the paper corpus."""

    def __init__(self, config: PostgresSettings):
        self.config = config
        self.engine: Optional[Engine] = None
        self.session_factory: Optional[sessionmaker] = None

    def startup(self) -> None:
        self.engine = create_engine(
            self.config.database_url,
            echo=self.config.echo,
            pool_size=self.config.pool_size,
            max_overflow=self.config.max_overflow,
            pool_pre_ping=True,
        )
        self.session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.info("Connected to PostgreSQL corpus")

    def teardown(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("PostgreSQL connections closed")

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        if self.session_factory is None:
            raise RuntimeError("Database not started; call startup() first")

        session = self.session_factory()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
