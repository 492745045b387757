"""
SQL store - flashcard documents in a relational database

Uses SQLAlchemy ORM; works with Postgres in production and SQLite for
local runs and tests.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from flashcards.dates import utc_now
from flashcards.store.base import FlashcardStore
from flashcards.store.models import Base, FlashcardBlob

logger = logging.getLogger(__name__)


def normalize_sql_url(url: str) -> str:
    """Rewrite the legacy postgres:// scheme, which SQLAlchemy 2 no longer accepts."""
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgres+"):
        return "postgresql+" + url[len("postgres+"):]
    return url


def create_store_engine(url: str) -> Engine:
    """
    Get SQLAlchemy engine for the store database.

    Uses connection pooling for server databases. SQLite keeps its
    default pool (an in-memory database lives on a single connection).

    Returns:
        SQLAlchemy Engine instance
    """
    url = normalize_sql_url(url)
    if url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True, echo=False)
    return create_engine(
        url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


class SqlStore(FlashcardStore):
    """
    Store backed by the flashcard_blobs table.
    """

    def __init__(self, url: Optional[str] = None, namespace: str = "default", engine: Optional[Engine] = None):
        if engine is None:
            if url is None:
                raise ValueError("SqlStore needs a database url or an engine")
            engine = create_store_engine(url)
        self.engine = engine
        self.namespace = namespace
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        init_db(engine)

    def _session(self) -> Session:
        return self._session_factory()

    def _find(self, session: Session, key: str) -> Optional[FlashcardBlob]:
        return session.query(FlashcardBlob).filter(
            FlashcardBlob.namespace == self.namespace,
            FlashcardBlob.store_key == key
        ).first()

    def get(self, key: str) -> Optional[Any]:
        session = self._session()
        try:
            row = self._find(session, key)
            return row.payload if row is not None else None
        finally:
            session.close()

    def set(self, key: str, value: Any) -> None:
        session = self._session()
        try:
            row = self._find(session, key)
            if row is None:
                row = FlashcardBlob(namespace=self.namespace, store_key=key)
                session.add(row)
            row.payload = value
            row.updated_at = utc_now()
            session.commit()
        finally:
            session.close()

    def delete(self, key: str) -> None:
        session = self._session()
        try:
            session.query(FlashcardBlob).filter(
                FlashcardBlob.namespace == self.namespace,
                FlashcardBlob.store_key == key
            ).delete()
            session.commit()
        finally:
            session.close()

    def clear(self) -> None:
        session = self._session()
        try:
            deleted = session.query(FlashcardBlob).filter(
                FlashcardBlob.namespace == self.namespace
            ).delete()
            session.commit()
            logger.info("Cleared %d documents for namespace %s", deleted, self.namespace)
        finally:
            session.close()

    def __repr__(self):
        return f"<SqlStore({self.engine.url!r}, {self.namespace})>"


def init_db(engine: Engine) -> None:
    """
    Initialize the store schema if the table doesn't exist.

    Safe to call multiple times.
    """
    Base.metadata.create_all(engine)
