"""
SQLAlchemy ORM Models for the flashcard store

One row per (namespace, key) holding the whole JSON document.
"""

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class FlashcardBlob(Base):
    """
    Persistent document for one logical key of one user.
    """
    __tablename__ = 'flashcard_blobs'

    # Primary key: composite of namespace (user id) and logical key
    namespace = Column(String(255), primary_key=True, nullable=False)
    store_key = Column(String(50), primary_key=True, nullable=False)

    payload = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<FlashcardBlob({self.namespace}, {self.store_key})>"
