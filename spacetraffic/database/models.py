"""SQLAlchemy ORM models."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from .database import Base


class StorageItem(Base):
    """One key/value entry of the browser-style local store."""

    __tablename__ = "local_storage"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
