"""Base model classes for the cricket scorer database."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import declarative_base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base:
    """Base class for all database models."""
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    # Python-side defaults stay loaded on detached instances after commit
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    
    def to_dict(self) -> dict[str, Any]:
        """Convert model instance to dictionary."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }


# Create the declarative base
Base = declarative_base(cls=Base)
