from datetime import datetime, timezone
from sqlalchemy import Column, DateTime
from ..database import Base  # the declarative Base shared by every table


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(Base):
    __abstract__ = True

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
