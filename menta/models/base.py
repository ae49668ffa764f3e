from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import Column, DateTime

from menta.utils.helpers import utcnow


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    """Mixin to add timestamp fields to models."""
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
