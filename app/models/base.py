"""Base models and mixins for database models"""

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, declared_attr
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Create declarative base
class Base(DeclarativeBase):
    pass


class IntegerIDModel:
    """Mixin for adding an autoincrement integer primary key"""

    @declared_attr
    def id(cls):
        return Column(Integer, primary_key=True, autoincrement=True)


class TimestampedModel:
    """Mixin for adding created_at and updated_at timestamps"""

    @declared_attr
    def created_at(cls):
        return Column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            index=True
        )

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            onupdate=utcnow
        )


class BaseModel(Base):
    """Abstract base model with common functionality"""

    __abstract__ = True

    def __repr__(self):
        """String representation"""
        class_name = self.__class__.__name__
        attributes = [
            f"{column.name}={getattr(self, column.name)!r}"
            for column in self.__table__.columns
            if column.primary_key
        ]
        return f"<{class_name}({', '.join(attributes)})>"


__all__ = [
    'Base',
    'BaseModel',
    'IntegerIDModel',
    'TimestampedModel',
    'utcnow',
]
