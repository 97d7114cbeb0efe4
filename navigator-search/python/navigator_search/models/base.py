"""
Base model classes and mixins
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, declarative_base

# Base class for all models
Base = declarative_base()

class TimestampMixin:
    """Mixin for created/updated timestamps"""
    created_date: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        server_default=text('CURRENT_TIMESTAMP')
    )
    updated_date: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        server_default=text('CURRENT_TIMESTAMP')
    )

class VersionScopedMixin:
    """Rows owned by one stored domain version"""
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    domain_version_pk: Mapped[int] = mapped_column(
        Integer, ForeignKey('domain_versions.id', ondelete='CASCADE'), nullable=False
    )

class StixRowMixin(VersionScopedMixin):
    """
    One STIX object of a domain version. ``position`` keeps the order the
    objects had in the Domain so a reload yields the same ordering.
    """
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    stix_id: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    deprecated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    revoked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
