# core/sa/models/base.py
import uuid
from datetime import datetime, UTC
from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, mapped_column, Mapped

SUPPORTED_LANGUAGES = ('en', 'hi', 'ar', 'id')

# Multipart payloads key translations by language name rather than code
LANGUAGE_KEYS = {
    'english': 'en',
    'hindi': 'hi',
    'arabic': 'ar',
    'bahasa': 'id',
}

ALL_LANGUAGES = 'all'


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models"""
    pass


class TimestampMixin:
    """Mixin to add created_at and updated_at columns"""
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))


class TranslationMixin(TimestampMixin):
    """Columns shared by every per-language translation row.

    Subclasses add the parent foreign key and a UniqueConstraint on
    (parent, language).
    """
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    language: Mapped[str] = mapped_column(String(8), nullable=False)
