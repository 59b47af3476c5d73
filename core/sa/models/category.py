# core/sa/models/category.py
from sqlalchemy import String, Text, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, TranslationMixin, new_id


class Category(Base, TimestampMixin):
    __tablename__ = 'category'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    category_svg: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    category_image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    mid_image: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # Relationships
    translations = relationship(
        'TranslatedCategory',
        back_populates='category',
        cascade='all, delete-orphan',
        passive_deletes=True,
    )

    # Convenience relationships
    books = relationship('Book', secondary='book_category', back_populates='categories')
    podcasts = relationship('Podcast', secondary='podcast_category', back_populates='categories')

    __table_args__ = (
        Index('idx_category_name', 'name'),
    )


class TranslatedCategory(Base, TranslationMixin):
    __tablename__ = 'translated_category'

    category_id: Mapped[str] = mapped_column(ForeignKey('category.id', ondelete='CASCADE'), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    category = relationship('Category', back_populates='translations')

    __table_args__ = (
        UniqueConstraint('category_id', 'language', name='uix_translated_category_language'),
    )
