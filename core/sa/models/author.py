# core/sa/models/author.py
from sqlalchemy import String, Text, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, TranslationMixin, new_id


class Author(Base, TimestampMixin):
    __tablename__ = 'author'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # Relationships
    translations = relationship(
        'TranslatedAuthor',
        back_populates='author',
        cascade='all, delete-orphan',
        passive_deletes=True,
    )

    # Convenience relationships
    books = relationship('Book', secondary='book_author', back_populates='authors')
    speaking_podcasts = relationship('Podcast', secondary='podcast_speaker', back_populates='speakers')
    guest_podcasts = relationship('Podcast', secondary='podcast_guest', back_populates='guests')

    __table_args__ = (
        # Search index
        Index('idx_author_name', 'name'),
    )


class TranslatedAuthor(Base, TranslationMixin):
    __tablename__ = 'translated_author'

    author_id: Mapped[str] = mapped_column(ForeignKey('author.id', ondelete='CASCADE'), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    author = relationship('Author', back_populates='translations')

    __table_args__ = (
        UniqueConstraint('author_id', 'language', name='uix_translated_author_language'),
        Index('idx_translated_author_name', 'name'),
    )
