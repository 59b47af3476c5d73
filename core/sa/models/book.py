# core/sa/models/book.py
from sqlalchemy import Column, String, Text, Integer, Boolean, ForeignKey, Table, JSON, Index, UniqueConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, TranslationMixin, new_id

book_author = Table(
    'book_author',
    Base.metadata,
    Column('book_id', ForeignKey('book.id', ondelete='CASCADE'), primary_key=True),
    Column('author_id', ForeignKey('author.id', ondelete='CASCADE'), primary_key=True),
)

book_category = Table(
    'book_category',
    Base.metadata,
    Column('book_id', ForeignKey('book.id', ondelete='CASCADE'), primary_key=True),
    Column('category_id', ForeignKey('category.id', ondelete='CASCADE'), primary_key=True),
)


class Book(Base, TimestampMixin):
    __tablename__ = 'book'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    total_duration: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    translations = relationship(
        'TranslatedBook',
        back_populates='book',
        cascade='all, delete-orphan',
        passive_deletes=True,
    )
    summaries = relationship(
        'Summary',
        back_populates='book',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='Summary.order',
    )
    authors = relationship('Author', secondary=book_author, back_populates='books')
    categories = relationship('Category', secondary=book_category, back_populates='books')
    free_entry = relationship('FreeBook', back_populates='book', uselist=False, cascade='all, delete-orphan', passive_deletes=True)

    __table_args__ = (
        Index('idx_book_title', 'title'),
    )


class TranslatedBook(Base, TranslationMixin):
    __tablename__ = 'translated_book'

    book_id: Mapped[str] = mapped_column(ForeignKey('book.id', ondelete='CASCADE'), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    audio_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cover_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    book = relationship('Book', back_populates='translations')

    __table_args__ = (
        UniqueConstraint('book_id', 'language', name='uix_translated_book_language'),
        Index('idx_translated_book_title', 'title'),
    )


class Summary(Base, TimestampMixin):
    """A chapter-level summary of a book."""
    __tablename__ = 'summary'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    book_id: Mapped[str] = mapped_column(ForeignKey('book.id', ondelete='CASCADE'), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    book = relationship('Book', back_populates='summaries')
    translations = relationship(
        'TranslatedSummary',
        back_populates='summary',
        cascade='all, delete-orphan',
        passive_deletes=True,
    )

    __table_args__ = (
        Index('idx_summary_book_order', 'book_id', 'order'),
    )


class TranslatedSummary(Base, TranslationMixin):
    __tablename__ = 'translated_summary'

    summary_id: Mapped[str] = mapped_column(ForeignKey('summary.id', ondelete='CASCADE'), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    key_takeaways: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    audio_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    summary = relationship('Summary', back_populates='translations')

    __table_args__ = (
        UniqueConstraint('summary_id', 'language', name='uix_translated_summary_language'),
    )


class BookCollection(Base, TimestampMixin):
    """An ordered, curated list of books.

    ``books`` holds book ids in display order. They are plain references,
    not foreign keys, so a deleted book leaves a dangling id behind.
    """
    __tablename__ = 'book_collection'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    books: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    translations = relationship(
        'TranslatedBookCollection',
        back_populates='book_collection',
        cascade='all, delete-orphan',
        passive_deletes=True,
    )


class TranslatedBookCollection(Base, TranslationMixin):
    __tablename__ = 'translated_book_collection'

    book_collection_id: Mapped[str] = mapped_column(ForeignKey('book_collection.id', ondelete='CASCADE'), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    book_collection = relationship('BookCollection', back_populates='translations')

    __table_args__ = (
        UniqueConstraint('book_collection_id', 'language', name='uix_translated_book_collection_language'),
    )


class FreeBook(Base, TimestampMixin):
    """Books available without a subscription, in display order."""
    __tablename__ = 'free_book'

    book_id: Mapped[str] = mapped_column(ForeignKey('book.id', ondelete='CASCADE'), primary_key=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    book = relationship('Book', back_populates='free_entry')
