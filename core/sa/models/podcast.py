# core/sa/models/podcast.py
from sqlalchemy import Column, String, Text, Integer, Boolean, ForeignKey, Table, JSON, Index, UniqueConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, TranslationMixin, new_id

podcast_category = Table(
    'podcast_category',
    Base.metadata,
    Column('podcast_id', ForeignKey('podcast.id', ondelete='CASCADE'), primary_key=True),
    Column('category_id', ForeignKey('category.id', ondelete='CASCADE'), primary_key=True),
)

podcast_speaker = Table(
    'podcast_speaker',
    Base.metadata,
    Column('podcast_id', ForeignKey('podcast.id', ondelete='CASCADE'), primary_key=True),
    Column('author_id', ForeignKey('author.id', ondelete='CASCADE'), primary_key=True),
)

podcast_guest = Table(
    'podcast_guest',
    Base.metadata,
    Column('podcast_id', ForeignKey('podcast.id', ondelete='CASCADE'), primary_key=True),
    Column('author_id', ForeignKey('author.id', ondelete='CASCADE'), primary_key=True),
)


class Podcast(Base, TimestampMixin):
    __tablename__ = 'podcast'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    total_duration: Mapped[int] = mapped_column(Integer, nullable=False)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    translations = relationship(
        'TranslatedPodcast',
        back_populates='podcast',
        cascade='all, delete-orphan',
        passive_deletes=True,
    )
    categories = relationship('Category', secondary=podcast_category, back_populates='podcasts')
    speakers = relationship('Author', secondary=podcast_speaker, back_populates='speaking_podcasts')
    guests = relationship('Author', secondary=podcast_guest, back_populates='guest_podcasts')

    __table_args__ = (
        Index('idx_podcast_title', 'title'),
    )


class TranslatedPodcast(Base, TranslationMixin):
    __tablename__ = 'translated_podcast'

    podcast_id: Mapped[str] = mapped_column(ForeignKey('podcast.id', ondelete='CASCADE'), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    key_takeaways: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    audio_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    podcast = relationship('Podcast', back_populates='translations')

    __table_args__ = (
        UniqueConstraint('podcast_id', 'language', name='uix_translated_podcast_language'),
        Index('idx_translated_podcast_title', 'title'),
    )


class PodcastCollection(Base, TimestampMixin):
    """A podcast channel. ``podcast_ids`` is an ordered, unenforced id list."""
    __tablename__ = 'podcast_collection'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    podcast_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    translations = relationship(
        'TranslatedPodcastCollection',
        back_populates='podcast_collection',
        cascade='all, delete-orphan',
        passive_deletes=True,
    )


class TranslatedPodcastCollection(Base, TranslationMixin):
    __tablename__ = 'translated_podcast_collection'

    podcast_collection_id: Mapped[str] = mapped_column(ForeignKey('podcast_collection.id', ondelete='CASCADE'), nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    podcast_collection = relationship('PodcastCollection', back_populates='translations')

    __table_args__ = (
        UniqueConstraint('podcast_collection_id', 'language', name='uix_translated_podcast_collection_language'),
    )
