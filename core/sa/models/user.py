# core/sa/models/user.py
from datetime import date
from sqlalchemy import String, Integer, Boolean, ForeignKey, Date, JSON, UniqueConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, new_id


class User(Base, TimestampMixin):
    __tablename__ = 'user'

    # Subject id issued by the identity provider
    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    gender: Mapped[str | None] = mapped_column(String(50), nullable=True)
    profile_picture: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Relationships
    preferences = relationship('UserPreferences', back_populates='user', uselist=False)
    progress = relationship('UserProgress', back_populates='user')
    podcast_progress = relationship('PodcastProgress', back_populates='user')
    bookmarks = relationship('BookMark', back_populates='user')


class UserPreferences(Base, TimestampMixin):
    __tablename__ = 'user_preferences'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey('user.id'), nullable=False, unique=True)
    allow_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    app_language: Mapped[str] = mapped_column(String(8), nullable=False, default='en')
    author_preferences: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    category_preferences: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    user = relationship('User', back_populates='preferences')


class UserProgress(Base, TimestampMixin):
    __tablename__ = 'user_progress'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey('user.id'), nullable=False)
    book_id: Mapped[str] = mapped_column(ForeignKey('book.id', ondelete='CASCADE'), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_chapter: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user = relationship('User', back_populates='progress')
    book = relationship('Book')

    __table_args__ = (
        UniqueConstraint('book_id', 'user_id', name='uix_user_progress_book_user'),
    )


class PodcastProgress(Base, TimestampMixin):
    __tablename__ = 'podcast_progress'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey('user.id'), nullable=False)
    podcast_id: Mapped[str] = mapped_column(ForeignKey('podcast.id', ondelete='CASCADE'), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_position_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user = relationship('User', back_populates='podcast_progress')
    podcast = relationship('Podcast')

    __table_args__ = (
        UniqueConstraint('podcast_id', 'user_id', name='uix_podcast_progress_podcast_user'),
    )


class BookMark(Base, TimestampMixin):
    __tablename__ = 'book_mark'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey('user.id'), nullable=False)
    book_id: Mapped[str] = mapped_column(ForeignKey('book.id', ondelete='CASCADE'), nullable=False)

    user = relationship('User', back_populates='bookmarks')
    book = relationship('Book')

    __table_args__ = (
        UniqueConstraint('user_id', 'book_id', name='uix_book_mark_user_book'),
    )
