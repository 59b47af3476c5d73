# core/sa/repositories/user.py
from datetime import date, datetime
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.errors import ConflictError, NotFoundError, ValidationError
from core.sa.models import (
    SUPPORTED_LANGUAGES, Book, BookMark, Podcast, PodcastProgress,
    User, UserPreferences, UserProgress
)
from core.sa.pagination import PAGE_LIMIT, Page, paginate, parse_page
from .base import read_guard, require_text, unit_of_work

logger = logging.getLogger(__name__)

USER_FIELDS = ('name', 'email', 'gender', 'profile_picture', 'dob')
PREFERENCE_FIELDS = ('allow_reminders', 'app_language', 'author_preferences', 'category_preferences')


def parse_dob(value: Any) -> Optional[date]:
    """Accept a date, an ISO date or datetime string, or nothing"""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Invalid date of birth '{value}'")


def _book_ref(book: Optional[Book]) -> Optional[Dict[str, Any]]:
    if book is None:
        return None
    return {'id': book.id, 'title': book.title}


def preferences_to_dict(preferences: Optional[UserPreferences]) -> Optional[Dict[str, Any]]:
    if preferences is None:
        return None
    return {
        'id': preferences.id,
        'user_id': preferences.user_id,
        'allow_reminders': preferences.allow_reminders,
        'app_language': preferences.app_language,
        'author_preferences': preferences.author_preferences or [],
        'category_preferences': preferences.category_preferences or [],
    }


def progress_to_dict(progress: UserProgress) -> Dict[str, Any]:
    return {
        'id': progress.id,
        'user_id': progress.user_id,
        'book_id': progress.book_id,
        'completed': progress.completed,
        'last_chapter': progress.last_chapter,
        'book': _book_ref(progress.book),
        'updated_at': progress.updated_at,
    }


def podcast_progress_to_dict(progress: PodcastProgress) -> Dict[str, Any]:
    return {
        'id': progress.id,
        'user_id': progress.user_id,
        'podcast_id': progress.podcast_id,
        'completed': progress.completed,
        'last_position_seconds': progress.last_position_seconds,
        'updated_at': progress.updated_at,
    }


def bookmark_to_dict(bookmark: BookMark) -> Dict[str, Any]:
    return {
        'id': bookmark.id,
        'user_id': bookmark.user_id,
        'book_id': bookmark.book_id,
        'book': _book_ref(bookmark.book),
        'created_at': bookmark.created_at,
    }


def user_to_dict(user: User, detailed: bool = True) -> Dict[str, Any]:
    data = {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'gender': user.gender,
        'profile_picture': user.profile_picture,
        'dob': user.dob.isoformat() if user.dob else None,
        'created_at': user.created_at,
        'updated_at': user.updated_at,
    }
    if detailed:
        data['preferences'] = preferences_to_dict(user.preferences)
        data['progress'] = [progress_to_dict(item) for item in user.progress]
        data['podcast_progress'] = [podcast_progress_to_dict(item) for item in user.podcast_progress]
        data['bookmarks'] = [bookmark_to_dict(item) for item in user.bookmarks]
    return data


class UserRepository:
    """Repository for users and the records they own.

    A user's id is the subject id issued by the identity provider. Writes to
    preferences, progress and bookmarks always act on the caller's own user.
    """

    def __init__(self, session: Session):
        self.session = session

    def _get_user(self, user_id: str) -> User:
        with read_guard(self.session, "Failed to fetch user"):
            user = self.session.get(User, user_id) if user_id else None
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _ensure_email_free(self, email: str, exclude_id: Optional[str] = None) -> None:
        query = self.session.query(User.id).filter(User.email == email)
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        if query.first() is not None:
            raise ConflictError(f"Email '{email}' is already registered")

    def create_user(self, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Create the user for an authenticated subject.

        Args:
            user_id: Subject id from the verified token
            values: name, email and optional gender, profile_picture, dob

        Raises:
            ValidationError: If name or email is missing
            ConflictError: If the user or the email already exists
        """
        require_text(values, 'name')
        require_text(values, 'email')
        dob = parse_dob(values.get('dob'))
        with unit_of_work(self.session, "Failed to create user"):
            if self.session.get(User, user_id) is not None:
                raise ConflictError("User already exists")
            self._ensure_email_free(values['email'])
            user = User(
                id=user_id,
                name=values['name'],
                email=values['email'],
                gender=values.get('gender'),
                profile_picture=values.get('profile_picture'),
                dob=dob,
            )
            self.session.add(user)
        logger.info("Created user %s", user_id)
        return user_to_dict(user, detailed=False)

    def get_user(self, user_id: str) -> Dict[str, Any]:
        user = self._get_user(user_id)
        with read_guard(self.session, "Failed to fetch user"):
            return user_to_dict(user)

    def get_by_email(self, email: str) -> Dict[str, Any]:
        with read_guard(self.session, "Failed to fetch user"):
            user = self.session.query(User).filter(User.email == email).first()
            if user is None:
                raise NotFoundError("User not found")
            return user_to_dict(user)

    def list_users(self, page: Any = None) -> Page:
        """Users newest first"""
        page = parse_page(page)
        with read_guard(self.session, "Failed to fetch users"):
            total = self.session.query(func.count(User.id)).scalar() or 0
            query = self.session.query(User).order_by(User.created_at.desc(), User.id)
            items = [user_to_dict(user) for user in paginate(query, page)]
        return Page(items=items, page=page, limit=PAGE_LIMIT, total=total)

    def update_user(self, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        user = self._get_user(user_id)
        changes = {key: values[key] for key in USER_FIELDS if values.get(key) is not None}
        if 'dob' in changes:
            changes['dob'] = parse_dob(changes['dob'])
        for field in ('name', 'email'):
            if field in changes:
                require_text(changes, field)
        with unit_of_work(self.session, "Failed to update user"):
            if 'email' in changes:
                self._ensure_email_free(changes['email'], exclude_id=user.id)
            for key, value in changes.items():
                setattr(user, key, value)
        return user_to_dict(user, detailed=False)

    def delete_user(self, user_id: str) -> None:
        """Remove the user and everything it owns in one unit.

        Bookmarks go first, then progress, then preferences, then the user row.
        """
        user = self._get_user(user_id)
        with unit_of_work(self.session, "Failed to delete user"):
            for bookmark in list(user.bookmarks):
                self.session.delete(bookmark)
            self.session.flush()
            for progress in list(user.progress) + list(user.podcast_progress):
                self.session.delete(progress)
            self.session.flush()
            if user.preferences is not None:
                self.session.delete(user.preferences)
                self.session.flush()
            self.session.expire(user, ['bookmarks', 'progress', 'podcast_progress', 'preferences'])
            self.session.delete(user)
        logger.info("Deleted user %s", user_id)

    # Preferences

    def _preference_values(self, values: Dict[str, Any]) -> Dict[str, Any]:
        changes = {key: values[key] for key in PREFERENCE_FIELDS if values.get(key) is not None}
        language = changes.get('app_language')
        if language is not None and language not in SUPPORTED_LANGUAGES:
            raise ValidationError(
                f"Unsupported language '{language}'. Must be one of: {', '.join(SUPPORTED_LANGUAGES)}"
            )
        for key in ('author_preferences', 'category_preferences'):
            if key in changes and not isinstance(changes[key], list):
                raise ValidationError(f"{key} must be a list of ids")
        if 'allow_reminders' in changes and not isinstance(changes['allow_reminders'], bool):
            raise ValidationError("allow_reminders must be a boolean")
        return changes

    def create_preferences(self, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        user = self._get_user(user_id)
        changes = self._preference_values(values)
        with unit_of_work(self.session, "Failed to create user preferences"):
            if user.preferences is not None:
                raise ConflictError("User preferences already exist")
            preferences = UserPreferences(user=user, **changes)
            self.session.add(preferences)
        return preferences_to_dict(preferences)

    def update_preferences(self, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        with read_guard(self.session, "Failed to fetch user preferences"):
            preferences = (
                self.session.query(UserPreferences)
                .filter(UserPreferences.user_id == user_id)
                .first()
            )
        if preferences is None:
            raise NotFoundError("User preferences not found")
        changes = self._preference_values(values)
        with unit_of_work(self.session, "Failed to update user preferences"):
            for key, value in changes.items():
                setattr(preferences, key, value)
        return preferences_to_dict(preferences)

    # Book progress

    def _get_book(self, book_id: str) -> Book:
        with read_guard(self.session, "Failed to fetch book"):
            book = self.session.get(Book, book_id) if book_id else None
        if book is None:
            raise NotFoundError("Book not found")
        return book

    def _progress_values(self, values: Dict[str, Any], position_field: str) -> Dict[str, Any]:
        changes = {}
        if values.get('completed') is not None:
            if not isinstance(values['completed'], bool):
                raise ValidationError("completed must be a boolean")
            changes['completed'] = values['completed']
        position = values.get(position_field)
        if position is not None:
            if isinstance(position, bool) or not isinstance(position, int) or position < 0:
                raise ValidationError(f"{position_field} must be a non-negative integer")
            changes[position_field] = position
        return changes

    def _get_progress(self, user_id: str, book_id: str) -> Optional[UserProgress]:
        with read_guard(self.session, "Failed to fetch user progress"):
            return (
                self.session.query(UserProgress)
                .filter(UserProgress.user_id == user_id, UserProgress.book_id == book_id)
                .first()
            )

    def create_progress(self, user_id: str, book_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Start tracking a book. There is at most one row per user and book."""
        user = self._get_user(user_id)
        book = self._get_book(book_id)
        changes = self._progress_values(values, 'last_chapter')
        with unit_of_work(self.session, "Failed to create user progress"):
            if self._get_progress(user_id, book_id) is not None:
                raise ConflictError("Progress for this book already exists")
            progress = UserProgress(user=user, book=book, **changes)
            self.session.add(progress)
        return progress_to_dict(progress)

    def update_progress(self, user_id: str, book_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        progress = self._get_progress(user_id, book_id)
        if progress is None:
            raise NotFoundError("Progress not found")
        changes = self._progress_values(values, 'last_chapter')
        with unit_of_work(self.session, "Failed to update user progress"):
            for key, value in changes.items():
                setattr(progress, key, value)
        return progress_to_dict(progress)

    # Podcast progress

    def save_podcast_progress(self, user_id: str, podcast_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Create or patch the caller's progress on a podcast"""
        user = self._get_user(user_id)
        with read_guard(self.session, "Failed to fetch podcast"):
            podcast = self.session.get(Podcast, podcast_id) if podcast_id else None
        if podcast is None:
            raise NotFoundError("Podcast not found")
        changes = self._progress_values(values, 'last_position_seconds')
        with unit_of_work(self.session, "Failed to save podcast progress"):
            progress = (
                self.session.query(PodcastProgress)
                .filter(PodcastProgress.user_id == user_id, PodcastProgress.podcast_id == podcast_id)
                .first()
            )
            if progress is None:
                progress = PodcastProgress(user=user, podcast=podcast)
                self.session.add(progress)
            for key, value in changes.items():
                setattr(progress, key, value)
        return podcast_progress_to_dict(progress)

    # Bookmarks

    def create_bookmark(self, user_id: str, book_id: str) -> Dict[str, Any]:
        """Bookmark a book for the caller. A book can be bookmarked once per user."""
        user = self._get_user(user_id)
        book = self._get_book(book_id)
        with unit_of_work(self.session, "Failed to create bookmark"):
            existing = (
                self.session.query(BookMark.id)
                .filter(BookMark.user_id == user_id, BookMark.book_id == book_id)
                .first()
            )
            if existing is not None:
                raise ConflictError("Book is already bookmarked")
            bookmark = BookMark(user=user, book=book)
            self.session.add(bookmark)
        return bookmark_to_dict(bookmark)

    def delete_bookmark(self, user_id: str, book_id: str) -> None:
        with read_guard(self.session, "Failed to fetch bookmark"):
            bookmark = (
                self.session.query(BookMark)
                .filter(BookMark.user_id == user_id, BookMark.book_id == book_id)
                .first()
            )
        if bookmark is None:
            raise NotFoundError("Bookmark not found")
        user = bookmark.user
        with unit_of_work(self.session, "Failed to delete bookmark"):
            self.session.delete(bookmark)
        self.session.expire(user, ['bookmarks'])

    def list_bookmarks(self, user_id: str, page: Any = None) -> Page:
        """The caller's bookmarks, newest first"""
        page = parse_page(page)
        with read_guard(self.session, "Failed to fetch bookmarks"):
            total = (
                self.session.query(func.count(BookMark.id))
                .filter(BookMark.user_id == user_id)
                .scalar()
            ) or 0
            query = (
                self.session.query(BookMark)
                .filter(BookMark.user_id == user_id)
                .order_by(BookMark.created_at.desc(), BookMark.id)
            )
            items = [bookmark_to_dict(bookmark) for bookmark in paginate(query, page)]
        return Page(items=items, page=page, limit=PAGE_LIMIT, total=total)
