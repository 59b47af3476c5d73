# core/sa/repositories/__init__.py
from .translation import TranslationStore, validate_language
from .base import TranslatedRepository, read_guard, unit_of_work
from .author import AuthorRepository
from .category import CategoryRepository
from .book import BookRepository
from .summary import SummaryRepository
from .book_collection import BookCollectionRepository
from .podcast import PodcastRepository
from .podcast_collection import PodcastCollectionRepository
from .page import PageRepository
from .user import UserRepository

__all__ = [
    'TranslationStore',
    'validate_language',
    'TranslatedRepository',
    'unit_of_work',
    'read_guard',
    'AuthorRepository',
    'CategoryRepository',
    'BookRepository',
    'SummaryRepository',
    'BookCollectionRepository',
    'PodcastRepository',
    'PodcastCollectionRepository',
    'PageRepository',
    'UserRepository',
]
