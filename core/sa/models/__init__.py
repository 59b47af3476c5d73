# core/sa/models/__init__.py
from .base import Base, TimestampMixin, TranslationMixin, SUPPORTED_LANGUAGES, LANGUAGE_KEYS, ALL_LANGUAGES, new_id
from .author import Author, TranslatedAuthor
from .category import Category, TranslatedCategory
from .book import (
    Book, TranslatedBook, Summary, TranslatedSummary,
    BookCollection, TranslatedBookCollection, FreeBook,
    book_author, book_category
)
from .podcast import (
    Podcast, TranslatedPodcast, PodcastCollection, TranslatedPodcastCollection,
    podcast_category, podcast_speaker, podcast_guest
)
from .page import DynamicPage, DynamicPageBlock, BlockType, ViewType
from .user import User, UserPreferences, UserProgress, PodcastProgress, BookMark

__all__ = [
    'Base',
    'TimestampMixin',
    'TranslationMixin',
    'SUPPORTED_LANGUAGES',
    'LANGUAGE_KEYS',
    'ALL_LANGUAGES',
    'new_id',
    'Author',
    'TranslatedAuthor',
    'Category',
    'TranslatedCategory',
    'Book',
    'TranslatedBook',
    'Summary',
    'TranslatedSummary',
    'BookCollection',
    'TranslatedBookCollection',
    'FreeBook',
    'book_author',
    'book_category',
    'Podcast',
    'TranslatedPodcast',
    'PodcastCollection',
    'TranslatedPodcastCollection',
    'podcast_category',
    'podcast_speaker',
    'podcast_guest',
    'DynamicPage',
    'DynamicPageBlock',
    'BlockType',
    'ViewType',
    'User',
    'UserPreferences',
    'UserProgress',
    'PodcastProgress',
    'BookMark',
]
