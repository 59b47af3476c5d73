# core/sa/__init__.py
from .database import Database, transaction
from .pagination import PAGE_LIMIT, Page, parse_page
from .models import Base, SUPPORTED_LANGUAGES, ALL_LANGUAGES

__all__ = [
    'Database',
    'transaction',
    'PAGE_LIMIT',
    'Page',
    'parse_page',
    'Base',
    'SUPPORTED_LANGUAGES',
    'ALL_LANGUAGES',
]
