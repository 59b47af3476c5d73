# core/sa/repositories/book_collection.py
from typing import Any, Dict, List

from core.errors import ValidationError
from core.sa.models import ALL_LANGUAGES, BookCollection, TranslatedBookCollection
from .base import TranslatedRepository, english_title, require_text
from .book import BookRepository

# Members of an 'all' collection read are shown in this language
MEMBER_FALLBACK_LANGUAGE = 'en'


def validate_id_list(values: Dict[str, Any], field: str) -> None:
    ids = values.get(field)
    if ids is None:
        return
    if not isinstance(ids, list) or not all(isinstance(item, str) for item in ids):
        raise ValidationError(f"{field} must be a list of ids")


class BookCollectionRepository(TranslatedRepository):
    """Curated book lists.

    Membership is the ordered ``books`` id list on the canonical row. Ids are
    not checked against the book table, and deleted books are skipped when the
    collection is read.
    """

    model = BookCollection
    translation_model = TranslatedBookCollection
    parent_column = 'book_collection_id'
    parent_relationship = 'book_collection'
    canonical_fields = ('title', 'slug', 'image_url', 'books')
    translation_fields = ('title', 'description')
    label = 'Book collection'

    def validate(self, canonical: Dict[str, Any], translations: List[Dict[str, Any]], creating: bool) -> None:
        validate_id_list(canonical, 'books')
        if not creating:
            return
        title = english_title(canonical, translations)
        if not title:
            raise ValidationError("title is required")
        canonical['title'] = title
        require_text(canonical, 'slug')
        canonical.setdefault('books', [])

    def get_with_books(self, collection_id: str, language: str = 'en') -> Dict[str, Any]:
        """Collection plus its member books resolved in stored order"""
        collection = self.get_by_id(collection_id, language)
        member_language = MEMBER_FALLBACK_LANGUAGE if language == ALL_LANGUAGES else language
        collection['members'] = BookRepository(self.session).get_many_by_ids(
            collection['books'], member_language
        )
        return collection
