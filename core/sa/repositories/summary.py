# core/sa/repositories/summary.py
from typing import Any, Dict, List
import logging

from core.errors import NotFoundError, ValidationError
from core.sa.models import ALL_LANGUAGES, Book, Summary, TranslatedSummary
from .base import TranslatedRepository, english_title, read_guard, unit_of_work
from .translation import validate_language

logger = logging.getLogger(__name__)


class SummaryRepository(TranslatedRepository):
    """Chapter summaries of a book, ordered by their ``order`` number"""

    model = Summary
    translation_model = TranslatedSummary
    parent_column = 'summary_id'
    parent_relationship = 'summary'
    canonical_fields = ('book_id', 'title', 'order')
    translation_fields = ('title', 'content', 'key_takeaways', 'audio_url')
    label = 'Summary'

    def validate(self, canonical: Dict[str, Any], translations: List[Dict[str, Any]], creating: bool) -> None:
        order = canonical.get('order')
        if creating or order is not None:
            if isinstance(order, bool) or not isinstance(order, int):
                raise ValidationError("order must be an integer")
        for entry in translations:
            takeaways = entry.get('key_takeaways')
            if takeaways is not None and not isinstance(takeaways, list):
                raise ValidationError("key_takeaways must be a list")
        if not creating:
            return
        title = english_title(canonical, translations)
        if not title:
            raise ValidationError("title is required")
        canonical['title'] = title
        with read_guard(self.session, "Failed to create summary"):
            book = self.session.get(Book, canonical.get('book_id'))
        if book is None:
            raise NotFoundError("Book not found")

    def create_for_book(self, book_id: str, canonical: Dict[str, Any], translations: List[Dict[str, Any]]) -> Summary:
        return self.create(dict(canonical, book_id=book_id), translations)

    def update(self, entity_id: str, canonical: Dict[str, Any], translations=None) -> Summary:
        # A summary never moves to another book
        canonical = {key: value for key, value in canonical.items() if key != 'book_id'}
        return super().update(entity_id, canonical, translations)

    def _get_for_book(self, book_id: str, summary_id: str) -> Summary:
        summary = self.get_entity(summary_id)
        if summary.book_id != book_id:
            raise NotFoundError("Summary not found")
        return summary

    def update_for_book(self, book_id: str, summary_id: str, canonical: Dict[str, Any], translations=None) -> Summary:
        """Update a summary reached through its book's URL"""
        self._get_for_book(book_id, summary_id)
        return self.update(summary_id, canonical, translations)

    def _ordering(self):
        return (Summary.order, Summary.id)

    def list_for_book(self, book_id: str, language: str = 'en') -> List[Dict[str, Any]]:
        """Summaries of one book by ``order``.

        In a single language, summaries not yet translated are left out.
        """
        if language != ALL_LANGUAGES:
            validate_language(language)
        with read_guard(self.session, "Failed to fetch summaries"):
            if language == ALL_LANGUAGES:
                summaries = (
                    self.session.query(Summary)
                    .filter(Summary.book_id == book_id)
                    .order_by(*self._ordering())
                    .all()
                )
                return [self.to_all_languages(summary, summary.translations) for summary in summaries]
            rows = (
                self._translated_query(language)
                .filter(Summary.book_id == book_id)
                .order_by(*self._ordering())
                .all()
            )
            return [self.to_language(row.summary, row) for row in rows]

    def delete_for_book(self, book_id: str, summary_id: str) -> None:
        self._get_for_book(book_id, summary_id)
        self.delete_by_id(summary_id)

    def save_audio(self, summary_id: str, language: str, audio_url: str) -> Dict[str, Any]:
        """Attach generated speech to one translation of a summary.

        Raises:
            NotFoundError: If the summary or its translation does not exist
        """
        validate_language(language)
        if not audio_url:
            raise ValidationError("audio_url is required")
        summary = self.get_entity(summary_id)
        with read_guard(self.session, "Failed to save TTS"):
            row = self.translations.get(summary.id, language)
        if row is None:
            raise NotFoundError(f"Summary has no '{language}' translation")
        with unit_of_work(self.session, "Failed to save TTS"):
            row.audio_url = audio_url
        logger.info("Saved %s audio for summary %s", language, summary_id)
        return self.to_language(summary, row)
