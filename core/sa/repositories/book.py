# core/sa/repositories/book.py
from typing import Any, Dict, List, Sequence
import logging

from sqlalchemy import func

from core.errors import NotFoundError, ValidationError
from core.sa.models import ALL_LANGUAGES, Author, Book, Category, FreeBook, Summary, TranslatedBook, TranslatedSummary
from core.sa.pagination import PAGE_LIMIT, Page, paginate, parse_page
from .base import TranslatedRepository, english_title, read_guard, require_positive, require_text, unit_of_work
from .relations import connect_links, set_links
from .translation import validate_language

logger = logging.getLogger(__name__)


class BookRepository(TranslatedRepository):
    model = Book
    translation_model = TranslatedBook
    parent_column = 'book_id'
    parent_relationship = 'book'
    canonical_fields = ('title', 'slug', 'total_duration')
    translation_fields = ('title', 'description', 'published', 'audio_enabled', 'cover_url')
    search_field = 'title'
    label = 'Book'
    paginated_search = True

    def validate(self, canonical: Dict[str, Any], translations: List[Dict[str, Any]], creating: bool) -> None:
        if creating:
            title = english_title(canonical, translations)
            if not title:
                raise ValidationError("English title is required")
            canonical['title'] = title
            require_text(canonical, 'slug')
            require_positive(canonical, 'total_duration')
            if not canonical.get('authors'):
                raise ValidationError("At least one author is required")
            if not canonical.get('categories'):
                raise ValidationError("At least one category is required")
            return
        if canonical.get('total_duration') is not None:
            require_positive(canonical, 'total_duration')
        if canonical.get('slug') is not None:
            require_text(canonical, 'slug')

    def apply_relations(self, entity: Book, canonical: Dict[str, Any], creating: bool) -> None:
        link = connect_links if creating else set_links
        link(self.session, entity, 'authors', Author, canonical.get('authors'), 'author')
        link(self.session, entity, 'categories', Category, canonical.get('categories'), 'category')

    def relation_fields(self, entity: Book) -> Dict[str, Any]:
        return {
            'authors': [author.id for author in entity.authors],
            'categories': [category.id for category in entity.categories],
        }

    def get_by_id(self, entity_id: str, language: str = 'en') -> Dict[str, Any]:
        """Single book. In one language the chapter list is included."""
        book = super().get_by_id(entity_id, language)
        if language != ALL_LANGUAGES:
            with read_guard(self.session, "Failed to fetch book"):
                book['summaries'] = self._summary_titles(entity_id, language)
        return book

    def get_by_slug(self, slug: str, language: str = 'en') -> Dict[str, Any]:
        with read_guard(self.session, "Failed to fetch book"):
            book_id = self.session.query(Book.id).filter(Book.slug == slug).scalar()
        if book_id is None:
            raise NotFoundError("Book not found")
        return self.get_by_id(book_id, language)

    def _summary_titles(self, book_id: str, language: str) -> List[Dict[str, Any]]:
        rows = (
            self.session.query(Summary.id, Summary.order, TranslatedSummary.title)
            .join(TranslatedSummary, TranslatedSummary.summary_id == Summary.id)
            .filter(Summary.book_id == book_id, TranslatedSummary.language == language)
            .order_by(Summary.order)
            .all()
        )
        return [{'id': row.id, 'order': row.order, 'title': row.title} for row in rows]

    # Reverse queries

    def _filtered_page(self, condition, language: str, page: Any) -> Page:
        """Paginate translated books whose canonical record matches ``condition``.

        ``total`` counts matching canonical books regardless of language.
        """
        validate_language(language)
        page = parse_page(page)
        with read_guard(self.session, "Failed to fetch books"):
            total = (
                self.session.query(func.count(Book.id))
                .filter(condition)
                .scalar()
            ) or 0
            query = (
                self._translated_query(language)
                .filter(condition)
                .order_by(*self._ordering())
            )
            items = [self.to_language(row.book, row) for row in paginate(query, page)]
        return Page(items=items, page=page, limit=PAGE_LIMIT, total=total)

    def get_by_author(self, author_id: str, language: str = 'en', page: Any = None) -> Page:
        return self._filtered_page(Book.authors.any(Author.id == author_id), language, page)

    def get_by_author_ids(self, author_ids: Sequence[str], language: str = 'en', page: Any = None) -> Page:
        return self._filtered_page(Book.authors.any(Author.id.in_(list(author_ids or []))), language, page)

    def get_by_category_slug(self, slug: str, language: str = 'en', page: Any = None) -> Page:
        return self._filtered_page(Book.categories.any(Category.slug == slug), language, page)

    def get_by_category_ids(self, category_ids: Sequence[str], language: str = 'en', page: Any = None) -> Page:
        return self._filtered_page(Book.categories.any(Category.id.in_(list(category_ids or []))), language, page)

    # Free books

    def add_free_books(self, entries: List[Dict[str, Any]]) -> int:
        """Mark books as free. Books already on the list are skipped.

        Args:
            entries: Dicts with ``book_id`` and ``order``

        Returns:
            Number of books added
        """
        added = 0
        with unit_of_work(self.session, "Failed to create free books"):
            for entry in entries:
                book_id = entry.get('book_id')
                if not book_id:
                    raise ValidationError("book_id is required")
                order = entry.get('order', 0)
                if isinstance(order, bool) or not isinstance(order, int):
                    raise ValidationError("order must be an integer")
                if self.session.get(Book, book_id) is None:
                    raise ValidationError(f"Unknown book id(s): {book_id}")
                if self.session.get(FreeBook, book_id) is not None:
                    continue
                self.session.add(FreeBook(book_id=book_id, order=order))
                self.session.flush()
                added += 1
        return added

    def remove_free_book(self, book_id: str) -> None:
        with read_guard(self.session, "Failed to fetch free book"):
            entry = self.session.get(FreeBook, book_id)
        if entry is None:
            raise NotFoundError("Free book not found")
        with unit_of_work(self.session, "Failed to delete free book"):
            self.session.delete(entry)

    def list_free_books(self, language: str = 'en') -> List[Dict[str, Any]]:
        """Free books in display order, skipping books without ``language``"""
        validate_language(language)
        with read_guard(self.session, "Failed to fetch free books"):
            rows = (
                self._translated_query(language)
                .join(FreeBook, FreeBook.book_id == Book.id)
                .order_by(FreeBook.order, Book.id)
                .all()
            )
            return [self.to_language(row.book, row) for row in rows]
