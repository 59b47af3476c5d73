# core/sa/repositories/base.py
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Type, Union
import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager, selectinload

from core.errors import ConflictError, ContentError, NotFoundError, OperationFailedError, ValidationError
from core.sa.database import transaction
from core.sa.models import ALL_LANGUAGES
from core.sa.pagination import PAGE_LIMIT, Page, paginate, parse_page
from .relations import resolve_entities, resolve_members
from .translation import TranslationStore, validate_language

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(session: Session, failure_message: str) -> Iterator[Session]:
    """Atomic write that surfaces storage failures as ``OperationFailedError``.

    Content errors raised inside the block (validation, not found, timeout)
    roll the unit back and propagate unchanged.
    """
    try:
        with transaction(session):
            yield session
    except ContentError:
        raise
    except SQLAlchemyError:
        logger.exception(failure_message)
        raise OperationFailedError(failure_message)


@contextmanager
def read_guard(session: Session, failure_message: str) -> Iterator[Session]:
    """Read that surfaces storage failures as ``OperationFailedError``.

    The session is rolled back so the request can still be answered.
    """
    try:
        yield session
    except SQLAlchemyError:
        logger.exception(failure_message)
        session.rollback()
        raise OperationFailedError(failure_message)


def english_title(canonical: Dict[str, Any], translations: List[Dict[str, Any]], field: str = 'title') -> Optional[str]:
    """Canonical title, falling back to the English translation's title"""
    if canonical.get(field):
        return canonical[field]
    for entry in translations:
        if entry.get('language') == 'en' and entry.get(field):
            return entry[field]
    return None


def require_text(values: Dict[str, Any], field: str, label: Optional[str] = None) -> str:
    value = values.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label or field} is required")
    return value


def require_positive(values: Dict[str, Any], field: str, label: Optional[str] = None) -> int:
    value = values.get(field)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{label or field} must be a positive integer")
    return value


class TranslatedRepository:
    """Canonical record plus per-language translation rows.

    Subclasses describe their entity with class attributes and override the
    ``validate`` and ``apply_relations`` hooks. Reads come in two shapes: a
    single language flattens the translation onto the canonical fields, and
    ``'all'`` returns the canonical fields with a ``translations`` list.
    """

    model: Type[Any]
    translation_model: Type[Any]
    parent_column: str
    parent_relationship: str
    canonical_fields: Tuple[str, ...] = ()
    translation_fields: Tuple[str, ...] = ()
    required_translation_fields: Tuple[str, ...] = ('title',)
    search_field = 'title'
    label = 'Entity'
    paginated_search = False

    def __init__(self, session: Session):
        self.session = session
        self.translations = TranslationStore(
            session, self.translation_model, self.parent_column,
            self.translation_fields, self.required_translation_fields
        )

    @property
    def noun(self) -> str:
        return self.label.lower()

    @property
    def plural_noun(self) -> str:
        noun = self.noun
        return noun[:-1] + 'ies' if noun.endswith('y') else noun + 's'

    # Hooks

    def validate(self, canonical: Dict[str, Any], translations: List[Dict[str, Any]], creating: bool) -> None:
        """Raise ``ValidationError`` for bad input before anything is written"""

    def apply_relations(self, entity: Any, canonical: Dict[str, Any], creating: bool) -> None:
        """Write many-to-many links. Creates connect, updates replace."""

    def relation_fields(self, entity: Any) -> Dict[str, Any]:
        return {}

    # Serialization

    def canonical_dict(self, entity: Any) -> Dict[str, Any]:
        data = {'id': entity.id}
        for field in self.canonical_fields:
            data[field] = getattr(entity, field)
        data.update(self.relation_fields(entity))
        data['created_at'] = entity.created_at
        data['updated_at'] = entity.updated_at
        return data

    def translation_dict(self, row: Any) -> Dict[str, Any]:
        data = {'language': row.language}
        for field in self.translation_fields:
            data[field] = getattr(row, field)
        return data

    def to_language(self, entity: Any, row: Any) -> Dict[str, Any]:
        """Flatten one translation onto the canonical fields.

        Translated values win over canonical ones of the same name unless the
        translation leaves them empty.
        """
        data = self.canonical_dict(entity)
        for key, value in self.translation_dict(row).items():
            if value is not None or key not in data:
                data[key] = value
        return data

    def to_all_languages(self, entity: Any, rows: Optional[Sequence[Any]] = None) -> Dict[str, Any]:
        with read_guard(self.session, f"Failed to fetch {self.noun}"):
            if rows is None:
                rows = self.translations.all_for(entity.id)
            data = self.canonical_dict(entity)
        data['translations'] = [
            self.translation_dict(row) for row in sorted(rows, key=lambda r: r.language)
        ]
        return data

    def serialize(self, entity: Any, language: str) -> Dict[str, Any]:
        """Shape an already loaded entity for ``language``"""
        if language == ALL_LANGUAGES:
            return self.to_all_languages(entity)
        row = self.translations.get(entity.id, validate_language(language))
        if row is None:
            raise NotFoundError(f"{self.label} has no '{language}' translation")
        return self.to_language(entity, row)

    # Writes

    def _ensure_slug_free(self, slug: Optional[str], exclude_id: Optional[str] = None) -> None:
        if not slug or not hasattr(self.model, 'slug'):
            return
        query = self.session.query(self.model.id).filter(self.model.slug == slug)
        if exclude_id:
            query = query.filter(self.model.id != exclude_id)
        if query.first() is not None:
            raise ConflictError(f"{self.label} with slug '{slug}' already exists")

    def create(self, canonical: Dict[str, Any], translations: Optional[List[Dict[str, Any]]] = None) -> Any:
        """Insert the canonical record, its links and its translations as one unit.

        Args:
            canonical: Canonical field values plus relationship id lists
            translations: One dict per language, each with a ``language`` key

        Returns:
            The created entity

        Raises:
            ValidationError: On missing fields, bad languages or unknown related ids
            ConflictError: If the slug is taken
            OperationFailedError: If the database rejects the write
        """
        translations = list(translations or [])
        self.validate(canonical, translations, True)
        with unit_of_work(self.session, f"Failed to create {self.noun}"):
            self._ensure_slug_free(canonical.get('slug'))
            entity = self.model(**{
                field: canonical[field]
                for field in self.canonical_fields
                if canonical.get(field) is not None
            })
            self.session.add(entity)
            self.session.flush()
            self.apply_relations(entity, canonical, True)
            self.translations.create_many(entity.id, translations)
        logger.info("Created %s %s with %d translation(s)", self.noun, entity.id, len(translations))
        return entity

    def update(self, entity_id: str, canonical: Dict[str, Any], translations: Optional[List[Dict[str, Any]]] = None) -> Any:
        """Patch the canonical record and merge translations.

        Canonical fields that are missing or ``None`` keep their stored value.
        Relationship id lists replace the stored links. Translation entries are
        upserted per language and other languages are left alone. A new
        English title or name is copied to the canonical record unless one is
        given explicitly.
        """
        entity = self.get_entity(entity_id)
        translations = list(translations or [])
        self.validate(canonical, translations, False)
        if self.search_field in self.canonical_fields:
            title = english_title(canonical, translations, self.search_field)
            if title:
                canonical[self.search_field] = title
        with unit_of_work(self.session, f"Failed to update {self.noun}"):
            if canonical.get('slug') is not None:
                self._ensure_slug_free(canonical['slug'], exclude_id=entity.id)
            for field in self.canonical_fields:
                if canonical.get(field) is not None:
                    setattr(entity, field, canonical[field])
            self.apply_relations(entity, canonical, False)
            self.translations.upsert_many(entity.id, translations)
        logger.info("Updated %s %s", self.noun, entity.id)
        return entity

    def delete_by_id(self, entity_id: str) -> None:
        """Hard delete. Translation and link rows go with it; ordered id
        lists in collections that mention the entity are left as they are."""
        entity = self.get_entity(entity_id)
        with unit_of_work(self.session, f"Failed to delete {self.noun}"):
            self.session.delete(entity)
        logger.info("Deleted %s %s", self.noun, entity_id)

    # Reads

    def get_entity(self, entity_id: str) -> Any:
        with read_guard(self.session, f"Failed to fetch {self.noun}"):
            entity = self.session.get(self.model, entity_id) if entity_id else None
        if entity is None:
            raise NotFoundError(f"{self.label} not found")
        return entity

    def get_by_id(self, entity_id: str, language: str = 'en') -> Dict[str, Any]:
        if language != ALL_LANGUAGES:
            validate_language(language)
        entity = self.get_entity(entity_id)
        with read_guard(self.session, f"Failed to fetch {self.noun}"):
            return self.serialize(entity, language)

    def _translated_query(self, language: str):
        parent = getattr(self.translation_model, self.parent_relationship)
        return (
            self.session.query(self.translation_model)
            .join(parent)
            .options(contains_eager(parent))
            .filter(self.translation_model.language == language)
        )

    def _ordering(self):
        return (self.model.created_at.desc(), self.model.id)

    def count(self) -> int:
        return self.session.query(func.count(self.model.id)).scalar() or 0

    def list(self, page: Any = None, language: str = 'en') -> Page:
        """One page of entities in ``language``.

        ``total`` is the number of canonical records, not the number that have
        a translation in ``language``.
        """
        page = parse_page(page)
        if language != ALL_LANGUAGES:
            validate_language(language)
        with read_guard(self.session, f"Failed to fetch {self.plural_noun}"):
            total = self.count()
            if language == ALL_LANGUAGES:
                query = (
                    self.session.query(self.model)
                    .options(selectinload(self.model.translations))
                    .order_by(*self._ordering())
                )
                items = [
                    self.to_all_languages(entity, entity.translations)
                    for entity in paginate(query, page)
                ]
            else:
                query = self._translated_query(language).order_by(*self._ordering())
                items = [
                    self.to_language(getattr(row, self.parent_relationship), row)
                    for row in paginate(query, page)
                ]
        return Page(items=items, page=page, limit=PAGE_LIMIT, total=total)

    def search(self, query: str, language: str = 'en', page: Any = None) -> Union[Page, List[Dict[str, Any]]]:
        """Case-insensitive substring match on the translated title or name.

        With ``'all'`` the canonical title or name is matched instead.
        """
        pattern = f"%{query or ''}%"
        if language != ALL_LANGUAGES:
            validate_language(language)
        with read_guard(self.session, f"Failed to search {self.plural_noun}"):
            if language == ALL_LANGUAGES:
                base = (
                    self.session.query(self.model)
                    .options(selectinload(self.model.translations))
                    .filter(getattr(self.model, self.search_field).ilike(pattern))
                    .order_by(*self._ordering())
                )
                shape = lambda entity: self.to_all_languages(entity, entity.translations)
            else:
                base = (
                    self._translated_query(language)
                    .filter(getattr(self.translation_model, self.search_field).ilike(pattern))
                    .order_by(*self._ordering())
                )
                shape = lambda row: self.to_language(getattr(row, self.parent_relationship), row)

            if not self.paginated_search:
                return [shape(item) for item in base.all()]
            page = parse_page(page)
            total = base.order_by(None).count()
            return Page(items=[shape(item) for item in paginate(base, page)], page=page, limit=PAGE_LIMIT, total=total)

    def get_many_by_ids(self, ids: Sequence[str], language: str = 'en') -> List[Dict[str, Any]]:
        """Batch lookup that keeps the order of ``ids`` and skips missing ones"""
        if language != ALL_LANGUAGES:
            validate_language(language)
        with read_guard(self.session, f"Failed to fetch {self.plural_noun}"):
            if language == ALL_LANGUAGES:
                entities = resolve_entities(
                    self.session, self.model, ids, (selectinload(self.model.translations),)
                )
                return [self.to_all_languages(entity, entity.translations) for entity in entities]
            rows = resolve_members(
                self.session,
                self.translation_model,
                self.parent_column,
                ids,
                language,
                (selectinload(getattr(self.translation_model, self.parent_relationship)),)
            )
            return [self.to_language(getattr(row, self.parent_relationship), row) for row in rows]
