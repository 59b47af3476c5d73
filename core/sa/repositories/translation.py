# core/sa/repositories/translation.py
from typing import Any, Dict, Iterable, List, Optional, Type

from sqlalchemy.orm import Session

from core.errors import ValidationError
from core.sa.models import SUPPORTED_LANGUAGES


def validate_language(language: Optional[str]) -> str:
    if not language or language not in SUPPORTED_LANGUAGES:
        raise ValidationError(
            f"Unsupported language '{language}'. Must be one of: {', '.join(SUPPORTED_LANGUAGES)}"
        )
    return language


class TranslationStore:
    """Per-language child rows of a canonical record.

    Rows are keyed by ``(parent_id, language)`` and there is at most one row
    per pair. The store never commits; callers run it inside the same
    transaction as their canonical write.
    """

    def __init__(self, session: Session, model: Type[Any], parent_column: str, fields: Iterable[str], required: Iterable[str] = ()):
        """
        Args:
            session: SQLAlchemy session
            model: Translation model class, e.g. TranslatedBook
            parent_column: Name of the foreign key column, e.g. 'book_id'
            fields: Translatable columns an entry may carry
            required: Columns a new row must be given
        """
        self.session = session
        self.model = model
        self.parent_column = parent_column
        self.fields = tuple(fields)
        self.required = tuple(required)

    def _clean(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: value
            for key, value in entry.items()
            if key in self.fields and value is not None
        }

    def _check_required(self, language: str, values: Dict[str, Any]) -> None:
        for field in self.required:
            if values.get(field) in (None, ''):
                raise ValidationError(f"{field} is required for the '{language}' translation")

    def create_many(self, parent_id: str, entries: List[Dict[str, Any]]) -> List[Any]:
        """Insert one row per supplied language for a freshly created parent.

        Raises:
            ValidationError: If a language is unsupported or appears twice, or a
                row lacks a required column
        """
        seen = set()
        rows = []
        for entry in entries:
            language = validate_language(entry.get('language'))
            if language in seen:
                raise ValidationError(f"Duplicate translation for language '{language}'")
            seen.add(language)
            values = self._clean(entry)
            self._check_required(language, values)
            row = self.model(language=language, **values)
            setattr(row, self.parent_column, parent_id)
            rows.append(row)
        self.session.add_all(rows)
        self.session.flush()
        return rows

    def upsert_many(self, parent_id: str, entries: List[Dict[str, Any]]) -> List[Any]:
        """Merge the supplied languages into the stored rows.

        Existing rows get a partial update with only the fields present in
        the entry. Missing languages are inserted. Languages absent from
        ``entries`` are left alone.
        """
        rows = []
        for entry in entries:
            language = validate_language(entry.get('language'))
            values = self._clean(entry)
            row = self.get(parent_id, language)
            if row is None:
                self._check_required(language, values)
                row = self.model(language=language, **values)
                setattr(row, self.parent_column, parent_id)
                self.session.add(row)
            else:
                for key, value in values.items():
                    setattr(row, key, value)
            # Flush per language so a repeated language in one call patches the row just written
            self.session.flush()
            rows.append(row)
        return rows

    def get(self, parent_id: str, language: str) -> Optional[Any]:
        return (
            self.session.query(self.model)
            .filter(
                getattr(self.model, self.parent_column) == parent_id,
                self.model.language == language
            )
            .first()
        )

    def all_for(self, parent_id: str) -> List[Any]:
        return (
            self.session.query(self.model)
            .filter(getattr(self.model, self.parent_column) == parent_id)
            .order_by(self.model.language)
            .all()
        )
