# core/sa/repositories/author.py
from typing import Any, Dict, List

from core.errors import ValidationError
from core.sa.models import Author, TranslatedAuthor
from .base import TranslatedRepository, english_title


class AuthorRepository(TranslatedRepository):
    model = Author
    translation_model = TranslatedAuthor
    parent_column = 'author_id'
    parent_relationship = 'author'
    canonical_fields = ('name', 'slug', 'image_url')
    translation_fields = ('name', 'description')
    search_field = 'name'
    required_translation_fields = ('name',)
    label = 'Author'

    def validate(self, canonical: Dict[str, Any], translations: List[Dict[str, Any]], creating: bool) -> None:
        if not creating:
            return
        name = english_title(canonical, translations, 'name')
        if not name:
            raise ValidationError("name is required")
        canonical['name'] = name
