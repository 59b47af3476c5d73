# core/sa/repositories/category.py
from typing import Any, Dict, List
import re

from core.errors import NotFoundError, ValidationError
from core.sa.models import Category, TranslatedCategory
from .base import TranslatedRepository, english_title, read_guard, require_text

SVG_URL = re.compile(r'\.svg($|\?)', re.IGNORECASE)


class CategoryRepository(TranslatedRepository):
    model = Category
    translation_model = TranslatedCategory
    parent_column = 'category_id'
    parent_relationship = 'category'
    canonical_fields = ('name', 'slug', 'category_svg', 'category_image', 'mid_image')
    translation_fields = ('name', 'description')
    search_field = 'name'
    required_translation_fields = ('name',)
    label = 'Category'

    def validate(self, canonical: Dict[str, Any], translations: List[Dict[str, Any]], creating: bool) -> None:
        svg = canonical.get('category_svg')
        if creating and not svg:
            raise ValidationError("category_svg is required and must be an SVG file")
        if svg is not None and not SVG_URL.search(str(svg)):
            raise ValidationError("category_svg must be an .svg file")
        if not creating:
            return
        name = english_title(canonical, translations, 'name')
        if not name:
            raise ValidationError("name is required")
        canonical['name'] = name
        require_text(canonical, 'slug')
        require_text(canonical, 'category_image')

    def get_by_slug(self, slug: str, language: str = 'en') -> Dict[str, Any]:
        with read_guard(self.session, "Failed to fetch category"):
            category_id = self.session.query(Category.id).filter(Category.slug == slug).scalar()
        if category_id is None:
            raise NotFoundError("Category not found")
        return self.get_by_id(category_id, language)
