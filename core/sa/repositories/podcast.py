# core/sa/repositories/podcast.py
from typing import Any, Dict, List, Sequence

from sqlalchemy import func

from core.errors import NotFoundError, ValidationError
from core.sa.models import Author, Category, Podcast, TranslatedPodcast
from core.sa.pagination import PAGE_LIMIT, Page, paginate, parse_page
from .base import TranslatedRepository, english_title, read_guard, require_positive, require_text
from .relations import connect_links, set_links
from .translation import validate_language


class PodcastRepository(TranslatedRepository):
    model = Podcast
    translation_model = TranslatedPodcast
    parent_column = 'podcast_id'
    parent_relationship = 'podcast'
    canonical_fields = ('title', 'slug', 'image_url', 'total_duration', 'published')
    translation_fields = ('title', 'summary', 'description', 'image_url', 'key_takeaways', 'audio_url')
    label = 'Podcast'
    paginated_search = True

    def validate(self, canonical: Dict[str, Any], translations: List[Dict[str, Any]], creating: bool) -> None:
        for entry in translations:
            takeaways = entry.get('key_takeaways')
            if takeaways is not None and not isinstance(takeaways, list):
                raise ValidationError("key_takeaways must be a list")
        if creating:
            title = english_title(canonical, translations)
            if not title:
                raise ValidationError("English title is required")
            canonical['title'] = title
            require_text(canonical, 'slug')
            require_positive(canonical, 'total_duration')
            return
        if canonical.get('total_duration') is not None:
            require_positive(canonical, 'total_duration')

    def apply_relations(self, entity: Podcast, canonical: Dict[str, Any], creating: bool) -> None:
        link = connect_links if creating else set_links
        link(self.session, entity, 'categories', Category, canonical.get('categories'), 'category')
        link(self.session, entity, 'speakers', Author, canonical.get('speakers'), 'speaker')
        link(self.session, entity, 'guests', Author, canonical.get('guests'), 'guest')

    def relation_fields(self, entity: Podcast) -> Dict[str, Any]:
        return {
            'categories': [category.id for category in entity.categories],
            'speakers': [author.id for author in entity.speakers],
            'guests': [author.id for author in entity.guests],
        }

    def _filtered_page(self, condition, language: str, page: Any) -> Page:
        validate_language(language)
        page = parse_page(page)
        with read_guard(self.session, "Failed to fetch podcasts"):
            total = self.session.query(func.count(Podcast.id)).filter(condition).scalar() or 0
            query = self._translated_query(language).filter(condition).order_by(*self._ordering())
            items = [self.to_language(row.podcast, row) for row in paginate(query, page)]
        return Page(items=items, page=page, limit=PAGE_LIMIT, total=total)

    def get_by_category_slug(self, slug: str, language: str = 'en', page: Any = None) -> Page:
        return self._filtered_page(Podcast.categories.any(Category.slug == slug), language, page)

    def get_by_category_ids(self, category_ids: Sequence[str], language: str = 'en', page: Any = None) -> Page:
        return self._filtered_page(Podcast.categories.any(Category.id.in_(list(category_ids or []))), language, page)

    def get_summary(self, podcast_id: str, language: str = 'en') -> Dict[str, Any]:
        """Summary text and key takeaways of one translation"""
        validate_language(language)
        podcast = self.get_entity(podcast_id)
        with read_guard(self.session, "Failed to fetch podcast summary"):
            row = self.translations.get(podcast.id, language)
        if row is None:
            raise NotFoundError(f"Podcast has no '{language}' translation")
        return {'summary': row.summary, 'key_takeaways': row.key_takeaways or []}
