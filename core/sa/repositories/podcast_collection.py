# core/sa/repositories/podcast_collection.py
from typing import Any, Dict, List

from core.errors import ValidationError
from core.sa.models import ALL_LANGUAGES, PodcastCollection, TranslatedPodcastCollection
from .base import TranslatedRepository, english_title, require_text
from .book_collection import MEMBER_FALLBACK_LANGUAGE, validate_id_list
from .podcast import PodcastRepository


class PodcastCollectionRepository(TranslatedRepository):
    """Podcast channels holding an ordered, unenforced ``podcast_ids`` list"""

    model = PodcastCollection
    translation_model = TranslatedPodcastCollection
    parent_column = 'podcast_collection_id'
    parent_relationship = 'podcast_collection'
    canonical_fields = ('name', 'slug', 'image_url', 'podcast_ids')
    translation_fields = ('name', 'description')
    search_field = 'name'
    required_translation_fields = ('name',)
    label = 'Podcast collection'

    def validate(self, canonical: Dict[str, Any], translations: List[Dict[str, Any]], creating: bool) -> None:
        validate_id_list(canonical, 'podcast_ids')
        if not creating:
            return
        name = english_title(canonical, translations, 'name')
        if not name:
            raise ValidationError("name is required")
        canonical['name'] = name
        require_text(canonical, 'slug')
        canonical.setdefault('podcast_ids', [])

    def get_with_podcasts(self, collection_id: str, language: str = 'en') -> Dict[str, Any]:
        collection = self.get_by_id(collection_id, language)
        member_language = MEMBER_FALLBACK_LANGUAGE if language == ALL_LANGUAGES else language
        collection['members'] = PodcastRepository(self.session).get_many_by_ids(
            collection['podcast_ids'], member_language
        )
        return collection
