# api/uploads.py
"""Upload form contracts and the mapping from form fields to manager input."""
from typing import Any, Dict, List, Tuple

from core.ingestion import (
    IngestedUpload, MultipartContract, parse_boolean, parse_id_list,
    parse_integer, parse_json, parse_text, translation_entries
)

LANGUAGE_OBJECTS = {
    'english': parse_json,
    'hindi': parse_json,
    'arabic': parse_json,
    'bahasa': parse_json,
    'translations': parse_json,
}

BOOK_CONTRACT = MultipartContract(
    fields=dict(
        LANGUAGE_OBJECTS,
        slug=parse_text,
        totalDuration=parse_integer,
        authors=parse_id_list,
        categories=parse_id_list,
    ),
    default_folder='uploads/books',
)

AUTHOR_CONTRACT = MultipartContract(
    fields=dict(LANGUAGE_OBJECTS, slug=parse_text),
    default_folder='uploads/authors',
)

CATEGORY_CONTRACT = MultipartContract(
    fields=dict(LANGUAGE_OBJECTS, slug=parse_text),
    default_folder='uploads/categories',
)

BOOK_COLLECTION_CONTRACT = MultipartContract(
    fields=dict(
        LANGUAGE_OBJECTS,
        slug=parse_text,
        englishTitle=parse_text,
        bookIds=parse_id_list,
    ),
    default_folder='uploads/collection-covers',
)

PODCAST_CONTRACT = MultipartContract(
    fields=dict(
        LANGUAGE_OBJECTS,
        slug=parse_text,
        totalDuration=parse_integer,
        published=parse_boolean,
        authors=parse_id_list,
        speakers=parse_id_list,
        guests=parse_id_list,
        categories=parse_id_list,
    ),
    default_folder='uploads/podcasts',
)

PODCAST_COLLECTION_CONTRACT = MultipartContract(
    fields=dict(
        LANGUAGE_OBJECTS,
        slug=parse_text,
        englishTitle=parse_text,
        englishName=parse_text,
        podcastIds=parse_id_list,
    ),
    default_folder='uploads/podcast-collections',
)

# Wire name -> (translation column, parser)
BOOK_TRANSLATION = {
    'title': ('title', None),
    'description': ('description', None),
    'published': ('published', parse_boolean),
    'audioEnabled': ('audio_enabled', parse_boolean),
}
NAME_TRANSLATION = {
    'name': ('name', None),
    'description': ('description', None),
}
TITLE_TRANSLATION = {
    'title': ('title', None),
    'description': ('description', None),
}
PODCAST_TRANSLATION = {
    'title': ('title', None),
    'summary': ('summary', None),
    'description': ('description', None),
    'keyTakeaways': ('key_takeaways', parse_json),
    'audioUrl': ('audio_url', None),
}


def _first_file(files: Dict[str, str], *names: str) -> Any:
    for name in names:
        if files.get(name):
            return files[name]
    return None


def book_input(upload: IngestedUpload) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    metadata, files = upload.metadata, upload.files
    canonical = {
        'title': metadata.get('english_title'),
        'slug': metadata.get('slug'),
        'total_duration': metadata.get('totalDuration'),
        'authors': metadata.get('authors'),
        'categories': metadata.get('categories'),
    }
    translations = translation_entries(
        metadata, files, BOOK_TRANSLATION,
        {'image{Lang}': 'cover_url', '{lang}_coverImage': 'cover_url'}
    )
    if files.get('coverUrl'):
        for entry in translations:
            entry.setdefault('cover_url', files['coverUrl'])
    return canonical, translations


def author_input(upload: IngestedUpload) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    metadata, files = upload.metadata, upload.files
    canonical = {
        'slug': metadata.get('slug'),
        'image_url': _first_file(files, 'imageUrl', 'image') or next(iter(files.values()), None),
    }
    return canonical, translation_entries(metadata, files, NAME_TRANSLATION)


def category_input(upload: IngestedUpload) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    metadata, files = upload.metadata, upload.files
    canonical = {
        'slug': metadata.get('slug'),
        'category_svg': files.get('categorySVG'),
        'category_image': files.get('categoryImage'),
        'mid_image': files.get('midImage'),
    }
    return canonical, translation_entries(metadata, files, NAME_TRANSLATION)


def book_collection_input(upload: IngestedUpload) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    metadata, files = upload.metadata, upload.files
    canonical = {
        'title': metadata.get('englishTitle'),
        'slug': metadata.get('slug'),
        'image_url': files.get('collectionImage'),
        'books': metadata.get('bookIds'),
    }
    return canonical, translation_entries(metadata, files, TITLE_TRANSLATION)


def podcast_input(upload: IngestedUpload) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    metadata, files = upload.metadata, upload.files
    canonical = {
        'slug': metadata.get('slug'),
        'image_url': _first_file(files, 'englishImage', 'imageUrl'),
        'total_duration': metadata.get('totalDuration'),
        'published': metadata.get('published'),
        'categories': metadata.get('categories'),
        'speakers': metadata.get('speakers', metadata.get('authors')),
        'guests': metadata.get('guests'),
    }
    translations = translation_entries(
        metadata, files, PODCAST_TRANSLATION,
        {'{lang}Image': 'image_url', 'audioFile{Lang}': 'audio_url'}
    )
    return canonical, translations


def podcast_collection_input(upload: IngestedUpload) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    metadata, files = upload.metadata, upload.files
    canonical = {
        'name': metadata.get('englishName') or metadata.get('englishTitle'),
        'slug': metadata.get('slug'),
        'image_url': _first_file(files, 'imageUrl', 'collectionImage') or next(iter(files.values()), None),
        'podcast_ids': metadata.get('podcastIds'),
    }
    return canonical, translation_entries(metadata, files, NAME_TRANSLATION)
