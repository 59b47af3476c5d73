# cli/commands/seed.py
from typing import Any, Dict
import json

import click
from core.errors import ContentError
from core.sa.database import Database
from core.sa.models import Author, Category
from core.sa.repositories import AuthorRepository, BookRepository, CategoryRepository
from ..utils import ProgressTracker

# Books name their authors and categories by slug
SAMPLE_CATALOG: Dict[str, Any] = {
    'authors': [
        {
            'canonical': {'slug': 'james-clear', 'image_url': 'https://example.com/authors/james-clear.jpg'},
            'translations': [
                {'language': 'en', 'name': 'James Clear', 'description': 'Writer on habits and decision making.'},
                {'language': 'hi', 'name': 'जेम्स क्लियर'},
            ],
        },
    ],
    'categories': [
        {
            'canonical': {
                'slug': 'self-growth',
                'category_svg': 'https://example.com/categories/self-growth.svg',
                'category_image': 'https://example.com/categories/self-growth.png',
            },
            'translations': [
                {'language': 'en', 'name': 'Self Growth'},
                {'language': 'ar', 'name': 'تطوير الذات'},
            ],
        },
    ],
    'books': [
        {
            'canonical': {
                'slug': 'atomic-habits',
                'total_duration': 1800,
                'authors': ['james-clear'],
                'categories': ['self-growth'],
            },
            'translations': [
                {'language': 'en', 'title': 'Atomic Habits', 'description': 'Tiny changes, remarkable results.', 'published': True},
                {'language': 'id', 'title': 'Atomic Habits', 'published': False},
            ],
        },
    ],
}


def _ids_for_slugs(session, model, slugs):
    rows = session.query(model.id, model.slug).filter(model.slug.in_(slugs)).all()
    by_slug = {row.slug: row.id for row in rows}
    return [by_slug.get(slug, slug) for slug in slugs]


def _exists(session, model, slug) -> bool:
    return session.query(model.id).filter(model.slug == slug).first() is not None


@click.command()
@click.option('--file', 'path', default=None, type=click.Path(exists=True, dir_okay=False), help='JSON catalog to load instead of the built-in sample')
@click.option('--database-url', default=None, help='Overrides DATABASE_URL')
@click.option('--verbose/--no-verbose', default=False, help='Show skipped records')
def seed(path: str, database_url: str, verbose: bool):
    """Load authors, categories and books into the catalog

    Records whose slug already exists are skipped, so the command can be
    run more than once.

    Example:
        readverse seed
        readverse seed --file catalog.json --verbose
    """
    catalog = SAMPLE_CATALOG
    if path:
        with open(path, encoding='utf-8') as f:
            catalog = json.load(f)

    database = Database(database_url)
    database.init_db()
    session = database.get_session()
    tracker = ProgressTracker(verbose)

    steps = [
        ('author', 'authors', AuthorRepository),
        ('category', 'categories', CategoryRepository),
        ('book', 'books', BookRepository),
    ]
    try:
        for kind, key, repository_class in steps:
            repo = repository_class(session)
            for record in catalog.get(key, []):
                tracker.increment_processed()
                canonical = dict(record.get('canonical', {}))
                slug = canonical.get('slug', '?')
                if _exists(session, repo.model, slug):
                    tracker.add_skipped(kind, slug, 'slug already exists')
                    continue
                if kind == 'book':
                    canonical['authors'] = _ids_for_slugs(session, Author, canonical.get('authors', []))
                    canonical['categories'] = _ids_for_slugs(session, Category, canonical.get('categories', []))
                try:
                    repo.create(canonical, record.get('translations', []))
                    tracker.increment_created()
                except ContentError as e:
                    tracker.add_skipped(kind, slug, e.message, color='red')
    finally:
        session.close()

    tracker.print_results()
