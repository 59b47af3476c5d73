# tests/test_sa/conftest.py
import os
import sys
import pytest
from pathlib import Path

# Add project root to Python path
project_root = str(Path(__file__).parent.parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from sqlalchemy.orm import Session
from core.auth import Identity, TokenVerifier
from core.errors import AuthenticationError
from core.ingestion import IngestionLimits
from core.sa.database import Database
from core.sa.models import Base
from core.sa.repositories import AuthorRepository, BookRepository, CategoryRepository
from core.storage import ObjectStorage, StoredObject


class FakeStorage(ObjectStorage):
    """Records every object it is asked to store"""

    def __init__(self, configured: bool = True):
        self.configured = configured
        self.stored = []
        self.deleted = []

    def is_configured(self) -> bool:
        return self.configured

    def store(self, data: bytes, file_name: str, content_type: str, folder: str) -> StoredObject:
        path = f"{folder}/{len(self.stored)}_{file_name}"
        self.stored.append({'path': path, 'data': data, 'content_type': content_type, 'folder': folder})
        return StoredObject(public_url=f"https://cdn.test/{path}", path=path)

    def delete(self, path: str) -> bool:
        self.deleted.append(path)
        return True


class FakeVerifier(TokenVerifier):
    """Accepts tokens of the form ``token-<subject id>``"""

    def verify(self, token: str) -> Identity:
        if not token or not token.startswith('token-'):
            raise AuthenticationError("Invalid or expired token")
        return Identity(subject_id=token[len('token-'):], claims={})


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory):
    """Create a temporary directory for the test database."""
    test_dir = tmp_path_factory.mktemp("test_db")
    return str(test_dir / "test_readverse.db")


@pytest.fixture(scope="session")
def database(test_db_path):
    """Create a test database instance"""
    db = Database(f"sqlite:///{test_db_path}")

    # Drop all tables and recreate schema
    Base.metadata.drop_all(db.engine)
    Base.metadata.create_all(db.engine)

    yield db

    db.engine.dispose()
    try:
        os.remove(test_db_path)
    except OSError:
        pass


@pytest.fixture(scope="function")
def db_session(database):
    """Create a new database session for a test"""
    session: Session = database.get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def cleanup_db(db_session):
    """Clean up database tables before each test"""
    # Children before parents
    for table in reversed(Base.metadata.sorted_tables):
        db_session.execute(table.delete())
    db_session.commit()
    yield
    db_session.rollback()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def unconfigured_storage():
    return FakeStorage(configured=False)


@pytest.fixture
def limits():
    """Small ceilings so size checks can be exercised with tiny payloads"""
    return IngestionLimits(max_file_bytes=1024, max_request_bytes=4096, max_files=3)


@pytest.fixture
def sample_author(db_session):
    """Create a sample author with English and Hindi translations."""
    return AuthorRepository(db_session).create(
        {'slug': 'test-author', 'image_url': 'https://cdn.test/authors/a.jpg'},
        [
            {'language': 'en', 'name': 'Test Author', 'description': 'An author'},
            {'language': 'hi', 'name': 'परीक्षण लेखक'},
        ]
    )


@pytest.fixture
def sample_category(db_session):
    """Create a sample category."""
    return CategoryRepository(db_session).create(
        {
            'slug': 'fiction',
            'category_svg': 'https://cdn.test/categories/fiction.svg',
            'category_image': 'https://cdn.test/categories/fiction.png',
        },
        [{'language': 'en', 'name': 'Fiction'}]
    )


@pytest.fixture
def make_book(db_session, sample_author, sample_category):
    """Factory that creates books linked to the sample author and category."""
    repo = BookRepository(db_session)

    def _make(slug, title=None, languages=('en',), **canonical):
        values = {
            'slug': slug,
            'total_duration': 600,
            'authors': [sample_author.id],
            'categories': [sample_category.id],
        }
        values.update(canonical)
        translations = [
            {'language': language, 'title': f"{title or slug} ({language})", 'published': True}
            for language in languages
        ]
        return repo.create(values, translations)

    return _make


@pytest.fixture
def sample_book(make_book):
    return make_book('test-book', 'Test Book', languages=('en', 'hi'))


@pytest.fixture
def client(database, storage, limits):
    """API client wired to the test database, fake storage and fake verifier"""
    from fastapi.testclient import TestClient
    from api.main import create_app

    app = create_app(database=database, storage=storage, verifier=FakeVerifier(), limits=limits)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {'Authorization': 'Bearer token-user-1'}
