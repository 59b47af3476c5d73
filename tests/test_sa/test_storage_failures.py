# tests/test_sa/test_storage_failures.py
import pytest
from unittest.mock import patch
from sqlalchemy.exc import IntegrityError, OperationalError
from core.errors import OperationFailedError, TransactionTimeoutError
from core.sa.database import transaction
from core.sa.models import Author, Book
from core.sa.repositories import BookRepository, PageRepository, UserRepository


def _database_down(*args, **kwargs):
    raise OperationalError('SELECT 1', {}, Exception('db down'))


def _constraint_failed(*args, **kwargs):
    raise IntegrityError('INSERT INTO book', {}, Exception('constraint failed'))


def test_failed_write_reports_fixed_message(db_session, sample_author, sample_category, monkeypatch):
    """A rejected flush becomes OperationFailedError and nothing is kept"""
    repo = BookRepository(db_session)
    monkeypatch.setattr(db_session, 'flush', _constraint_failed)
    with pytest.raises(OperationFailedError) as exc_info:
        repo.create(
            {'slug': 'broken', 'total_duration': 60, 'authors': [sample_author.id], 'categories': [sample_category.id]},
            [{'language': 'en', 'title': 'Broken'}]
        )
    assert exc_info.value.message == "Failed to create book"
    monkeypatch.undo()
    assert db_session.query(Book).filter(Book.slug == 'broken').count() == 0


def test_transaction_times_out_and_rolls_back(db_session):
    with patch('core.sa.database.monotonic', side_effect=[0.0, 5.0]):
        with pytest.raises(TransactionTimeoutError):
            with transaction(db_session, timeout=0.0001):
                db_session.add(Author(name='Late', slug='late'))
    assert db_session.query(Author).filter(Author.slug == 'late').count() == 0


def test_transaction_within_deadline_commits(db_session):
    with patch('core.sa.database.monotonic', side_effect=[0.0, 0.5]):
        with transaction(db_session, timeout=1.0):
            db_session.add(Author(name='On Time', slug='on-time'))
    assert db_session.query(Author).filter(Author.slug == 'on-time').count() == 1


@pytest.mark.parametrize("read, message", [
    (lambda repo: repo.list(1, 'en'), "Failed to fetch books"),
    (lambda repo: repo.list(1, 'all'), "Failed to fetch books"),
    (lambda repo: repo.search('x', 'en'), "Failed to search books"),
    (lambda repo: repo.get_many_by_ids(['a'], 'en'), "Failed to fetch books"),
    (lambda repo: repo.get_by_author('a', 'en'), "Failed to fetch books"),
    (lambda repo: repo.list_free_books('en'), "Failed to fetch free books"),
    (lambda repo: repo.get_by_slug('x', 'en'), "Failed to fetch book"),
])
def test_book_reads_report_storage_failures(db_session, monkeypatch, read, message):
    repo = BookRepository(db_session)
    monkeypatch.setattr(db_session, 'query', _database_down)
    with pytest.raises(OperationFailedError) as exc_info:
        read(repo)
    assert exc_info.value.message == message


def test_get_by_id_reports_storage_failure(db_session, monkeypatch):
    monkeypatch.setattr(db_session, 'get', _database_down)
    with pytest.raises(OperationFailedError) as exc_info:
        BookRepository(db_session).get_by_id('any', 'en')
    assert exc_info.value.message == "Failed to fetch book"


def test_page_and_user_reads_report_storage_failures(db_session, monkeypatch):
    monkeypatch.setattr(db_session, 'query', _database_down)
    with pytest.raises(OperationFailedError, match="Failed to fetch pages"):
        PageRepository(db_session).list_pages()
    with pytest.raises(OperationFailedError, match="Failed to fetch users"):
        UserRepository(db_session).list_users()
    with pytest.raises(OperationFailedError, match="Failed to fetch bookmarks"):
        UserRepository(db_session).list_bookmarks('user-1')


def test_session_usable_after_failed_read(db_session, sample_book, monkeypatch):
    repo = BookRepository(db_session)
    monkeypatch.setattr(db_session, 'query', _database_down)
    with pytest.raises(OperationFailedError):
        repo.list(1, 'en')
    monkeypatch.undo()
    assert repo.list(1, 'en').total == 1
