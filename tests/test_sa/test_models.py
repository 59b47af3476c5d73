# tests/test_sa/test_models.py
import pytest
from sqlalchemy.exc import IntegrityError
from core.sa.models import Base, Book, TranslatedBook, Summary, new_id


def test_expected_tables_exist():
    tables = set(Base.metadata.tables)
    for name in ('book', 'translated_book', 'summary', 'author', 'category', 'podcast', 'user'):
        assert name in tables


def test_new_id_is_unique():
    assert new_id() != new_id()
    assert len(new_id()) == 36


def test_one_translation_per_language(db_session, sample_book):
    """The (book, language) pair is unique at the table level"""
    db_session.add(TranslatedBook(book_id=sample_book.id, language='en', title='Again'))
    with pytest.raises(IntegrityError):
        db_session.flush()
    db_session.rollback()


def test_translations_cascade_with_book(db_session, sample_book):
    db_session.add(Summary(book_id=sample_book.id, title='Chapter 1', order=1))
    db_session.commit()

    db_session.delete(db_session.get(Book, sample_book.id))
    db_session.commit()

    assert db_session.query(TranslatedBook).count() == 0
    assert db_session.query(Summary).count() == 0


def test_timestamps_are_set(db_session, sample_book):
    book = db_session.get(Book, sample_book.id)
    assert book.created_at is not None
    assert book.updated_at is not None
