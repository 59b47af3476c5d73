# tests/test_sa/test_pagination.py
import pytest
from core.errors import ValidationError
from core.sa.pagination import MAX_PAGE, PAGE_LIMIT, Page, page_offset, parse_page
from core.sa.repositories import AuthorRepository, BookRepository


@pytest.mark.parametrize("raw, expected", [
    (None, 1),
    ("", 1),
    ("abc", 1),
    ("0", 1),
    ("-4", 1),
    ("3", 3),
    (7, 7),
    ("99999999999999999999", 1),
    (MAX_PAGE, MAX_PAGE),
    (MAX_PAGE + 1, 1),
    (float("inf"), 1),
])
def test_parse_page(raw, expected):
    assert parse_page(raw) == expected


def test_page_offset():
    assert page_offset(1) == 0
    assert page_offset(3) == 20
    assert page_offset(2, limit=5) == 5


def test_page_to_dict():
    assert Page(items=[1], page=2, total=11).to_dict() == {'items': [1], 'page': 2, 'limit': PAGE_LIMIT, 'total': 11}


@pytest.fixture
def twenty_five_books(make_book):
    """25 English books, the first five also in Hindi"""
    return [
        make_book(f"book-{i:02d}", languages=('en', 'hi') if i < 5 else ('en',))
        for i in range(25)
    ]


def test_third_page_skips_twenty(db_session, twenty_five_books):
    page = BookRepository(db_session).list('3', 'en')
    assert page.page == 3
    assert page.limit == 10
    assert page.total == 25
    assert len(page.items) == 5


def test_total_counts_canonical_rows(db_session, twenty_five_books):
    """A language with fewer translations still reports every canonical record"""
    page = BookRepository(db_session).list(1, 'hi')
    assert page.total == 25
    assert len(page.items) == 5
    assert all(item['language'] == 'hi' for item in page.items)


def test_invalid_page_falls_back_to_first(db_session, twenty_five_books):
    page = BookRepository(db_session).list('not-a-number', 'en')
    assert page.page == 1
    assert len(page.items) == 10


def test_pages_do_not_overlap(db_session, twenty_five_books):
    repo = BookRepository(db_session)
    seen = []
    for number in (1, 2, 3):
        seen.extend(item['id'] for item in repo.list(number, 'en').items)
    assert len(seen) == 25
    assert len(set(seen)) == 25


def test_list_all_languages(db_session, twenty_five_books):
    page = BookRepository(db_session).list(1, 'all')
    assert page.total == 25
    assert len(page.items) == 10
    assert all('translations' in item for item in page.items)


def test_list_unsupported_language(db_session):
    with pytest.raises(ValidationError):
        AuthorRepository(db_session).list(1, 'xx')


def test_huge_page_lists_first_page(make_book, db_session):
    make_book('only-book')
    result = BookRepository(db_session).list('99999999999999999999', 'en')
    assert result.page == 1
    assert len(result.items) == 1
