# tests/test_sa/test_repositories/test_user_repository.py
import pytest
from datetime import date
from core.errors import ConflictError, NotFoundError, ValidationError
from core.sa.models import BookMark, User, UserPreferences, UserProgress
from core.sa.repositories import PodcastRepository, UserRepository


@pytest.fixture
def user_repo(db_session):
    """Fixture to create a UserRepository instance."""
    return UserRepository(db_session)


@pytest.fixture
def sample_user(user_repo):
    """Fixture to create and return a sample user."""
    return user_repo.create_user('subject-1', {'name': 'Test User', 'email': 'test@example.com', 'dob': '1990-05-01'})


def test_create_user(user_repo, sample_user):
    assert sample_user['id'] == 'subject-1'
    assert sample_user['dob'] == '1990-05-01'
    user = user_repo.get_user('subject-1')
    assert user['preferences'] is None
    assert user['bookmarks'] == []


def test_create_user_twice(user_repo, sample_user):
    with pytest.raises(ConflictError):
        user_repo.create_user('subject-1', {'name': 'Again', 'email': 'again@example.com'})


def test_email_is_unique(user_repo, sample_user):
    with pytest.raises(ConflictError):
        user_repo.create_user('subject-2', {'name': 'Other', 'email': 'test@example.com'})


def test_create_user_requires_email(user_repo):
    with pytest.raises(ValidationError):
        user_repo.create_user('subject-3', {'name': 'No Mail'})


def test_invalid_dob(user_repo):
    with pytest.raises(ValidationError):
        user_repo.create_user('subject-4', {'name': 'Time', 'email': 't@example.com', 'dob': 'yesterday'})


def test_empty_dob_is_stored_as_null(user_repo, db_session):
    user = user_repo.create_user('subject-5', {'name': 'Blank', 'email': 'b@example.com', 'dob': ''})
    assert user['dob'] is None
    assert db_session.get(User, 'subject-5').dob is None


def test_update_user(user_repo, db_session, sample_user):
    user = user_repo.update_user('subject-1', {'name': 'Renamed', 'email': None})
    assert user['name'] == 'Renamed'
    assert user['email'] == 'test@example.com'
    assert db_session.get(User, 'subject-1').dob == date(1990, 5, 1)


def test_get_by_email(user_repo, sample_user):
    assert user_repo.get_by_email('test@example.com')['id'] == 'subject-1'
    with pytest.raises(NotFoundError):
        user_repo.get_by_email('nobody@example.com')


def test_list_users(user_repo, sample_user):
    user_repo.create_user('subject-2', {'name': 'Second', 'email': 'second@example.com'})
    page = user_repo.list_users('1')
    assert page.total == 2
    assert {user['id'] for user in page.items} == {'subject-1', 'subject-2'}


def test_preferences(user_repo, sample_user):
    created = user_repo.create_preferences('subject-1', {'app_language': 'hi'})
    assert created['app_language'] == 'hi'
    assert created['allow_reminders'] is True
    with pytest.raises(ConflictError):
        user_repo.create_preferences('subject-1', {})

    updated = user_repo.update_preferences('subject-1', {'author_preferences': ['a1']})
    assert updated['author_preferences'] == ['a1']
    assert updated['app_language'] == 'hi'


def test_preferences_language_must_be_supported(user_repo, sample_user):
    with pytest.raises(ValidationError):
        user_repo.create_preferences('subject-1', {'app_language': 'fr'})


def test_update_missing_preferences(user_repo, sample_user):
    with pytest.raises(NotFoundError):
        user_repo.update_preferences('subject-1', {'allow_reminders': False})


def test_progress_is_unique_per_book(user_repo, sample_user, sample_book):
    progress = user_repo.create_progress('subject-1', sample_book.id, {'last_chapter': 2})
    assert progress['last_chapter'] == 2
    assert progress['completed'] is False
    with pytest.raises(ConflictError):
        user_repo.create_progress('subject-1', sample_book.id, {})

    updated = user_repo.update_progress('subject-1', sample_book.id, {'completed': True})
    assert updated['completed'] is True
    assert updated['last_chapter'] == 2


def test_progress_for_unknown_book(user_repo, sample_user):
    with pytest.raises(NotFoundError):
        user_repo.create_progress('subject-1', 'missing', {})


def test_progress_rejects_negative_chapter(user_repo, sample_user, sample_book):
    with pytest.raises(ValidationError):
        user_repo.create_progress('subject-1', sample_book.id, {'last_chapter': -1})


def test_podcast_progress_upsert(user_repo, db_session, sample_user, sample_category):
    podcast = PodcastRepository(db_session).create(
        {'slug': 'pod', 'total_duration': 60, 'categories': [sample_category.id]},
        [{'language': 'en', 'title': 'Pod'}]
    )
    first = user_repo.save_podcast_progress('subject-1', podcast.id, {'last_position_seconds': 30})
    second = user_repo.save_podcast_progress('subject-1', podcast.id, {'completed': True})
    assert first['id'] == second['id']
    assert second['last_position_seconds'] == 30
    assert second['completed'] is True


def test_bookmarks(user_repo, sample_user, sample_book, make_book):
    other = make_book('other-book')
    user_repo.create_bookmark('subject-1', sample_book.id)
    user_repo.create_bookmark('subject-1', other.id)
    with pytest.raises(ConflictError):
        user_repo.create_bookmark('subject-1', sample_book.id)

    page = user_repo.list_bookmarks('subject-1')
    assert page.total == 2
    assert {item['book_id'] for item in page.items} == {sample_book.id, other.id}

    user_repo.delete_bookmark('subject-1', sample_book.id)
    assert [item['book_id'] for item in user_repo.get_user('subject-1')['bookmarks']] == [other.id]
    with pytest.raises(NotFoundError):
        user_repo.delete_bookmark('subject-1', sample_book.id)


def test_delete_user_removes_owned_rows(user_repo, db_session, sample_user, sample_book):
    user_repo.create_preferences('subject-1', {})
    user_repo.create_progress('subject-1', sample_book.id, {})
    user_repo.create_bookmark('subject-1', sample_book.id)

    user_repo.delete_user('subject-1')

    assert db_session.get(User, 'subject-1') is None
    assert db_session.query(BookMark).count() == 0
    assert db_session.query(UserProgress).count() == 0
    assert db_session.query(UserPreferences).count() == 0
    with pytest.raises(NotFoundError):
        user_repo.get_user('subject-1')
