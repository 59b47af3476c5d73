# tests/test_sa/test_repositories/test_page_repository.py
import pytest
from core.errors import ConflictError, NotFoundError, ValidationError
from core.sa.models import DynamicPage, DynamicPageBlock
from core.sa.repositories import PageRepository


@pytest.fixture
def page_repo(db_session):
    return PageRepository(db_session)


def _block(order, block_type='singleBookCollection', view_type='carousel', **extra):
    block = {'type': block_type, 'view_type': view_type, 'order': order, 'data': {'collectionId': f"c{order}"}}
    block.update(extra)
    return block


def test_create_page_with_blocks(page_repo):
    page = page_repo.create_page_with_blocks('Home', 'home', [
        _block(2, 'multiCategory', 'grid'),
        _block(1, metadata={'en': {'title': 'Picks'}}),
    ])
    assert page['slug'] == 'home'
    assert [block['order'] for block in page['blocks']] == [1, 2]
    assert page['blocks'][0]['metadata'] == {'en': {'title': 'Picks'}}


def test_invalid_block_creates_nothing(page_repo, db_session):
    with pytest.raises(ValidationError):
        page_repo.create_page_with_blocks('Home', 'home', [_block(1), _block(2, 'carouselOfDoom')])
    assert db_session.query(DynamicPage).count() == 0


def test_page_slug_conflict(page_repo):
    page_repo.create_page('Home', 'home')
    with pytest.raises(ConflictError):
        page_repo.create_page('Other', 'home')


def test_get_by_slug_orders_blocks(page_repo):
    page = page_repo.create_page('Home', 'home')
    page_repo.add_blocks(page['id'], [_block(3), _block(1)])
    page_repo.add_blocks(page['id'], [_block(2, view_type='grid')])
    result = page_repo.get_by_slug('home')
    assert [block['order'] for block in result['blocks']] == [1, 2, 3]
    with pytest.raises(NotFoundError):
        page_repo.get_by_slug('missing')


def test_add_blocks_to_missing_page(page_repo):
    with pytest.raises(NotFoundError):
        page_repo.add_blocks('missing', [_block(1)])


def test_update_blocks_is_atomic(page_repo, db_session):
    page = page_repo.create_page_with_blocks('Home', 'home', [_block(1), _block(2)])
    first, second = page['blocks']

    with pytest.raises(NotFoundError):
        page_repo.update_blocks([{'id': first['id'], 'order': 9}, {'id': 'missing', 'order': 1}])
    assert db_session.get(DynamicPageBlock, first['id']).order == 1

    updated = page_repo.update_blocks([{'id': first['id'], 'order': 5, 'view_type': 'grid'}])
    assert updated[0]['order'] == 5
    assert updated[0]['view_type'] == 'grid'
    assert updated[0]['type'] == 'singleBookCollection'


def test_list_pages_counts_blocks(page_repo):
    page_repo.create_page_with_blocks('Home', 'home', [_block(1), _block(2)])
    page_repo.create_page('Empty', 'empty')
    counts = {page['slug']: page['block_count'] for page in page_repo.list_pages()}
    assert counts == {'home': 2, 'empty': 0}


def test_update_and_delete_page(page_repo, db_session):
    page = page_repo.create_page_with_blocks('Home', 'home', [_block(1)])
    assert page_repo.update_page(page['id'], title='Start')['title'] == 'Start'

    page_repo.delete_page(page['id'])
    assert db_session.query(DynamicPageBlock).count() == 0
    with pytest.raises(NotFoundError):
        page_repo.delete_page(page['id'])
