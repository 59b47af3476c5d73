# tests/test_sa/test_api.py
import json
import pytest
from io import BytesIO
from PIL import Image
from core.sa.models import Book
from core.sa.repositories import SummaryRepository

API = '/api/v1'


def _png():
    buffer = BytesIO()
    Image.new('RGB', (1, 1)).save(buffer, format='PNG')
    return buffer.getvalue()


def test_health(client):
    assert client.get('/health').json() == {'status': 'ok'}
    assert client.get('/').status_code == 200


def test_create_author(client, storage):
    response = client.post(
        f"{API}/authors",
        data={'slug': 'ada', 'english': json.dumps({'name': 'Ada', 'description': 'Poet'}), 'hindi_name': 'अदा'},
        files={'image': ('ada.png', _png(), 'image/png')},
    )
    assert response.status_code == 201
    author_id = response.json()['id']
    assert len(storage.stored) == 1

    author = client.get(f"{API}/authors/{author_id}", params={'language': 'hi'}).json()
    assert author['name'] == 'अदा'
    assert author['image_url'].startswith('https://cdn.test/uploads/authors/')


def test_create_author_without_name(client):
    response = client.post(
        f"{API}/authors",
        data={'slug': 'nameless'},
        files={'image': ('n.png', _png(), 'image/png')},
    )
    assert response.status_code == 400
    assert response.json() == {'message': 'name is required'}


def test_multipart_required(client):
    response = client.post(f"{API}/authors", json={'slug': 'x'})
    assert response.status_code == 400


def test_oversized_upload_rejected(client, storage, limits):
    response = client.post(
        f"{API}/authors",
        data={'slug': 'big', 'english': json.dumps({'name': 'Big'})},
        files={'image': ('big.png', b'x' * (limits.max_file_bytes + 1), 'image/png')},
    )
    assert response.status_code == 413
    assert 'Maximum file size' in response.json()['message']
    assert storage.stored == []


def test_create_and_read_book(client, db_session, sample_author, sample_category):
    response = client.post(
        f"{API}/books",
        data={
            'slug': 'api-book',
            'totalDuration': '900',
            'authors': json.dumps([sample_author.id]),
            'categories': json.dumps([sample_category.id]),
            'english': json.dumps({'title': 'API Book', 'published': True}),
            'arabic': json.dumps({'title': 'كتاب'}),
        },
        files={'imageEnglish': ('cover.png', _png(), 'application/octet-stream')},
    )
    assert response.status_code == 201, response.text
    book_id = response.json()['id']

    book = client.get(f"{API}/books/{book_id}", params={'language': 'all'}).json()
    assert book['title'] == 'API Book'
    translations = {t['language']: t for t in book['translations']}
    assert set(translations) == {'en', 'ar'}
    assert translations['en']['cover_url'].startswith('https://cdn.test/uploads/book-images/english/')

    listing = client.get(f"{API}/books", params={'language': 'ar'}).json()
    assert listing['total'] == 1
    assert listing['items'][0]['title'] == 'كتاب'

    by_author = client.get(f"{API}/authors/{sample_author.id}/books").json()
    assert [item['id'] for item in by_author['items']] == [book_id]
    by_category = client.get(f"{API}/categories/fiction/books").json()
    assert by_category['total'] == 1
    assert client.get(f"{API}/books/slug/api-book").json()['id'] == book_id


def test_create_book_with_unknown_author(client, db_session, sample_category, storage):
    response = client.post(
        f"{API}/books",
        data={
            'slug': 'orphan',
            'totalDuration': '10',
            'authors': json.dumps(['missing']),
            'categories': json.dumps([sample_category.id]),
            'english': json.dumps({'title': 'Orphan'}),
        },
        files={'imageEnglish': ('cover.png', _png(), 'image/png')},
    )
    assert response.status_code == 400
    assert db_session.query(Book).filter(Book.slug == 'orphan').count() == 0


def test_update_book_merges_languages(client, sample_book):
    response = client.put(
        f"{API}/books/{sample_book.id}",
        data={'hindi': json.dumps({'description': 'विवरण'}), 'totalDuration': '1200'},
        files={'imageHindi': ('hi.png', _png(), 'image/png')},
    )
    assert response.status_code == 200, response.text
    book = response.json()['book']
    assert book['total_duration'] == 1200
    translations = {t['language']: t for t in book['translations']}
    assert translations['hi']['description'] == 'विवरण'
    assert translations['hi']['title'] == 'Test Book (hi)'
    assert translations['hi']['cover_url'].startswith('https://cdn.test/uploads/book-images/hindi/')
    assert translations['en']['title'] == 'Test Book (en)'


def test_search_and_pagination_params(client, make_book):
    for i in range(12):
        make_book(f"novel-{i:02d}")
    first = client.get(f"{API}/books/search", params={'query': 'NOVEL'}).json()
    assert first['total'] == 12
    assert len(first['items']) == 10
    second = client.get(f"{API}/books/search", params={'query': 'novel', 'page': '2'}).json()
    assert len(second['items']) == 2
    fallback = client.get(f"{API}/books", params={'page': 'abc'}).json()
    assert fallback['page'] == 1


def test_unknown_book(client):
    response = client.get(f"{API}/books/missing")
    assert response.status_code == 404
    assert response.json() == {'message': 'Book not found'}


def test_unsupported_language(client, sample_book):
    assert client.get(f"{API}/books/{sample_book.id}", params={'language': 'fr'}).status_code == 400


def test_summaries_endpoints(client, sample_book):
    body = {
        'summary': {'order': 1},
        'translatedSummary': [
            {'language': 'en', 'title': 'Chapter One', 'keyTakeaways': ['focus']},
        ],
    }
    created = client.post(f"{API}/books/{sample_book.id}/summary", json=body)
    assert created.status_code == 201, created.text
    summary_id = created.json()['id']

    updated = client.put(
        f"{API}/books/{sample_book.id}/summary/{summary_id}",
        json={'summary': {}, 'translatedSummary': [{'language': 'hi', 'title': 'अध्याय एक'}]},
    )
    assert [t['language'] for t in updated.json()['translations']] == ['en', 'hi']

    listed = client.get(f"{API}/books/{sample_book.id}/summaries").json()
    assert listed[0]['key_takeaways'] == ['focus']

    saved = client.post(f"{API}/save-tts", json={
        'summaryId': summary_id, 'audioUrl': 'https://cdn.test/a.mp3', 'language': 'en', 'type': 'summary',
    })
    assert saved.json()['translation']['audio_url'] == 'https://cdn.test/a.mp3'

    assert client.delete(f"{API}/books/{sample_book.id}/summaries/{summary_id}").status_code == 200
    assert client.get(f"{API}/books/{sample_book.id}/summaries").json() == []


def test_save_tts_unknown_summary(client):
    response = client.post(f"{API}/save-tts", json={'summaryId': 'missing', 'audioUrl': 'https://cdn.test/a.mp3', 'language': 'en'})
    assert response.status_code == 404


def test_free_books_endpoints(client, sample_book):
    added = client.post(f"{API}/books/free", json={'books': [{'bookId': sample_book.id, 'order': 1}]})
    assert added.status_code == 201
    assert added.json()['added'] == 1
    assert [book['id'] for book in client.get(f"{API}/books/free").json()] == [sample_book.id]
    assert client.delete(f"{API}/books/free/{sample_book.id}").status_code == 200
    assert client.get(f"{API}/books/free").json() == []


def test_book_collection_endpoints(client, make_book, storage):
    first = make_book('first')
    second = make_book('second')
    response = client.post(
        f"{API}/book-collections",
        data={
            'slug': 'staff-picks',
            'bookIds': json.dumps([second.id, 'gone', first.id]),
            'english': json.dumps({'title': 'Staff Picks'}),
        },
        files={'collectionImage': ('c.png', _png(), 'image/png')},
    )
    assert response.status_code == 201, response.text
    collection_id = response.json()['id']

    collection = client.get(f"{API}/book-collections/{collection_id}").json()
    assert collection['image_url'].startswith('https://cdn.test/uploads/collection-covers/')
    assert [member['slug'] for member in collection['members']] == ['second', 'first']

    by_ids = client.post(f"{API}/book-collections/by-ids", json={'ids': [collection_id]}).json()
    assert by_ids[0]['title'] == 'Staff Picks'


def test_category_requires_svg_upload(client):
    response = client.post(
        f"{API}/categories",
        data={'slug': 'art', 'english': json.dumps({'name': 'Art'})},
        files={
            'categorySVG': ('art.png', _png(), 'image/png'),
            'categoryImage': ('art.png', _png(), 'image/png'),
        },
    )
    assert response.status_code == 400
    assert response.json()['message'] == 'category_svg must be an .svg file'


def test_pages_endpoints(client):
    created = client.post(f"{API}/pages", json={
        'title': 'Home',
        'slug': 'home',
        'blocks': [
            {'type': 'multiCategory', 'viewType': 'grid', 'order': 2, 'data': {'categoryIds': ['c1']}},
            {'type': 'singleBookCollection', 'viewType': 'carousel', 'order': 1, 'data': {}},
        ],
    })
    assert created.status_code == 201, created.text
    page_id = created.json()['id']

    added = client.post(f"{API}/pages/collections", json={
        'pageId': page_id,
        'blocks': [{'type': 'singleCategory', 'viewType': 'grid', 'order': 3}],
    })
    assert added.status_code == 201

    page = client.get(f"{API}/pages/home").json()
    assert [block['order'] for block in page['blocks']] == [1, 2, 3]

    block_id = page['blocks'][0]['id']
    updated = client.put(f"{API}/pages/collections", json={'blocks': [{'id': block_id, 'order': 10}]})
    assert updated.json()[0]['order'] == 10

    assert client.get(f"{API}/pages").json()[0]['block_count'] == 3
    bad = client.post(f"{API}/pages", json={'title': 'Bad', 'slug': 'bad', 'blocks': [{'type': 'nope', 'viewType': 'grid', 'order': 1}]})
    assert bad.status_code == 400
    assert client.delete(f"{API}/pages/{page_id}").status_code == 200


def test_users_require_token(client):
    assert client.get(f"{API}/users/me").status_code == 401
    response = client.get(f"{API}/users/me", headers={'Authorization': 'Bearer not-valid'})
    assert response.status_code == 401


def test_user_flow(client, auth_headers, sample_book):
    created = client.post(f"{API}/users", json={'name': 'Reader', 'email': 'reader@example.com'}, headers=auth_headers)
    assert created.status_code == 201, created.text
    assert created.json()['id'] == 'user-1'

    assert client.post(f"{API}/users/preferences", json={'appLanguage': 'ar'}, headers=auth_headers).status_code == 201
    progress = client.post(f"{API}/users/progress", json={'bookId': sample_book.id, 'lastChapter': 3}, headers=auth_headers)
    assert progress.status_code == 201
    assert client.post(f"{API}/users/bookmarks/{sample_book.id}", headers=auth_headers).status_code == 201
    assert client.post(f"{API}/users/bookmarks/{sample_book.id}", headers=auth_headers).status_code == 409

    me = client.get(f"{API}/users/me", headers=auth_headers).json()
    assert me['preferences']['app_language'] == 'ar'
    assert me['progress'][0]['last_chapter'] == 3
    assert [bookmark['book_id'] for bookmark in me['bookmarks']] == [sample_book.id]

    assert client.get(f"{API}/users/bookmarks", headers=auth_headers).json()['total'] == 1
    assert client.delete(f"{API}/users/other-user", headers=auth_headers).status_code == 403
    assert client.delete(f"{API}/users/user-1", headers=auth_headers).status_code == 200
    assert client.get(f"{API}/users/me", headers=auth_headers).status_code == 404


def test_podcast_endpoints(client, sample_category):
    response = client.post(
        f"{API}/podcasts",
        data={
            'slug': 'talk',
            'totalDuration': '600',
            'published': 'true',
            'categories': json.dumps([sample_category.id]),
            'english': json.dumps({'title': 'Talk', 'summary': 'Short', 'keyTakeaways': ['a']}),
        },
        files={'audioFileEnglish': ('talk.mp3', b'ID3', 'audio/mpeg')},
    )
    assert response.status_code == 201, response.text
    podcast_id = response.json()['id']

    podcast = client.get(f"{API}/podcasts/{podcast_id}").json()
    assert podcast['published'] is True
    assert podcast['audio_url'].startswith('https://cdn.test/uploads/book-audio/english/')
    assert client.get(f"{API}/podcasts/{podcast_id}/summary").json() == {'summary': 'Short', 'key_takeaways': ['a']}
    assert client.get(f"{API}/podcasts-by-category-slug/fiction").json()['total'] == 1
    assert client.post(f"{API}/podcasts-by-category-ids", json={'ids': [sample_category.id]}).json()['total'] == 1


def test_huge_page_number_falls_back(client, sample_book):
    response = client.get(f"{API}/books", params={'page': '99999999999999999999'})
    assert response.status_code == 200
    assert response.json()['page'] == 1
    assert len(response.json()['items']) == 1


def test_storage_failure_on_read(client, monkeypatch):
    from sqlalchemy.exc import OperationalError
    from sqlalchemy.orm import Session

    def database_down(*args, **kwargs):
        raise OperationalError('SELECT 1', {}, Exception('db down'))

    monkeypatch.setattr(Session, 'query', database_down)
    response = client.get(f"{API}/books")
    assert response.status_code == 500
    assert response.json() == {'message': 'Failed to fetch books'}


def test_summary_update_through_other_book(client, sample_book, make_book):
    other = make_book('other-book')
    created = client.post(
        f"{API}/books/{sample_book.id}/summary",
        json={'summary': {'order': 1}, 'translatedSummary': [{'language': 'en', 'title': 'One'}]},
    )
    summary_id = created.json()['id']

    response = client.put(
        f"{API}/books/{other.id}/summary/{summary_id}",
        json={'summary': {}, 'translatedSummary': [{'language': 'en', 'title': 'Hijacked'}]},
    )
    assert response.status_code == 404
    listed = client.get(f"{API}/books/{sample_book.id}/summaries").json()
    assert listed[0]['title'] == 'One'


@pytest.mark.parametrize("method", ['put', 'patch'])
def test_update_podcast(client, sample_category, method):
    created = client.post(
        f"{API}/podcasts",
        data={
            'slug': 'show',
            'totalDuration': '300',
            'categories': json.dumps([sample_category.id]),
            'english': json.dumps({'title': 'Show'}),
        },
        files={'englishImage': ('show.png', _png(), 'image/png')},
    )
    assert created.status_code == 201, created.text
    podcast_id = created.json()['id']

    response = getattr(client, method)(
        f"{API}/podcasts/{podcast_id}",
        data={'totalDuration': '900', 'english': json.dumps({'title': 'Show Renamed'})},
        files={'englishImage': ('cover.png', _png(), 'image/png')},
    )
    assert response.status_code == 200, response.text
    assert response.json()['total_duration'] == 900
    assert response.json()['title'] == 'Show Renamed'
