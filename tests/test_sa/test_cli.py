# tests/test_sa/test_cli.py
from click.testing import CliRunner
from cli.main import cli
from core.sa.database import Database
from core.sa.repositories import BookRepository


def test_db_init_and_seed(tmp_path):
    url = f"sqlite:///{tmp_path / 'seed.db'}"
    runner = CliRunner()

    result = runner.invoke(cli, ['db', 'init', '--database-url', url])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ['seed', '--database-url', url])
    assert result.exit_code == 0, result.output
    assert 'Created: 3' in result.output

    # Existing slugs are skipped
    result = runner.invoke(cli, ['seed', '--database-url', url])
    assert 'Created: 0' in result.output
    assert 'Skipped 3 items' in result.output

    session = Database(url).get_session()
    try:
        book = BookRepository(session).get_by_slug('atomic-habits', 'en')
        assert book['title'] == 'Atomic Habits'
        assert len(book['authors']) == 1
    finally:
        session.close()


def test_seed_from_file(tmp_path):
    url = f"sqlite:///{tmp_path / 'file.db'}"
    catalog = tmp_path / 'catalog.json'
    catalog.write_text('{"authors": [{"canonical": {"slug": "solo"}, "translations": [{"language": "en", "name": "Solo"}]}]}', encoding='utf-8')

    result = CliRunner().invoke(cli, ['seed', '--database-url', url, '--file', str(catalog)])
    assert result.exit_code == 0, result.output
    assert 'Created: 1' in result.output
