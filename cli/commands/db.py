# cli/commands/db.py
import click
from core.sa.database import Database


@click.group()
def db():
    """Database schema commands"""
    pass


@db.command()
@click.option('--database-url', default=None, help='Overrides DATABASE_URL')
def init(database_url: str):
    """Create all tables that do not exist yet"""
    database = Database(database_url)
    database.init_db()
    click.echo(click.style("Database initialized: ", fg='green') + click.style(database.connection_string, fg='cyan'))


@db.command()
@click.option('--database-url', default=None, help='Overrides DATABASE_URL')
@click.confirmation_option(prompt='This deletes every table and all data. Continue?')
def drop(database_url: str):
    """Drop all tables"""
    database = Database(database_url)
    database.drop_db()
    click.echo(click.style("Database dropped: ", fg='yellow') + click.style(database.connection_string, fg='cyan'))
