# cli/main.py
import logging
import os

import click
from .commands.db import db
from .commands.seed import seed
from .commands.serve import serve


@click.group()
def cli():
    """Read Verse API CLI"""
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())


cli.add_command(db)
cli.add_command(seed)
cli.add_command(serve)


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
