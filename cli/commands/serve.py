# cli/commands/serve.py
import os

import click
import uvicorn


@click.command()
@click.option('--host', default=lambda: os.getenv('HOST', 'localhost'), help='Interface to bind (HOST)')
@click.option('--port', default=lambda: int(os.getenv('PORT', '4000')), type=int, help='Port to listen on (PORT)')
@click.option('--reload/--no-reload', default=False, help='Restart on code changes')
def serve(host: str, port: int, reload: bool):
    """Run the API server"""
    click.echo(click.style("Serving on ", fg='blue') + click.style(f"http://{host}:{port}", fg='cyan'))
    uvicorn.run("api.main:create_app", factory=True, host=host, port=port, reload=reload)
