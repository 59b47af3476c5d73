# cli/utils.py
import click
from typing import Dict, List


class ProgressTracker:
    """Tracks created and skipped records during a seed run"""

    def __init__(self, verbose: bool = False):
        self.processed = 0
        self.created = 0
        self.skipped: List[Dict[str, str]] = []
        self.verbose = verbose

    def add_skipped(self, kind: str, name: str, reason: str, color: str = 'yellow'):
        """Add a skipped item to the tracking"""
        self.skipped.append({
            'kind': kind,
            'name': name,
            'reason': reason,
            'color': color
        })

    def increment_processed(self):
        self.processed += 1

    def increment_created(self):
        self.created += 1

    def print_results(self):
        """Print the results of the operation"""
        click.echo("\n" + click.style("Results:", fg='blue'))
        click.echo(click.style("Processed: ", fg='blue') + click.style(str(self.processed), fg='cyan'))
        click.echo(click.style("Created: ", fg='blue') + click.style(str(self.created), fg='green'))

        if self.skipped and self.verbose:
            click.echo("\n" + click.style("Skipped items:", fg='yellow'))
            for skip_info in self.skipped:
                click.echo(click.style(f"{skip_info['kind']} {skip_info['name']}: {skip_info['reason']}", fg=skip_info['color']))
        elif self.skipped:
            click.echo(click.style(f"\nSkipped {len(self.skipped)} items. ", fg='yellow') +
                       click.style("Use --verbose to see details.", fg='blue'))
