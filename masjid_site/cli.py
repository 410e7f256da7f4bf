# masjid_site/cli.py

import click
from flask import current_app

from .services.site_runtime import get_runtime


def register_cli(app):
    @app.cli.command('countdown')
    @click.option('--ticks', default=None, type=int, help="Stop after this many one-second ticks.")
    def countdown(ticks):
        """Prints the next prayer and broadcast countdowns once per second."""
        runtime = get_runtime()
        for now in runtime.time_source.ticks(limit=ticks):
            tick = runtime.snapshot(now)
            next_prayer = tick['nextPrayer']
            if next_prayer is None:
                line = f"{now:%H:%M:%S}  next prayer unavailable"
            else:
                suffix = ' (tomorrow)' if next_prayer.is_tomorrow else ''
                line = f"{now:%H:%M:%S}  {next_prayer.key}{suffix} in {tick['countdown']}"
            broadcast = tick['broadcast']
            if broadcast is not None:
                line += f"  |  {broadcast.name or 'Broadcast'} in {broadcast.countdown}"
            click.echo(line)

    @app.cli.command('reload-content')
    def reload_content():
        """Bulk-fetches all public content and refreshes the site-config cache."""
        runtime = get_runtime()
        if runtime.reload_content():
            click.echo("Content reloaded.")
        else:
            current_app.logger.error("Content reload failed.")
            raise click.ClickException("Content reload failed; see the log for details.")
