"""
Settings CLI
============

Registered on the app by SettingsManager.init_app:

    flask settings seed [--overwrite]
    flask settings clear-cache
    flask settings cache-stats
    flask settings generate-key
    flask settings get KEY [--reveal]
    flask settings set KEY VALUE [--category C] [--actor A]
"""

import click
from flask import current_app
from flask.cli import AppGroup

from .defaults import seed_settings
from .encryption import generate_key
from .helpers import mask_secret
from .manager import EXTENSION_NAME
from .models import SettingsCategory

settings_cli = AppGroup('settings', help='Manage site settings and the settings cache.')


def _manager():
    return current_app.extensions[EXTENSION_NAME]


@settings_cli.command('seed')
@click.option('--overwrite', is_flag=True, help='Reset existing settings to their defaults.')
def seed_command(overwrite):
    """Create any missing default settings."""
    counts = seed_settings(_manager(), overwrite=overwrite)
    click.echo(
        f"Created: {counts['created']}  Updated: {counts['updated']}  "
        f"Skipped: {counts['skipped']}  Failed: {counts['failed']}"
    )


@settings_cli.command('clear-cache')
def clear_cache_command():
    """Drop all cached settings in this process."""
    _manager().clear_cache()
    click.echo('Settings cache cleared.')


@settings_cli.command('cache-stats')
def cache_stats_command():
    """Show what is currently held in the settings cache."""
    stats = _manager().get_cache_stats()
    click.echo(f"Entries: {stats['size']}")
    for key in stats['keys']:
        click.echo(f"  {key}")


@settings_cli.command('generate-key')
def generate_key_command():
    """Print a new SETTINGS_ENCRYPTION_KEY."""
    click.echo(generate_key())


@settings_cli.command('get')
@click.argument('key')
@click.option('--reveal', is_flag=True, help='Print sensitive values in full instead of masked.')
def get_command(key, reveal):
    manager = _manager()
    value = manager.get_setting(key)
    if value is None:
        raise click.ClickException(f'Setting "{key}" not found')
    if manager.is_sensitive_field(key) and not reveal:
        value = mask_secret(value)
    click.echo(value)


@settings_cli.command('set')
@click.argument('key')
@click.argument('value')
@click.option('--category', type=click.Choice([c.value for c in SettingsCategory], case_sensitive=False),
              default=None, help='Category for a new setting (default GENERAL).')
@click.option('--actor', default='cli', help='Recorded as updated_by.')
def set_command(key, value, category, actor):
    result = _manager().update_setting(key, value, actor=actor, category=category)
    if result is None:
        raise click.ClickException(f'Failed to update "{key}"')
    click.echo(f"{result['key']} updated ({result['category'].value})")
