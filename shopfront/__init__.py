"""
Shopfront - Storefront Settings for Flask
=========================================

Site settings for a product-catalogue / CMS storefront:
- Category-grouped key/value settings stored with Flask-SQLAlchemy
- In-process read-through cache with a 60 second TTL
- AES-256 encryption at rest for sensitive values (SMTP password)
- Logo settings stored as object keys and served as signed MinIO URLs

Usage:
    from shopfront import create_app
    from shopfront.modules.settings import get_setting, update_setting

    app = create_app()
    with app.app_context():
        update_setting('site_name', 'My Shop')
        get_setting('site_name')
"""

import os

from flask import Flask

from .core import Config, init_db
from .modules.settings import settings_manager

__version__ = '0.1.0'

__all__ = ['create_app', 'settings_manager']


def _setup_database_dir(app):
    uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
    if uri.startswith('sqlite:///'):
        db_dir = os.path.dirname(uri[len('sqlite:///'):])
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)


def create_app(config_object=None):
    """Build a Flask app with the settings database and manager wired up.

    ``config_object`` may be a dict of overrides or anything accepted by
    ``app.config.from_object``.
    """
    app = Flask(__name__)
    app.config.from_object(Config)

    if isinstance(config_object, dict):
        app.config.update(config_object)
    elif config_object is not None:
        app.config.from_object(config_object)

    _setup_database_dir(app)
    init_db(app)
    settings_manager.init_app(app)
    return app
