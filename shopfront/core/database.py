"""
Database handle shared by all Shopfront modules.

Models import ``db`` from here; the app binds it with ``db.init_app(app)``.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def init_db(app):
    """Bind the database to the app and create any missing tables."""
    db.init_app(app)
    with app.app_context():
        # Import models so their tables are registered on the metadata
        from ..modules.settings import models  # noqa: F401
        db.create_all()
