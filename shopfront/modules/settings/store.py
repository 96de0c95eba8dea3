"""
Settings Store
==============

Persistent key/value store behind the settings cache, backed by
Flask-SQLAlchemy. The manager only talks to it through find_unique,
find_many, upsert and transaction, so tests can swap in any object with
the same methods.
"""

from contextlib import contextmanager

from ...core.database import db
from .models import Setting


class SettingsStore:

    def __init__(self, session=None, autocommit=True):
        self._session = session
        self.autocommit = autocommit

    @property
    def session(self):
        # Resolved per call so the store follows the active app context
        return self._session if self._session is not None else db.session

    def find_unique(self, key):
        return self.session.execute(
            db.select(Setting).filter_by(key=key)
        ).scalar_one_or_none()

    def find_many(self, category=None):
        query = db.select(Setting).order_by(Setting.key)
        if category is not None:
            query = query.filter_by(category=category)
        return list(self.session.execute(query).scalars())

    def upsert(self, key, create, update):
        """Create the row with ``create`` fields, or apply ``update`` fields to it.

        Outside a transaction the change is committed straight away.
        """
        session = self.session
        try:
            setting = self.find_unique(key)
            if setting is None:
                setting = Setting(key=key, **create)
                session.add(setting)
            else:
                for field, value in update.items():
                    setattr(setting, field, value)
            if self.autocommit:
                session.commit()
        except Exception:
            if self.autocommit:
                session.rollback()
            raise
        return setting

    @contextmanager
    def transaction(self):
        """Stage upserts on one session and commit them together.

        Yields a store that does not commit per upsert. Any exception
        escaping the block rolls the whole batch back.
        """
        session = self.session
        staged = SettingsStore(session, autocommit=False)
        try:
            yield staged
            session.commit()
        except Exception:
            session.rollback()
            raise
