"""
Shopfront Core
==============

Shared infrastructure for Shopfront modules: configuration, the database
handle and the object storage client.
"""

from .config import Config
from .database import db, init_db
from .storage import ObjectStorage

__all__ = ['Config', 'db', 'init_db', 'ObjectStorage']
