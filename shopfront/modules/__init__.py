"""
Shopfront Modules
=================

Feature modules built on the shared core.
"""

__all__ = ['settings']
