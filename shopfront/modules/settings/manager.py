"""
Settings Manager
================

Read-through cache over the settings store with write-through invalidation.

Cache keys:
    "<setting key>"   one decrypted value
    "<CATEGORY>"      {key: value} for one category
    "all"             {key: value} for every setting
    "media:<key>"     resolved (signed) URL for a media setting

Entries expire lazily: an entry older than the TTL is treated as a miss on
the next read and replaced. Nothing sweeps the map in the background.

Sensitive keys are encrypted before they are written and decrypted when they
are read into the cache, so cached values are always plaintext.
"""

import logging
import time
from typing import Any, Dict, List, NamedTuple, Optional

from ...core.config import Config
from ...core.storage import ObjectStorage, is_http_url
from .encryption import (
    DecryptionError,
    EncryptionConfigError,
    SettingsEncryption,
    get_sensitive_fields,
    is_sensitive_field,
)
from .media import is_media_setting_key, normalize_media_setting_value
from .models import SettingsCategory, parse_category
from .store import SettingsStore

logger = logging.getLogger(__name__)

CACHE_TTL = 60  # seconds
MEDIA_URL_EXPIRY = 3600  # seconds
ALL_SETTINGS_CACHE_KEY = 'all'
MEDIA_CACHE_PREFIX = 'media:'

EXTENSION_NAME = 'shopfront_settings'


class CacheEntry(NamedTuple):
    data: Any
    timestamp: float

    def is_valid(self, now, ttl):
        return now - self.timestamp < ttl


class SettingsManager:
    """
    Process-wide settings service.

    Collaborators can be injected for tests; anything not injected is built
    from Config, and rebuilt from app.config by init_app.

    Configuration (Flask app.config):
        SETTINGS_ENCRYPTION_KEY: 64 hex chars used for sensitive fields
        SETTINGS_CACHE_TTL: cache lifetime in seconds (default 60)
        MEDIA_URL_EXPIRY: signed URL lifetime in seconds (default 3600)
        MINIO_*: object storage connection, see core.config.Config
    """

    def __init__(self, app=None, store=None, storage=None, encryption=None,
                 clock=None, ttl=CACHE_TTL, media_url_expiry=MEDIA_URL_EXPIRY):
        self._cache: Dict[str, CacheEntry] = {}
        self._owns_storage = storage is None
        self._owns_encryption = encryption is None

        self.store = store if store is not None else SettingsStore()
        self.storage = storage if storage is not None else ObjectStorage.from_config({})
        self.encryption = encryption if encryption is not None else SettingsEncryption(Config.SETTINGS_ENCRYPTION_KEY)
        self.clock = clock or time.monotonic
        self.ttl = ttl
        self.media_url_expiry = media_url_expiry

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Configure from a Flask app and register the `flask settings` commands"""
        self.ttl = app.config.get('SETTINGS_CACHE_TTL', self.ttl)
        self.media_url_expiry = app.config.get('MEDIA_URL_EXPIRY', self.media_url_expiry)

        if self._owns_encryption:
            self.encryption = SettingsEncryption(
                app.config.get('SETTINGS_ENCRYPTION_KEY', Config.SETTINGS_ENCRYPTION_KEY)
            )
        if self._owns_storage:
            self.storage = ObjectStorage.from_config(app.config)

        app.extensions[EXTENSION_NAME] = self
        # Entries cached for a previously bound app may come from another database
        self.clear_cache()

        from .cli import settings_cli
        if 'settings' not in app.cli.commands:
            app.cli.add_command(settings_cli)

        logger.info(f"Settings manager initialised (cache TTL: {self.ttl}s)")

    # ------------------------------------------------------------------
    # Cache primitives
    # ------------------------------------------------------------------

    def _cached(self, cache_key):
        entry = self._cache.get(cache_key)
        if entry is not None and entry.is_valid(self.clock(), self.ttl):
            logger.debug(f"Settings cache hit: {cache_key}")
            return True, entry.data
        return False, None

    def _remember(self, cache_key, data):
        self._cache[cache_key] = CacheEntry(data, self.clock())

    def _invalidate(self, key, category):
        self._cache.pop(key, None)
        self._cache.pop(MEDIA_CACHE_PREFIX + key, None)
        if category is not None:
            self._cache.pop(parse_category(category).value, None)
        self._cache.pop(ALL_SETTINGS_CACHE_KEY, None)

    def clear_cache(self):
        """Drop every cached entry (values, categories, aggregates and media URLs)"""
        self._cache.clear()
        logger.info("Settings cache cleared")

    def get_cache_stats(self):
        """Physical cache contents, including entries that have expired"""
        return {
            'size': len(self._cache),
            'keys': list(self._cache.keys()),
        }

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_setting(self, key: str) -> Optional[str]:
        """
        Get a single setting value.

        Sensitive values are decrypted. Returns None when the key does not
        exist, when the store fails, or when the stored ciphertext cannot be
        decrypted. Missing keys are not cached.
        """
        hit, value = self._cached(key)
        if hit:
            return value

        try:
            setting = self.store.find_unique(key)
        except Exception as e:
            logger.error(f'Error fetching setting "{key}": {e}')
            return None

        if setting is None:
            return None

        value = setting.value
        if is_sensitive_field(key):
            try:
                value = self.encryption.decrypt_value(value)
            except DecryptionError as e:
                logger.error(f'Failed to decrypt setting "{key}": {e}')
                return None

        self._remember(key, value)
        return value

    def get_settings(self, category=None) -> Dict[str, str]:
        """
        Get all settings, or those of one category, as {key: value}.

        ``category`` may be a SettingsCategory, its name, or None / "all" for
        every setting. A field that fails to decrypt is left out; the rest
        are still returned.
        """
        if category is None or category == ALL_SETTINGS_CACHE_KEY:
            category = None
            cache_key = ALL_SETTINGS_CACHE_KEY
        else:
            category = parse_category(category)
            cache_key = category.value

        hit, cached = self._cached(cache_key)
        if hit:
            return dict(cached)

        try:
            rows = self.store.find_many(category)
        except Exception as e:
            logger.error(f"Error fetching settings ({cache_key}): {e}")
            return {}

        settings = {}
        for setting in rows:
            value = setting.value
            if is_sensitive_field(setting.key):
                try:
                    value = self.encryption.decrypt_value(value)
                except DecryptionError as e:
                    logger.error(f'Failed to decrypt setting "{setting.key}": {e}')
                    continue
            settings[setting.key] = value

        self._remember(cache_key, settings)
        return dict(settings)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _prepare_value(self, key, value):
        """Value as it should be persisted: encrypted or normalized as needed."""
        if is_sensitive_field(key):
            return self.encryption.encrypt_value(value)
        if is_media_setting_key(key):
            return normalize_media_setting_value(value, self.storage)
        return value

    def update_setting(self, key: str, value: str, actor: Optional[str] = None,
                       category=None) -> Optional[Dict[str, Any]]:
        """
        Create or update a single setting.

        ``category`` is only used when the key is new (default GENERAL); an
        existing setting keeps its category. Returns {key, value, category}
        with the plaintext value, or None if the write failed.

        Raises:
            EncryptionConfigError: the encryption key is missing or malformed.
        """
        try:
            stored_value = self._prepare_value(key, value)
            create_category = parse_category(category) if category else SettingsCategory.GENERAL
            setting = self.store.upsert(
                key,
                create={
                    'value': stored_value,
                    'category': create_category,
                    'updated_by': actor,
                },
                update={
                    'value': stored_value,
                    'updated_by': actor,
                },
            )
            result = {
                'key': setting.key,
                'value': value if is_sensitive_field(key) else stored_value,
                'category': parse_category(setting.category),
            }
        except EncryptionConfigError:
            raise
        except Exception as e:
            logger.error(f'Error updating setting "{key}": {e}')
            return None

        self._invalidate(key, result['category'])
        return result

    def update_settings(self, updates: Dict[str, str], actor: Optional[str] = None) -> Dict[str, Any]:
        """
        Apply several updates in one store transaction.

        A key that fails is recorded in ``errors`` and the rest carry on. If
        the transaction itself fails nothing is applied. The whole cache is
        cleared afterwards either way.

        Returns:
            {'success': bool, 'count': int} plus 'errors' when any occurred.
        """
        errors: List[str] = []
        count = 0

        try:
            with self.store.transaction() as tx:
                for key, value in updates.items():
                    try:
                        stored_value = self._prepare_value(key, value)
                        existing = tx.find_unique(key)
                        category = existing.category if existing is not None else SettingsCategory.GENERAL
                        tx.upsert(
                            key,
                            create={
                                'value': stored_value,
                                'category': category,
                                'updated_by': actor,
                            },
                            update={
                                'value': stored_value,
                                'updated_by': actor,
                            },
                        )
                        count += 1
                    except EncryptionConfigError:
                        raise
                    except Exception as e:
                        message = f'Failed to update "{key}": {e}'
                        errors.append(message)
                        logger.error(message)
        except EncryptionConfigError:
            raise
        except Exception as e:
            logger.error(f"Error in bulk settings update: {e}")
            return {
                'success': False,
                'count': 0,
                'errors': [str(e) or 'Transaction failed'],
            }
        finally:
            # Bulk writes are not tracked per key, so drop everything
            self.clear_cache()

        result = {'success': not errors, 'count': count}
        if errors:
            result['errors'] = errors
        return result

    # ------------------------------------------------------------------
    # Media settings
    # ------------------------------------------------------------------

    def get_media_setting_url(self, key: str, raw_value_override: Optional[str] = None) -> Optional[str]:
        """
        Resolve a media setting to a URL a browser can load.

        External URLs and app-relative paths pass through untouched; storage
        keys are signed for MEDIA_URL_EXPIRY seconds. Failures (including
        signing errors) give None, and that None is cached like any other
        result so a broken signer is not hit on every request.
        """
        cache_key = MEDIA_CACHE_PREFIX + key
        hit, cached = self._cached(cache_key)
        if hit:
            return cached

        raw = raw_value_override if raw_value_override is not None else self.get_setting(key)
        normalized = normalize_media_setting_value(raw, self.storage)

        if not normalized:
            url = None
        elif is_http_url(normalized):
            if self.storage.is_internal_url(normalized):
                # Normalization could not pull a key out of it; a raw storage
                # URL is not loadable from a browser
                logger.warning(f'Media setting "{key}" points at storage but has no object key')
                url = None
            else:
                url = normalized
        elif normalized.startswith('/'):
            # App-relative static path such as /images/logo.png
            url = normalized
        else:
            try:
                url = self.storage.get_presigned_url(normalized, self.media_url_expiry)
            except Exception as e:
                logger.error(f'Failed to sign media setting "{key}": {e}')
                url = None

        self._remember(cache_key, url)
        return url

    def get_media_previews(self, settings: Dict[str, str]) -> Dict[str, Optional[str]]:
        """Resolved URLs for every media key present in a settings mapping"""
        return {
            key: self.get_media_setting_url(key, value)
            for key, value in settings.items()
            if is_media_setting_key(key)
        }

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @staticmethod
    def is_sensitive_field(key):
        return is_sensitive_field(key)

    @staticmethod
    def get_sensitive_fields():
        return get_sensitive_fields()


# Convenience instance for easy importing
settings_manager = SettingsManager()


def get_setting(key):
    return settings_manager.get_setting(key)


def get_settings(category=None):
    return settings_manager.get_settings(category)


def update_setting(key, value, actor=None, category=None):
    return settings_manager.update_setting(key, value, actor, category)


def update_settings(updates, actor=None):
    return settings_manager.update_settings(updates, actor)


def get_media_setting_url(key, raw_value_override=None):
    return settings_manager.get_media_setting_url(key, raw_value_override)


def get_media_previews(settings):
    return settings_manager.get_media_previews(settings)


def clear_cache():
    settings_manager.clear_cache()


def get_cache_stats():
    return settings_manager.get_cache_stats()
