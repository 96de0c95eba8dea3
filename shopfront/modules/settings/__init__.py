"""
Settings Module
===============

Cached access to site settings. Sensitive values are encrypted at rest and
logo settings resolve to signed storage URLs.
"""

from .encryption import (
    DecryptionError,
    EncryptionConfigError,
    EncryptionError,
    SettingsEncryption,
    get_sensitive_fields,
    is_sensitive_field,
)
from .manager import (
    SettingsManager,
    clear_cache,
    get_cache_stats,
    get_media_previews,
    get_media_setting_url,
    get_setting,
    get_settings,
    settings_manager,
    update_setting,
    update_settings,
)
from .media import is_media_setting_key, normalize_media_setting_value
from .models import Setting, SettingsCategory, parse_category
from .store import SettingsStore

__all__ = [
    'DecryptionError',
    'EncryptionConfigError',
    'EncryptionError',
    'Setting',
    'SettingsCategory',
    'SettingsEncryption',
    'SettingsManager',
    'SettingsStore',
    'clear_cache',
    'get_cache_stats',
    'get_media_previews',
    'get_media_setting_url',
    'get_sensitive_fields',
    'get_setting',
    'get_settings',
    'is_media_setting_key',
    'is_sensitive_field',
    'normalize_media_setting_value',
    'parse_category',
    'settings_manager',
    'update_setting',
    'update_settings',
]
