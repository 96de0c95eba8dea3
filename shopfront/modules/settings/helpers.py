"""
Settings Helpers
================

Convenient typed readers for settings used throughout the storefront.
Each falls back to a sensible default when the setting is missing.
"""

from decimal import Decimal, InvalidOperation

from .defaults import PRODUCT_CARD_FIELDS
from .manager import settings_manager
from .models import SettingsCategory

_TRUE_VALUES = ('true', '1', 'yes', 'on')


def _as_bool(value, default=False):
    if value is None or value == '':
        return default
    return str(value).strip().lower() in _TRUE_VALUES


def _as_decimal(value, default):
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return Decimal(default)


def _as_int(value, default):
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return default


def _get(key, default=None, manager=None):
    value = (manager or settings_manager).get_setting(key)
    return value if value else default


def mask_secret(value):
    """Show only the last 4 characters of a secret"""
    if not value:
        return ''
    if len(value) <= 4:
        return '****'
    return '*' * (len(value) - 4) + value[-4:]


# ============================================
# General
# ============================================

def get_site_name(manager=None):
    return _get('site_name', 'Shopfront', manager)


def get_site_tagline(manager=None):
    return _get('site_tagline', '', manager)


def get_currency(manager=None):
    return _get('currency', 'AED', manager)


def get_timezone(manager=None):
    return _get('timezone', 'UTC', manager)


def get_logo_urls(manager=None):
    """Browser-ready logo URLs (signed when stored in object storage)"""
    manager = manager or settings_manager
    return {
        'logo_url': manager.get_media_setting_url('logo_url'),
        'logo_mobile_url': manager.get_media_setting_url('logo_mobile_url'),
    }


# ============================================
# Contact
# ============================================

def get_contact_info(manager=None):
    return {
        'email': _get('contact_email', '', manager),
        'phone': _get('contact_phone', '', manager),
        'address': _get('contact_address', '', manager),
        'business_hours': _get('business_hours', '', manager),
    }


def get_social_links(manager=None):
    """Non-empty social_* settings, keyed by network name"""
    contact = (manager or settings_manager).get_settings(SettingsCategory.CONTACT)
    return {
        key[len('social_'):]: value
        for key, value in contact.items()
        if key.startswith('social_') and value
    }


# ============================================
# SEO
# ============================================

def get_seo_defaults(manager=None):
    return {
        'title': _get('seo_title', get_site_name(manager), manager),
        'description': _get('seo_description', '', manager),
        'keywords': _get('seo_keywords', '', manager),
        'og_image': _get('seo_og_image', '', manager),
    }


# ============================================
# Email (SMTP)
# ============================================

def get_smtp_config(manager=None):
    """SMTP connection details; the password comes back decrypted"""
    return {
        'host': _get('email_smtp_host', '', manager),
        'port': _as_int(_get('email_smtp_port', None, manager), 587),
        'user': _get('email_smtp_user', '', manager),
        'password': _get('email_smtp_password', '', manager),
    }


# ============================================
# Shipping
# ============================================

def is_shipping_enabled(manager=None):
    return _as_bool(_get('shipping_enabled', None, manager), default=True)


def get_shipping_config(manager=None):
    return {
        'enabled': is_shipping_enabled(manager),
        'flat_rate': _as_decimal(_get('shipping_flat_rate', None, manager), '0'),
        'free_over': _as_decimal(_get('shipping_free_over', None, manager), '0'),
        'international': _as_bool(_get('shipping_international', None, manager)),
    }


# ============================================
# Product card display
# ============================================

PRODUCT_CARD_PREFIX = 'product_card_'


def get_product_card_settings(manager=None):
    """Which fields product cards show, e.g. {'showPrice': True}. Unset flags default to shown."""
    stored = (manager or settings_manager).get_settings(SettingsCategory.PRODUCT_CARD)
    return {
        field: _as_bool(stored.get(PRODUCT_CARD_PREFIX + field), default=True)
        for field in PRODUCT_CARD_FIELDS
    }
