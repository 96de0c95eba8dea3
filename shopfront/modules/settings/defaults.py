"""
Default Settings
================

The standard settings catalogue, grouped by category, and an idempotent
seeder that writes any missing defaults through the settings manager (so
sensitive defaults are encrypted and logo defaults normalized like any
other write).
"""

import logging

from .encryption import is_sensitive_field
from .manager import settings_manager
from .models import SettingsCategory

logger = logging.getLogger(__name__)

PRODUCT_CARD_FIELDS = (
    'showPartNumber',
    'showSku',
    'showBrand',
    'showOrigin',
    'showCategory',
    'showDescription',
    'showTags',
    'showPrice',
    'showComparePrice',
    'showDiscountBadge',
    'showStockStatus',
)

# Define the standard settings schema
SETTINGS_SCHEMA = {
    SettingsCategory.GENERAL: {
        'label': 'General',
        'settings': [
            {'key': 'site_name', 'label': 'Site Name', 'type': 'text', 'default': 'Shopfront'},
            {'key': 'site_tagline', 'label': 'Tagline', 'type': 'text', 'default': 'Quality parts and accessories'},
            {'key': 'logo_url', 'label': 'Logo', 'type': 'media', 'default': '/images/logo.png'},
            {'key': 'logo_mobile_url', 'label': 'Mobile Logo', 'type': 'media', 'default': ''},
            {'key': 'timezone', 'label': 'Timezone', 'type': 'text', 'default': 'Asia/Dubai'},
            {'key': 'currency', 'label': 'Currency', 'type': 'text', 'default': 'AED'},
        ]
    },
    SettingsCategory.CONTACT: {
        'label': 'Contact',
        'settings': [
            {'key': 'contact_email', 'label': 'Email', 'type': 'email', 'default': 'info@example.com'},
            {'key': 'contact_phone', 'label': 'Phone', 'type': 'text', 'default': ''},
            {'key': 'contact_address', 'label': 'Address', 'type': 'text', 'default': ''},
            {'key': 'business_hours', 'label': 'Business Hours', 'type': 'text', 'default': 'Sunday - Thursday: 9:00 AM - 6:00 PM'},
            {'key': 'social_facebook', 'label': 'Facebook', 'type': 'url', 'default': ''},
            {'key': 'social_instagram', 'label': 'Instagram', 'type': 'url', 'default': ''},
            {'key': 'social_twitter', 'label': 'Twitter', 'type': 'url', 'default': ''},
            {'key': 'social_linkedin', 'label': 'LinkedIn', 'type': 'url', 'default': ''},
        ]
    },
    SettingsCategory.SEO: {
        'label': 'SEO',
        'settings': [
            {'key': 'seo_title', 'label': 'Default Title', 'type': 'text', 'default': ''},
            {'key': 'seo_description', 'label': 'Meta Description', 'type': 'text', 'default': ''},
            {'key': 'seo_keywords', 'label': 'Keywords', 'type': 'text', 'default': ''},
            {'key': 'seo_og_image', 'label': 'Open Graph Image', 'type': 'text', 'default': '/images/og-image.jpg'},
            {'key': 'google_analytics_id', 'label': 'Google Analytics ID', 'type': 'text', 'default': ''},
            {'key': 'google_tag_manager_id', 'label': 'Google Tag Manager ID', 'type': 'text', 'default': ''},
        ]
    },
    SettingsCategory.FAVICON: {
        'label': 'Favicons',
        'settings': [
            {'key': 'favicon_ico', 'label': 'favicon.ico', 'type': 'text', 'default': '/favicon.ico'},
            {'key': 'favicon_16', 'label': '16x16', 'type': 'text', 'default': ''},
            {'key': 'favicon_32', 'label': '32x32', 'type': 'text', 'default': ''},
            {'key': 'favicon_192', 'label': '192x192', 'type': 'text', 'default': ''},
            {'key': 'apple_touch_icon', 'label': 'Apple Touch Icon', 'type': 'text', 'default': ''},
        ]
    },
    SettingsCategory.EMAIL: {
        'label': 'Email (SMTP)',
        'settings': [
            {'key': 'email_smtp_host', 'label': 'SMTP Host', 'type': 'text', 'default': ''},
            {'key': 'email_smtp_port', 'label': 'SMTP Port', 'type': 'number', 'default': '587'},
            {'key': 'email_smtp_user', 'label': 'SMTP User', 'type': 'text', 'default': ''},
            {'key': 'email_smtp_password', 'label': 'SMTP Password', 'type': 'password', 'default': ''},
        ]
    },
    # No payment settings are seeded
    SettingsCategory.PAYMENT: {
        'label': 'Payment',
        'settings': []
    },
    SettingsCategory.SHIPPING: {
        'label': 'Shipping',
        'settings': [
            {'key': 'shipping_enabled', 'label': 'Shipping Enabled', 'type': 'boolean', 'default': 'true'},
            {'key': 'shipping_flat_rate', 'label': 'Flat Rate', 'type': 'number', 'default': '50.00'},
            {'key': 'shipping_free_over', 'label': 'Free Shipping Over', 'type': 'number', 'default': '500.00'},
            {'key': 'shipping_international', 'label': 'International Shipping', 'type': 'boolean', 'default': 'false'},
        ]
    },
    SettingsCategory.PRODUCT_CARD: {
        'label': 'Product Card',
        'settings': [
            {'key': 'product_card_' + field, 'label': field, 'type': 'boolean', 'default': 'true'}
            for field in PRODUCT_CARD_FIELDS
        ]
    },
}

# Flat (key, value, category) view of the schema
DEFAULT_SETTINGS = [
    (item['key'], item['default'], category)
    for category, group in SETTINGS_SCHEMA.items()
    for item in group['settings']
]


def seed_settings(manager=None, overwrite=False):
    """
    Write default settings.

    Missing keys are created; existing keys are left alone unless
    ``overwrite`` is set. Safe to run repeatedly.

    Returns:
        {'created': n, 'updated': n, 'skipped': n, 'failed': n}
    """
    manager = manager or settings_manager
    counts = {'created': 0, 'updated': 0, 'skipped': 0, 'failed': 0}

    for key, value, category in DEFAULT_SETTINGS:
        # Seeding an empty secret would only store an encrypted empty string
        if is_sensitive_field(key) and not value:
            counts['skipped'] += 1
            continue

        try:
            exists = manager.store.find_unique(key) is not None
        except Exception as e:
            logger.error(f"Failed to look up {key} while seeding: {e}")
            counts['failed'] += 1
            continue

        if exists and not overwrite:
            counts['skipped'] += 1
            continue

        if manager.update_setting(key, value, actor='seed', category=category) is None:
            counts['failed'] += 1
        elif exists:
            counts['updated'] += 1
        else:
            counts['created'] += 1

    manager.clear_cache()
    logger.info(
        f"Settings seeded: {counts['created']} created, {counts['updated']} updated, "
        f"{counts['skipped']} skipped, {counts['failed']} failed"
    )
    return counts
