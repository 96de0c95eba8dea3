"""
Media Settings
==============

Logo settings store a bucket-relative object key, never an absolute URL on
one environment's storage host. The key is turned into a signed URL on
demand by SettingsManager.get_media_setting_url.
"""

import logging
from urllib.parse import parse_qs, urlsplit

from ...core.storage import is_http_url

logger = logging.getLogger(__name__)

MEDIA_SETTING_KEYS = (
    'logo_url',
    'logo_mobile_url',
)

# Admin endpoint that proxies storage images; values saved from the admin
# preview can arrive wrapped in it as ?url=<signed url>
MEDIA_PROXY_PATH = '/api/admin/media/proxy'


def is_media_setting_key(key):
    return key in MEDIA_SETTING_KEYS


def _proxied_url(parsed):
    values = parse_qs(parsed.query).get('url')
    return values[0] if values else None


def normalize_media_setting_value(value, storage):
    """Reduce a media setting value to its portable form.

    - blank -> ''
    - bare keys (anything that is not http/https) -> unchanged
    - media proxy URLs -> the normalized ``url`` query parameter
    - URLs on our storage hosts -> the bare object key
    - any other URL -> unchanged (external CDN etc.)

    Applying it twice gives the same result as applying it once.
    """
    raw = (value or '').strip()
    if not raw:
        return ''

    if not is_http_url(raw):
        return raw

    try:
        parsed = urlsplit(raw)
    except ValueError as e:
        logger.warning(f"Could not parse media setting value {raw!r}: {e}")
        return raw

    if parsed.path.rstrip('/') == MEDIA_PROXY_PATH:
        inner = _proxied_url(parsed)
        if inner is not None:
            return normalize_media_setting_value(inner, storage)
        return raw

    if storage.is_internal_url(raw):
        key = (storage.extract_key_from_url(raw) or '').strip()
        if key:
            return key

    return raw
