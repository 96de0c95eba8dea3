"""
Object Storage
==============

MinIO (S3-compatible) client used to resolve stored object keys into
time-limited signed URLs, and to recognise URLs that point back at our own
storage so only the portable object key is ever persisted.
"""

import logging
from collections import namedtuple
from urllib.parse import unquote, urlsplit

import boto3
from botocore.config import Config as BotoConfig

from .config import Config

logger = logging.getLogger(__name__)

# Hostnames the storage service is reachable under in local/docker setups
LOCAL_STORAGE_HOSTS = ('localhost:9000', '127.0.0.1:9000', 'minio:9000')

MediaSource = namedtuple('MediaSource', ['key', 'url', 'is_external'])


def is_http_url(value):
    # URL schemes are case-insensitive
    return value.lower().startswith(('http://', 'https://'))


def _netloc_with_port(parsed):
    """Return lowercase host:port, filling in the scheme's default port."""
    host = (parsed.hostname or '').lower()
    port = parsed.port
    if port is None:
        port = 443 if parsed.scheme == 'https' else 80
    return f"{host}:{port}"


class ObjectStorage:
    """
    Thin wrapper over a boto3 S3 client talking to MinIO.

    The boto3 client is created lazily; tests can assign ``client`` directly.
    """

    def __init__(self, endpoint='localhost', port=9000, bucket='shopfront-media',
                 access_key=None, secret_key=None, region='us-east-1',
                 use_ssl=False, public_url=None, client=None):
        self.endpoint = endpoint
        self.port = int(port)
        self.bucket = bucket
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region
        self.use_ssl = use_ssl
        self.public_url = public_url.rstrip('/') if public_url else None
        self._client = client

    @classmethod
    def from_config(cls, config):
        """Build from a mapping such as ``app.config``, falling back to Config."""
        return cls(
            endpoint=config.get('MINIO_ENDPOINT', Config.MINIO_ENDPOINT),
            port=config.get('MINIO_PORT', Config.MINIO_PORT),
            bucket=config.get('MINIO_BUCKET_NAME', Config.MINIO_BUCKET_NAME),
            access_key=config.get('MINIO_ACCESS_KEY', Config.MINIO_ACCESS_KEY),
            secret_key=config.get('MINIO_SECRET_KEY', Config.MINIO_SECRET_KEY),
            region=config.get('MINIO_REGION', Config.MINIO_REGION),
            use_ssl=config.get('MINIO_USE_SSL', Config.MINIO_USE_SSL),
            public_url=config.get('MINIO_PUBLIC_URL', Config.MINIO_PUBLIC_URL),
        )

    @property
    def endpoint_url(self):
        scheme = 'https' if self.use_ssl else 'http'
        return f"{scheme}://{self.endpoint}:{self.port}"

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                's3',
                endpoint_url=self.endpoint_url,
                region_name=self.region,
                aws_access_key_id=self.access_key,
                aws_secret_access_key=self.secret_key,
                # MinIO needs path-style addressing
                config=BotoConfig(signature_version='s3v4', s3={'addressing_style': 'path'}),
            )
        return self._client

    @client.setter
    def client(self, value):
        self._client = value

    # ------------------------------------------------------------------
    # Signed URLs
    # ------------------------------------------------------------------

    def get_presigned_url(self, key, expires_in=3600):
        """Get a presigned GET URL for an object.

        Args:
            key: Object key with folder prefix (e.g. 'general/logo.png').
            expires_in: Lifetime in seconds (default one hour).

        Returns:
            A signed URL. Internal container hostnames are swapped for
            MINIO_PUBLIC_URL when that is configured.
        """
        url = self.client.generate_presigned_url(
            'get_object',
            Params={'Bucket': self.bucket, 'Key': key},
            ExpiresIn=expires_in,
        )
        if self.public_url:
            url = self._publicise(url)
        return url

    def _publicise(self, url):
        parsed = urlsplit(url)
        if _netloc_with_port(parsed) not in self.internal_hosts():
            return url
        rest = url[len(f"{parsed.scheme}://{parsed.netloc}"):]
        return self.public_url + rest

    # ------------------------------------------------------------------
    # URL / key classification
    # ------------------------------------------------------------------

    def internal_hosts(self):
        """host:port pairs that identify our own storage endpoint."""
        primary = f"{str(self.endpoint).lower()}:{self.port}"
        hosts = [primary]
        for alias in LOCAL_STORAGE_HOSTS:
            if alias not in hosts:
                hosts.append(alias)
        return hosts

    def is_internal_url(self, url):
        if not url or not is_http_url(url):
            return False
        try:
            parsed = urlsplit(url)
            return _netloc_with_port(parsed) in self.internal_hosts()
        except ValueError:
            return False

    def _key_from_path(self, path):
        parts = [part for part in unquote(path).split('/') if part]
        if parts and parts[0] == self.bucket:
            parts = parts[1:]
        return '/'.join(parts) or None

    def resolve_source(self, value):
        """Classify a stored media value.

        Returns a MediaSource(key, url, is_external). Bare keys may carry a
        leading '<bucket>/' which is stripped; URLs on our storage host yield
        their object key; anything else is an external URL.
        """
        raw = (value or '').strip()
        if not raw:
            return MediaSource(None, '', False)

        if not is_http_url(raw):
            prefix = f"{self.bucket}/"
            if raw.startswith(prefix):
                return MediaSource(raw[len(prefix):], raw, False)
            return MediaSource(raw, raw, False)

        try:
            parsed = urlsplit(raw)
            internal = _netloc_with_port(parsed) in self.internal_hosts()
        except ValueError as e:
            logger.warning(f"Failed to parse media URL {raw!r}: {e}")
            return MediaSource(None, raw, True)

        if not internal:
            return MediaSource(None, raw, True)

        key = self._key_from_path(parsed.path)
        if not key:
            logger.warning(f"Unable to derive storage key from URL {raw!r}")
            return MediaSource(None, raw, False)
        return MediaSource(key, raw, False)

    def extract_key_from_url(self, url):
        """Return the object key for a storage URL (or bare key), else None."""
        source = self.resolve_source(url)
        if not source.key:
            logger.warning(f"extract_key_from_url found no key in {url!r}")
        return source.key
