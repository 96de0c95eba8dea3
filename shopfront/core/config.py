import os
from dotenv import load_dotenv

load_dotenv(override=True)


def _env_flag(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """
    Base configuration for the Shopfront settings layer.
    Projects can override any of these through Flask app.config.
    """
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Database
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL', 'sqlite:///' + os.path.join(DB_DIR, 'shopfront.db')
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Field encryption for sensitive settings (64 hex chars = 32 bytes).
    # Generate one with: flask settings generate-key
    SETTINGS_ENCRYPTION_KEY = os.getenv('SETTINGS_ENCRYPTION_KEY')

    # Settings cache
    SETTINGS_CACHE_TTL = int(os.getenv('SETTINGS_CACHE_TTL', '60'))
    MEDIA_URL_EXPIRY = int(os.getenv('MEDIA_URL_EXPIRY', '3600'))

    # MinIO / S3 object storage
    MINIO_ENDPOINT = os.getenv('MINIO_ENDPOINT', 'localhost')
    MINIO_PORT = int(os.getenv('MINIO_PORT', '9000'))
    MINIO_USE_SSL = _env_flag('MINIO_USE_SSL')
    MINIO_REGION = os.getenv('MINIO_REGION', 'us-east-1')
    MINIO_ACCESS_KEY = os.getenv('MINIO_ACCESS_KEY')
    MINIO_SECRET_KEY = os.getenv('MINIO_SECRET_KEY')
    MINIO_BUCKET_NAME = os.getenv('MINIO_BUCKET_NAME', 'shopfront-media')
    # Browser-facing base URL swapped in for container hostnames in signed URLs
    MINIO_PUBLIC_URL = os.getenv('MINIO_PUBLIC_URL')
