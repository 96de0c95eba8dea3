"""
Shared fixtures for the Shopfront test suite.

Every test gets a fresh in-memory SQLite database, a fixed encryption key,
a fake clock it can move forward, and a storage client whose boto3 client
is a MagicMock, so nothing touches the network or sleeps.
"""

from unittest.mock import MagicMock

import pytest

from shopfront import create_app
from shopfront.core.database import db
from shopfront.core.storage import ObjectStorage
from shopfront.modules.settings import SettingsEncryption, SettingsManager, SettingsStore, settings_manager

TEST_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
STORAGE_HOST = "minio.internal"
BUCKET = "shopfront-media"
SIGNED_URL = "https://media.example.com/shopfront-media/general/logo.png?X-Amz-Signature=abc"


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class CountingStore(SettingsStore):
    """SettingsStore that counts reads so cache hits can be asserted."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.find_unique_calls = 0
        self.find_many_calls = 0

    def find_unique(self, key):
        self.find_unique_calls += 1
        return super().find_unique(key)

    def find_many(self, category=None):
        self.find_many_calls += 1
        return super().find_many(category)


@pytest.fixture
def app():
    """Flask app with in-memory DB, test encryption key and app context pushed."""
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "SETTINGS_ENCRYPTION_KEY": TEST_KEY,
        "MINIO_ENDPOINT": STORAGE_HOST,
        "MINIO_PORT": 9000,
        "MINIO_BUCKET_NAME": BUCKET,
        "MINIO_PUBLIC_URL": None,
    })
    settings_manager.clear_cache()

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()

    settings_manager.clear_cache()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    """Real ObjectStorage with a mocked boto3 client."""
    client = MagicMock()
    client.generate_presigned_url.return_value = SIGNED_URL
    return ObjectStorage(endpoint=STORAGE_HOST, port=9000, bucket=BUCKET, client=client)


@pytest.fixture
def store():
    return CountingStore()


@pytest.fixture
def manager(app, store, storage, clock):
    """Isolated SettingsManager over the test database."""
    return SettingsManager(
        store=store,
        storage=storage,
        encryption=SettingsEncryption(TEST_KEY),
        clock=clock,
    )
