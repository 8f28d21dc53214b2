"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
import structlog

from urlsign.common.settings import Settings, get_settings
from urlsign.signer import SigningConfig, UrlSigner

SECRET = "s3cr3t"
BUCKET = timedelta(seconds=60)
# Thirty seconds into a bucket, so one bucket either side stays clear of edges.
T0 = datetime(2024, 1, 1, 12, 0, 30, tzinfo=timezone.utc)


@pytest.fixture
def secret() -> str:
    return SECRET


@pytest.fixture
def bucket() -> timedelta:
    return BUCKET


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        secret=SECRET,
        bucket_seconds=60,
        hash_algorithm="sha1",
        protected_paths=("/files",),
    )


@pytest.fixture
def signer() -> UrlSigner:
    """Signer pinned to T0."""
    return UrlSigner(SigningConfig(secret=SECRET, bucket_size=BUCKET), clock=lambda: T0)


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Keep cached settings and logging config from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()
