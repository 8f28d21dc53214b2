"""Tests for time bucket indexing and bucket key derivation."""

import hashlib
import hmac
import struct
from datetime import datetime, timedelta, timezone

import pytest

from urlsign.bucket import EPOCH, bucket_index, derive_bucket_key, unix_nanoseconds
from urlsign.common.logging import KeyMaterialTrace


class TestBucketIndex:
    """Test quantizing instants into buckets."""

    def test_epoch_is_bucket_zero(self):
        assert bucket_index(EPOCH, timedelta(seconds=60)) == 0

    def test_same_bucket_same_index(self):
        """Instants inside one bucket share an index."""
        start = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        size = timedelta(seconds=60)

        assert bucket_index(start, size) == bucket_index(start + timedelta(seconds=59), size)
        assert bucket_index(start + timedelta(seconds=60), size) == bucket_index(start, size) + 1

    def test_matches_unix_seconds(self):
        instant = datetime(2024, 1, 1, 12, 0, 30, tzinfo=timezone.utc)
        assert bucket_index(instant, timedelta(seconds=60)) == int(instant.timestamp()) // 60

    def test_naive_datetime_is_utc(self):
        aware = datetime(2024, 6, 1, 8, 30, tzinfo=timezone.utc)
        naive = datetime(2024, 6, 1, 8, 30)
        assert bucket_index(naive, timedelta(minutes=5)) == bucket_index(aware, timedelta(minutes=5))

    def test_timezone_offset_respected(self):
        utc = datetime(2024, 6, 1, 8, 30, tzinfo=timezone.utc)
        cest = datetime(2024, 6, 1, 10, 30, tzinfo=timezone(timedelta(hours=2)))
        assert bucket_index(utc, timedelta(seconds=1)) == bucket_index(cest, timedelta(seconds=1))

    def test_truncates_toward_zero(self):
        """Pre-epoch instants truncate toward zero rather than flooring."""
        size = timedelta(seconds=60)
        assert bucket_index(EPOCH - timedelta(seconds=30), size) == 0
        assert bucket_index(EPOCH - timedelta(seconds=90), size) == -1

    def test_zero_bucket_size(self):
        """A zero bucket size is accepted and collapses to one bucket."""
        assert bucket_index(datetime.now(timezone.utc), timedelta(0)) == 0

    def test_sub_second_resolution(self):
        size = timedelta(milliseconds=250)
        instant = EPOCH + timedelta(seconds=1, milliseconds=600)
        assert bucket_index(instant, size) == 6

    def test_unix_nanoseconds_exact(self):
        instant = EPOCH + timedelta(seconds=2, microseconds=5)
        assert unix_nanoseconds(instant) == 2_000_005_000


class TestDeriveBucketKey:
    """Test the HMAC-derived bucket key."""

    def test_hmac_over_big_endian_index(self):
        key = derive_bucket_key(b"s3cr3t", 28401120)
        expected = hmac.new(b"s3cr3t", struct.pack(">q", 28401120), hashlib.sha1).digest()
        assert key == expected

    def test_str_secret_is_utf8(self):
        assert derive_bucket_key("s3cr3t", 7) == derive_bucket_key(b"s3cr3t", 7)

    def test_deterministic(self):
        assert derive_bucket_key(b"k", 42) == derive_bucket_key(b"k", 42)

    def test_changes_with_index(self):
        assert derive_bucket_key(b"k", 42) != derive_bucket_key(b"k", 43)

    def test_negative_index_twos_complement(self):
        key = derive_bucket_key(b"k", -1)
        expected = hmac.new(b"k", b"\xff" * 8, hashlib.sha1).digest()
        assert key == expected

    def test_out_of_range_index_wraps(self):
        assert derive_bucket_key(b"k", 2**64 + 5) == derive_bucket_key(b"k", 5)

    def test_empty_secret_accepted(self):
        assert len(derive_bucket_key(b"", 1)) == hashlib.sha1().digest_size

    @pytest.mark.parametrize("algorithm", [hashlib.sha256, hashlib.sha512])
    def test_algorithm_is_injected(self, algorithm):
        key = derive_bucket_key(b"k", 1, algorithm)
        assert key == hmac.new(b"k", struct.pack(">q", 1), algorithm).digest()

    def test_trace_receives_key(self):
        traced = []

        class Recorder(KeyMaterialTrace):
            def bucket_key(self, bucket_index, key):
                traced.append((bucket_index, key))

        key = derive_bucket_key(b"k", 3, trace=Recorder())
        assert traced == [(3, key)]
