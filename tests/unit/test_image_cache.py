"""Tests for platzhalter.core.image_cache — the SQLite image store."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from platzhalter.core.errors import StoreReadError, StoreWriteError
from platzhalter.core.image_cache import ImageCache


class TestImageCache:
    """Test get/put semantics of ImageCache."""

    def test_creates_parent_directories(self, temp_dir: Path):
        db_path = temp_dir / "nested" / "deeper" / "images.sqlite3"
        ImageCache(db_path)
        assert db_path.exists()

    def test_miss_returns_none(self, image_cache: ImageCache):
        assert image_cache.get(42) is None

    def test_put_then_get(self, image_cache: ImageCache):
        image_cache.put(42, b"\x89PNG fake")
        assert image_cache.get(42) == b"\x89PNG fake"

    def test_full_64_bit_keys(self, image_cache: ImageCache):
        key = 2**64 - 1
        image_cache.put(key, b"data")
        assert image_cache.get(key) == b"data"
        assert key in image_cache

    def test_keys_are_stored_as_decimal_strings(self, image_cache: ImageCache):
        image_cache.put(1234, b"data")
        with sqlite3.connect(image_cache.db_path) as conn:
            rows = conn.execute("SELECT key, data FROM images").fetchall()
        assert rows == [("1234", b"data")]

    def test_last_write_wins(self, image_cache: ImageCache):
        image_cache.put(7, b"first")
        image_cache.put(7, b"second")
        assert image_cache.get(7) == b"second"
        assert len(image_cache) == 1

    def test_len_counts_entries(self, image_cache: ImageCache):
        assert len(image_cache) == 0
        image_cache.put(1, b"a")
        image_cache.put(2, b"b")
        assert len(image_cache) == 2

    def test_entries_survive_reopen(self, temp_dir: Path):
        db_path = temp_dir / "images.sqlite3"
        ImageCache(db_path).put(99, b"persisted")
        assert ImageCache(db_path).get(99) == b"persisted"

    def test_read_error_is_wrapped(self, image_cache: ImageCache):
        with sqlite3.connect(image_cache.db_path) as conn:
            conn.execute("DROP TABLE images")
        with pytest.raises(StoreReadError):
            image_cache.get(1)

    def test_write_error_is_wrapped(self, image_cache: ImageCache):
        with sqlite3.connect(image_cache.db_path) as conn:
            conn.execute("DROP TABLE images")
        with pytest.raises(StoreWriteError):
            image_cache.put(1, b"data")
