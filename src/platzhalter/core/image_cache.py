"""SQLite-backed store for rendered placeholder images."""

import logging
import sqlite3
from pathlib import Path

from platzhalter.core.errors import StoreReadError, StoreWriteError
from platzhalter.core.fingerprint import cache_key

logger = logging.getLogger(__name__)


class ImageCache:
    """Key-value store mapping fingerprints to encoded images.

    Keys are the decimal form of a fingerprint and values are the raw PNG
    bytes, with no envelope.  Entries are never updated in place, expired, or
    evicted.

    Every call opens its own connection, so one instance can be shared by
    the request threads; SQLite serializes concurrent writers itself.
    """

    def __init__(self, db_path: Path):
        """Initialize the image store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()
        logger.info(f"Initialized image cache at {self.db_path}")

    def _initialize_db(self) -> None:
        """Create database schema if it doesn't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS images (
                    key TEXT PRIMARY KEY,
                    data BLOB NOT NULL
                )
                """)
            conn.commit()

    def get(self, fingerprint: int) -> bytes | None:
        """Look up the image stored for ``fingerprint``.

        Returns:
            The stored bytes, or None on a miss

        Raises:
            StoreReadError: If the database cannot be read
        """
        key = cache_key(fingerprint)
        try:
            with sqlite3.connect(self.db_path) as conn:
                row = conn.execute("SELECT data FROM images WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error reading cache entry {key}: {e}")
            raise StoreReadError(f"failed to read cache entry {key}: {e}") from e

        if row is None:
            return None
        return bytes(row[0])

    def put(self, fingerprint: int, data: bytes) -> None:
        """Store ``data`` under ``fingerprint``.

        A concurrent writer for the same key simply replaces the other's
        entry; both are complete images.

        Raises:
            StoreWriteError: If the database cannot be written
        """
        key = cache_key(fingerprint)
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO images (key, data) VALUES (?, ?)",
                    (key, sqlite3.Binary(data)),
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Error writing cache entry {key}: {e}")
            raise StoreWriteError(f"failed to write cache entry {key}: {e}") from e

        logger.debug(f"Stored {len(data)} bytes under {key}")

    def __contains__(self, fingerprint: int) -> bool:
        return self.get(fingerprint) is not None

    def __len__(self) -> int:
        try:
            with sqlite3.connect(self.db_path) as conn:
                (count,) = conn.execute("SELECT COUNT(*) FROM images").fetchone()
        except sqlite3.Error as e:
            raise StoreReadError(f"failed to count cache entries: {e}") from e
        return count
