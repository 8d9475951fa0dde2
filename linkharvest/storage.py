import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from loguru import logger

from .models import (
    DEFAULT_SHOP_TITLE,
    CommunityLinkRecord,
    ShopLinkRecord,
    SocialLinkRecord,
    UserLinks,
)

# SQLite INTEGER primary keys are signed 64-bit.
MAX_ROW_ID = 2**63 - 1

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS social_links (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        platform TEXT NOT NULL,
        url TEXT NOT NULL,
        visible INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (user_id, platform)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS community_links (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        platform TEXT NOT NULL,
        url TEXT NOT NULL,
        title TEXT NOT NULL DEFAULT '',
        active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (user_id, platform, url)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS shop_links (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        url TEXT NOT NULL,
        domain TEXT,
        title TEXT NOT NULL,
        image_url TEXT,
        price TEXT,
        description TEXT,
        is_affiliate INTEGER NOT NULL DEFAULT 1,
        clicks INTEGER NOT NULL DEFAULT 0,
        active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (user_id, url)
    )
    """,
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class LinkStore:
    """
    SQLite-backed link collections. Identity keys are UNIQUE constraints and
    every write is a single conditional statement, so concurrent imports for
    the same user cannot create duplicates or lose updates.
    """

    def __init__(self, db_path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._create_tables()

    @contextmanager
    def _get_conn(self):
        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _create_tables(self):
        with self._get_conn() as conn:
            for statement in SCHEMA:
                conn.execute(statement)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_shop_user ON shop_links (user_id)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_community_user ON community_links (user_id)")

    def upsert_social(self, user_id: str, platform: str, url: str) -> None:
        now = _now()
        with self._get_conn() as conn:
            conn.execute(
                """
                INSERT INTO social_links (user_id, platform, url, visible, created_at, updated_at)
                VALUES (?, ?, ?, 1, ?, ?)
                ON CONFLICT (user_id, platform)
                DO UPDATE SET url = excluded.url, visible = 1, updated_at = excluded.updated_at
                """,
                (user_id, platform, url, now, now),
            )

    def add_community(self, user_id: str, platform: str, url: str, title: str = "") -> bool:
        """Insert unless (user, platform, url) exists. True if a row was created."""
        now = _now()
        with self._get_conn() as conn:
            cursor = conn.execute(
                """
                INSERT INTO community_links (user_id, platform, url, title, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT (user_id, platform, url) DO NOTHING
                """,
                (user_id, platform, url, title, now, now),
            )
            return cursor.rowcount == 1

    def add_shop(
        self,
        user_id: str,
        url: str,
        domain: Optional[str] = None,
        title: str = DEFAULT_SHOP_TITLE,
        image_url: Optional[str] = None,
        price: Optional[str] = None,
        description: Optional[str] = None,
    ) -> bool:
        """Insert unless (user, url) exists. True if a row was created."""
        now = _now()
        with self._get_conn() as conn:
            cursor = conn.execute(
                """
                INSERT INTO shop_links
                    (user_id, url, domain, title, image_url, price, description, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (user_id, url) DO NOTHING
                """,
                (user_id, url, domain, title, image_url, price, description, now, now),
            )
            return cursor.rowcount == 1

    def record_click(self, link_id: int) -> Optional[int]:
        """Increment a shop link's clicks. Returns the new count, or None if there is no such link."""
        if not 0 < link_id <= MAX_ROW_ID:
            return None
        with self._get_conn() as conn:
            row = conn.execute(
                """
                UPDATE shop_links SET clicks = clicks + 1, updated_at = ?
                WHERE id = ?
                RETURNING clicks
                """,
                (_now(), link_id),
            ).fetchone()
        if row is None:
            logger.debug(f"Click on unknown shop link {link_id}")
            return None
        return row["clicks"]

    def list_links(self, user_id: str) -> UserLinks:
        with self._get_conn() as conn:
            social = conn.execute(
                "SELECT * FROM social_links WHERE user_id = ? ORDER BY id", (user_id,)
            ).fetchall()
            community = conn.execute(
                "SELECT * FROM community_links WHERE user_id = ? ORDER BY id", (user_id,)
            ).fetchall()
            shop = conn.execute(
                "SELECT * FROM shop_links WHERE user_id = ? ORDER BY id", (user_id,)
            ).fetchall()

        return UserLinks(
            social=[SocialLinkRecord(**dict(r)) for r in social],
            community=[CommunityLinkRecord(**dict(r)) for r in community],
            shop=[ShopLinkRecord(**dict(r)) for r in shop],
        )
