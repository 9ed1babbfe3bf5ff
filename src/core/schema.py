"""SQLite schema management (code-first approach)."""

import logging

from src.core import db_client


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [
    "profiles",
    "categories",
    "routines",
    "tasks",
    "wish_lists",
    "wish_items",
]


_TABLES: dict[str, str] = {
    "profiles": """
        CREATE TABLE IF NOT EXISTS profiles (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL UNIQUE,
            email TEXT NOT NULL DEFAULT '',
            notification_time TEXT,
            notification_enabled INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """,
    "categories": """
        CREATE TABLE IF NOT EXISTS categories (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            name TEXT NOT NULL CHECK (length(trim(name)) > 0),
            color TEXT NOT NULL,
            sort_order INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """,
    "routines": """
        CREATE TABLE IF NOT EXISTS routines (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL,
            title TEXT NOT NULL CHECK (length(trim(title)) > 0),
            memo TEXT,
            priority TEXT NOT NULL DEFAULT 'medium',
            is_active INTEGER NOT NULL DEFAULT 1,
            has_time INTEGER NOT NULL DEFAULT 0,
            time TEXT,
            days_of_week TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """,
    "tasks": """
        CREATE TABLE IF NOT EXISTS tasks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL,
            routine_id INTEGER REFERENCES routines(id) ON DELETE SET NULL,
            title TEXT NOT NULL CHECK (length(trim(title)) > 0),
            memo TEXT,
            priority TEXT NOT NULL DEFAULT 'medium',
            is_completed INTEGER NOT NULL DEFAULT 0,
            task_date TEXT NOT NULL,
            sort_order INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """,
    "wish_lists": """
        CREATE TABLE IF NOT EXISTS wish_lists (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL CHECK (length(trim(title)) > 0),
            is_default INTEGER NOT NULL DEFAULT 0,
            sort_order INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """,
    "wish_items": """
        CREATE TABLE IF NOT EXISTS wish_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            wish_list_id INTEGER NOT NULL REFERENCES wish_lists(id) ON DELETE CASCADE,
            title TEXT NOT NULL CHECK (length(trim(title)) > 0),
            reason TEXT,
            is_completed INTEGER NOT NULL DEFAULT 0,
            sort_order INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """,
}

_INDEXES = [
    # One generated instance per routine per day
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_tasks_routine_date
        ON tasks (routine_id, task_date) WHERE routine_id IS NOT NULL
    """,
    # At most one default wish list per user
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_wish_lists_default
        ON wish_lists (user_id) WHERE is_default = 1
    """,
    "CREATE INDEX IF NOT EXISTS idx_tasks_user_date ON tasks (user_id, task_date)",
    "CREATE INDEX IF NOT EXISTS idx_routines_user_active ON routines (user_id, is_active)",
    "CREATE INDEX IF NOT EXISTS idx_categories_user ON categories (user_id, sort_order)",
    "CREATE INDEX IF NOT EXISTS idx_wish_items_list ON wish_items (wish_list_id, sort_order)",
]


async def init_db(*, db_path: str | None = None) -> None:
    """Create every table and index if missing. Safe to call repeatedly."""
    conn = await db_client.get_connection(db_path=db_path)

    for collection in COLLECTIONS:
        await conn.execute(_TABLES[collection])
    for statement in _INDEXES:
        await conn.execute(statement)
    await conn.commit()

    logger.info("Schema initialized", extra={"collections": COLLECTIONS})
