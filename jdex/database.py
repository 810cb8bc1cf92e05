"""
SQLite database management for the folder/item index
"""
import sqlite3
from pathlib import Path
from typing import List, Dict, Any, Optional

from jdex.logic.actions import EntityType
from jdex.logic.errors import IndexStoreError
from jdex.utils import log

FOLDER_COLUMNS = (
    'folder_number', 'category_id', 'sequence', 'name', 'description',
    'sensitivity', 'location', 'storage_path', 'keywords', 'notes',
)

ITEM_COLUMNS = (
    'item_number', 'folder_id', 'sequence', 'name', 'description', 'file_type',
    'sensitivity', 'location', 'storage_path', 'file_size', 'keywords', 'notes',
)

# kind -> (table, writable columns, number column, required columns)
TABLES = {
    EntityType.FOLDER: ('folders', FOLDER_COLUMNS, 'folder_number', ('folder_number', 'name')),
    EntityType.ITEM: ('items', ITEM_COLUMNS, 'item_number', ('item_number', 'folder_id', 'name')),
}


class IndexDatabase:
    """
    Handles all database operations.

    Mutations are held in the open transaction until commit() is called.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._init_tables()
        log.info(f"Opened index database: {db_path}")

    def _init_tables(self) -> None:
        """Initialize database schema"""
        with self.conn:
            # Folders table (XX.XX containers)
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS folders (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    folder_number TEXT NOT NULL UNIQUE,
                    category_id INTEGER,
                    sequence INTEGER,
                    name TEXT NOT NULL,
                    description TEXT DEFAULT '',
                    sensitivity TEXT DEFAULT 'standard',
                    location TEXT DEFAULT '',
                    storage_path TEXT DEFAULT '',
                    keywords TEXT DEFAULT '',
                    notes TEXT DEFAULT '',
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # Items table (XX.XX.XX tracked objects)
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS items (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    item_number TEXT NOT NULL UNIQUE,
                    folder_id INTEGER NOT NULL REFERENCES folders(id),
                    sequence INTEGER,
                    name TEXT NOT NULL,
                    description TEXT DEFAULT '',
                    file_type TEXT DEFAULT '',
                    sensitivity TEXT DEFAULT 'inherit',
                    location TEXT DEFAULT '',
                    storage_path TEXT DEFAULT '',
                    file_size INTEGER,
                    keywords TEXT DEFAULT '',
                    notes TEXT DEFAULT '',
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)

            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS activity_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    action TEXT,
                    entity_type TEXT,
                    entity_number TEXT,
                    details TEXT,
                    timestamp TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # Create indexes for performance
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_items_folder ON items(folder_id)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_folder_number ON folders(folder_number)")

    # ------------------------------------------------------------------
    # Generic entity access (used by the undo journal)
    # ------------------------------------------------------------------
    def create_entity(self, kind: EntityType, data: Dict[str, Any]) -> int:
        """
        Insert a folder or item

        Returns:
            The new record id
        """
        table, columns, number_col, required = TABLES[kind]
        missing = [c for c in required if data.get(c) in (None, '')]
        if missing:
            raise IndexStoreError(f"Cannot create {kind.value.lower()}: missing {', '.join(missing)}")

        fields = [c for c in columns if data.get(c) is not None]
        placeholders = ', '.join('?' for _ in fields)
        try:
            cursor = self.conn.execute(
                f"INSERT INTO {table} ({', '.join(fields)}) VALUES ({placeholders})",
                [data[c] for c in fields],
            )
        except sqlite3.IntegrityError as e:
            raise IndexStoreError(f"Cannot create {kind.value.lower()} {data.get(number_col)}: {e}") from e

        self._log_activity('create', kind, data[number_col], f"Created {kind.value.lower()}: {data['name']}")
        return cursor.lastrowid

    def update_entity(self, kind: EntityType, entity_id: int, patch: Dict[str, Any]) -> None:
        """Apply a partial update. Unknown columns are ignored."""
        table, columns, number_col, _ = TABLES[kind]
        updates = {k: v for k, v in patch.items() if k in columns}
        if not updates:
            return

        assignments = ', '.join(f"{k} = ?" for k in updates)
        try:
            self.conn.execute(
                f"UPDATE {table} SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                [*updates.values(), entity_id],
            )
        except sqlite3.IntegrityError as e:
            raise IndexStoreError(f"Cannot update {kind.value.lower()} {entity_id}: {e}") from e

        record = self.get_entity(kind, entity_id)
        if record:
            self._log_activity('update', kind, record[number_col], f"Updated: {record['name']}")

    def delete_entity(self, kind: EntityType, entity_id: int) -> None:
        """Remove a record. Deleting an id that no longer exists does nothing."""
        table, _, number_col, _ = TABLES[kind]
        if kind is EntityType.FOLDER:
            count = self.conn.execute(
                "SELECT COUNT(*) FROM items WHERE folder_id = ?", (entity_id,)
            ).fetchone()[0]
            if count > 0:
                raise IndexStoreError(
                    "Cannot delete folder with existing items. Delete or move items first."
                )

        record = self.get_entity(kind, entity_id)
        self.conn.execute(f"DELETE FROM {table} WHERE id = ?", (entity_id,))
        if record:
            self._log_activity('delete', kind, record[number_col], f"Deleted: {record['name']}")

    def get_entity(self, kind: EntityType, entity_id: int) -> Optional[Dict[str, Any]]:
        table = TABLES[kind][0]
        row = self.conn.execute(f"SELECT * FROM {table} WHERE id = ?", (entity_id,)).fetchone()
        return dict(row) if row else None

    def commit(self) -> None:
        self.conn.commit()

    def rollback(self) -> None:
        """Drop every mutation since the last commit."""
        self.conn.rollback()

    # ------------------------------------------------------------------
    # Folders & items
    # ------------------------------------------------------------------
    def create_folder(self, folder: Dict[str, Any]) -> int:
        return self.create_entity(EntityType.FOLDER, folder)

    def update_folder(self, folder_id: int, updates: Dict[str, Any]) -> None:
        self.update_entity(EntityType.FOLDER, folder_id, updates)

    def delete_folder(self, folder_id: int) -> None:
        self.delete_entity(EntityType.FOLDER, folder_id)

    def get_folder(self, folder_id: int) -> Optional[Dict[str, Any]]:
        return self.get_entity(EntityType.FOLDER, folder_id)

    def get_folders(self) -> List[Dict[str, Any]]:
        rows = self.conn.execute("SELECT * FROM folders ORDER BY folder_number").fetchall()
        return [dict(row) for row in rows]

    def create_item(self, item: Dict[str, Any]) -> int:
        return self.create_entity(EntityType.ITEM, item)

    def update_item(self, item_id: int, updates: Dict[str, Any]) -> None:
        self.update_entity(EntityType.ITEM, item_id, updates)

    def delete_item(self, item_id: int) -> None:
        self.delete_entity(EntityType.ITEM, item_id)

    def get_item(self, item_id: int) -> Optional[Dict[str, Any]]:
        return self.get_entity(EntityType.ITEM, item_id)

    def get_items(self, folder_id: Optional[int] = None) -> List[Dict[str, Any]]:
        if folder_id is None:
            rows = self.conn.execute("SELECT * FROM items ORDER BY item_number").fetchall()
        else:
            rows = self.conn.execute(
                "SELECT * FROM items WHERE folder_id = ? ORDER BY item_number", (folder_id,)
            ).fetchall()
        return [dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Activity log & statistics
    # ------------------------------------------------------------------
    def _log_activity(self, action: str, kind: EntityType, number: str, details: str) -> None:
        self.conn.execute(
            "INSERT INTO activity_log (action, entity_type, entity_number, details) VALUES (?, ?, ?, ?)",
            (action, kind.value.lower(), number, details),
        )

    def get_recent_activity(self, limit: int = 20) -> List[Dict[str, Any]]:
        rows = self.conn.execute(
            "SELECT * FROM activity_log ORDER BY id DESC LIMIT ?", (limit,)
        ).fetchall()
        return [dict(row) for row in rows]

    def get_statistics(self) -> Dict[str, Any]:
        """Get comprehensive database statistics"""
        stats = {}
        stats['total_folders'] = self.conn.execute("SELECT COUNT(*) FROM folders").fetchone()[0]
        stats['total_items'] = self.conn.execute("SELECT COUNT(*) FROM items").fetchone()[0]

        # By file type
        rows = self.conn.execute("""
            SELECT file_type, COUNT(*) as count
            FROM items
            WHERE file_type != ''
            GROUP BY file_type
            ORDER BY count DESC
        """).fetchall()
        stats['by_file_type'] = {row[0]: row[1] for row in rows}
        return stats

    def reset(self) -> None:
        """Remove every folder, item and activity entry."""
        with self.conn:
            self.conn.execute("DELETE FROM items")
            self.conn.execute("DELETE FROM folders")
            self.conn.execute("DELETE FROM activity_log")
        log.warning("Index database reset")

    def close(self) -> None:
        self.conn.close()
