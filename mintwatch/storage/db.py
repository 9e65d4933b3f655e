import sqlite3
import threading
from typing import Any, Dict, List, Optional


class StorageDB:
    def __init__(self, db_path: str):
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.cursor = self.conn.cursor()
        self._lock = threading.Lock()
        self._init_db()

    def _init_db(self):
        with self._lock:
            # One masternode binding per chat/owner
            self.cursor.execute('''
                CREATE TABLE IF NOT EXISTS watched_operators (
                    owner_id INTEGER PRIMARY KEY,
                    user_name TEXT NOT NULL DEFAULT '',
                    user_address TEXT NOT NULL DEFAULT '',
                    pub_key TEXT NOT NULL DEFAULT '',
                    priv_key TEXT NOT NULL DEFAULT '',
                    notification INTEGER NOT NULL DEFAULT 1
                )
            ''')
            self.conn.commit()

    def insert_operator(self, row: Dict[str, Any]):
        with self._lock:
            self.cursor.execute(
                'INSERT INTO watched_operators (owner_id, user_name, user_address, pub_key, priv_key, notification) '
                'VALUES (:owner_id, :user_name, :user_address, :pub_key, :priv_key, :notification)',
                row,
            )
            self.conn.commit()

    def update_operator(self, owner_id: int, fields: Dict[str, Any]) -> int:
        """Sets the given columns. Returns number of rows touched."""
        if not fields:
            return 0
        assignments = ", ".join(f"{column} = ?" for column in fields)
        with self._lock:
            self.cursor.execute(
                f'UPDATE watched_operators SET {assignments} WHERE owner_id = ?',
                (*fields.values(), owner_id),
            )
            self.conn.commit()
            return self.cursor.rowcount

    def get_operator(self, owner_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            self.cursor.execute('SELECT * FROM watched_operators WHERE owner_id = ?', (owner_id,))
            row = self.cursor.fetchone()
            return dict(row) if row else None

    def list_operators(self) -> List[Dict[str, Any]]:
        with self._lock:
            self.cursor.execute('SELECT * FROM watched_operators ORDER BY owner_id')
            return [dict(row) for row in self.cursor.fetchall()]

    def close(self):
        with self._lock:
            self.conn.close()
