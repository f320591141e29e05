import logging
import sqlite3

from thela_rental.core.errors import PersistenceError

DEFAULT_DB_NAME = "thela_rental.db"


class DBManager:
    """
    Small SQLite wrapper holding two key/value tables.

    ``app_config`` keeps application settings as text, ``storage`` keeps named
    blobs (the serialized rental records live under one key there).
    """

    def __init__(self, db_name=DEFAULT_DB_NAME):
        self.db_name = db_name
        self.conn = None
        self.cursor = None
        self._connect()
        self._create_tables()

    def __enter__(self):
        """Context manager entry point."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit point, ensures connection is closed."""
        self.close()

    def _connect(self):
        """Establishes a connection to the SQLite database."""
        try:
            self.conn = sqlite3.connect(self.db_name)
            # Return rows as dictionaries instead of bare tuples
            self.conn.row_factory = sqlite3.Row
            self.cursor = self.conn.cursor()
        except sqlite3.Error as e:
            logging.error(f"Database connection error: {e}")
            raise PersistenceError(f"Could not open database {self.db_name}: {e}") from e

    def _create_tables(self):
        self.create_table("""
            CREATE TABLE IF NOT EXISTS app_config (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                key TEXT UNIQUE,
                value TEXT
            )
        """)
        self.create_table("""
            CREATE TABLE IF NOT EXISTS storage (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                key TEXT UNIQUE,
                value BLOB
            )
        """)

    def _require_connection(self):
        if self.conn is None:
            raise PersistenceError("Database connection is closed.")

    def execute_query(
        self,
        query: str,
        params: tuple | dict | None = None,
        fetch_one: bool = False,
    ) -> sqlite3.Row | list[sqlite3.Row] | int | None:
        """
        Executes a SQL query with optional parameters.

        Data-modifying statements are committed; INSERT/REPLACE return the last
        row id, other writes return None. Queries with a result set return one
        row when ``fetch_one`` is set, otherwise all rows.

        :raises PersistenceError: If SQLite reports an error. The transaction is
                                  rolled back first.
        """
        self._require_connection()
        try:
            if params is None:
                self.cursor.execute(query)
            else:
                self.cursor.execute(query, params)

            if self.cursor.description:  # SELECT / PRAGMA / etc.
                if fetch_one:
                    return self.cursor.fetchone()
                return self.cursor.fetchall()

            self.conn.commit()
            if query.lstrip().upper().startswith(("INSERT", "REPLACE")):
                return self.cursor.lastrowid
            return None
        except sqlite3.Error as e:
            logging.error(f"Database query error: {e}\nQuery: {query}")
            self.conn.rollback()
            raise PersistenceError(f"Database query failed: {e}") from e

    def create_table(self, query: str):
        """Executes a CREATE TABLE query."""
        self._require_connection()
        try:
            self.cursor.execute(query)
            self.conn.commit()
        except sqlite3.Error as e:
            logging.error(f"Error creating table: {e}")
            raise PersistenceError(f"Could not create table: {e}") from e

    def get_item(self, key: str):
        """Returns the blob stored under ``key``, or None if the slot is empty."""
        row = self.execute_query("SELECT value FROM storage WHERE key = ?", (key,), fetch_one=True)
        return row["value"] if row is not None else None

    def set_item(self, key: str, value):
        """Writes ``value`` into the slot, replacing any previous content."""
        self.execute_query(
            "INSERT OR REPLACE INTO storage (key, value) VALUES (?, ?)",
            (key, value),
        )

    def remove_item(self, key: str):
        self.execute_query("DELETE FROM storage WHERE key = ?", (key,))

    def save_config(self, values: dict):
        """Writes settings into app_config, overwriting existing keys."""
        self._require_connection()
        try:
            for key, value in values.items():
                self.cursor.execute(
                    "INSERT OR REPLACE INTO app_config (key, value) VALUES (?, ?)",
                    (key, str(value)),
                )
            self.conn.commit()
        except sqlite3.Error as e:
            logging.error(f"Error saving configuration: {e}")
            self.conn.rollback()
            raise PersistenceError(f"Could not save configuration: {e}") from e

    def get_config(self) -> dict:
        """Returns every stored setting as a dict of strings."""
        rows = self.execute_query("SELECT key, value FROM app_config")
        return {row["key"]: row["value"] for row in rows}

    def close(self):
        """Closes the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            self.cursor = None
            logging.info("Database connection closed.")
