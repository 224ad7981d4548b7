import logging
import os
import sqlite3

logger = logging.getLogger(__name__)


def get_db_connection(db_file: str) -> sqlite3.Connection:
    """Open a connection to the SQLite database backing the catalog."""
    conn = sqlite3.connect(db_file, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        # WAL lets readers proceed while a request is writing
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def create_tables(db_file: str) -> None:
    """Create the books collection if it does not exist yet."""
    conn = get_db_connection(db_file)
    try:
        # The implicit rowid orders records that share a creation timestamp
        conn.execute("""
            CREATE TABLE IF NOT EXISTS books (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                author TEXT NOT NULL,
                isbn TEXT NOT NULL,
                year INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        conn.commit()
    finally:
        conn.close()


def initialize_database(db_file: str) -> None:
    """Make sure the database file's directory and schema exist."""
    directory = os.path.dirname(os.path.abspath(db_file))
    os.makedirs(directory, exist_ok=True)
    create_tables(db_file)
    logger.debug(f"Catalog database ready at {db_file}")
