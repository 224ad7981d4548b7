import logging
import re
import secrets
import sqlite3
import time
from datetime import datetime, timezone
from typing import List, Optional

from smart_library.book import Book, BookSchema
from smart_library.config import settings
from smart_library.database import get_db_connection, initialize_database
from smart_library.errors import InvalidIdentifierError, StoreError

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")

_SELECT_COLUMNS = "id, title, author, isbn, year, created_at, updated_at"


class Library:
    """Manages the book collection and its persistence."""

    def __init__(self, db_file: Optional[str] = None) -> None:
        self.db_file = db_file or settings.database_file
        try:
            initialize_database(self.db_file)
        except (sqlite3.Error, OSError) as e:
            raise StoreError(f"Could not open catalog database: {e}") from e

    # ------------------------- Identifiers ------------------------- #
    @staticmethod
    def new_id() -> str:
        """Return a fresh 24 hex character identifier (seconds prefix + random tail)."""
        return f"{int(time.time()):08x}{secrets.token_hex(8)}"

    @staticmethod
    def is_valid_id(value: object) -> bool:
        return isinstance(value, str) and bool(_ID_PATTERN.match(value))

    @staticmethod
    def _now() -> str:
        stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        return stamp.replace("+00:00", "Z")

    def _connect(self) -> sqlite3.Connection:
        try:
            return get_db_connection(self.db_file)
        except sqlite3.Error as e:
            raise StoreError(f"Could not connect to catalog database: {e}") from e

    # ------------------------- Core operations ------------------------- #
    def list_books(self) -> List[Book]:
        """List every book, newest first (fresh on each call)."""
        conn = self._connect()
        try:
            cursor = conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM books ORDER BY created_at DESC, rowid DESC"
            )
            return [Book.from_dict(dict(row)) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def add_book(self, candidate: Book) -> Book:
        """Validate and persist a candidate book, returning the stored record.

        The candidate's id and timestamps are ignored; the store assigns them.
        Raises ``ValidationError`` before touching the database when a
        required field is missing.
        """
        cleaned = BookSchema.validate(candidate.to_dict())
        now = self._now()
        book = Book(id=self.new_id(), created_at=now, updated_at=now, **cleaned)

        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO books (id, title, author, isbn, year, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (book.id, book.title, book.author, book.isbn, book.year,
                     book.created_at, book.updated_at),
                )
        # Integers past 64 bits and unpaired surrogates cannot be bound as parameters
        except (sqlite3.Error, OverflowError, UnicodeEncodeError) as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

        logger.info(f"Book stored: id={book.id} title={book.title!r}")
        return book

    def remove_book(self, book_id: str) -> Optional[Book]:
        """Delete a book by id and return it, or ``None`` when nothing matches."""
        if not self.is_valid_id(book_id):
            raise InvalidIdentifierError(book_id)
        # Stored ids are lowercase; hex digits match in either case
        book_id = book_id.lower()

        conn = self._connect()
        try:
            with conn:
                row = conn.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM books WHERE id = ?", (book_id,)
                ).fetchone()
                if row is None:
                    return None
                cursor = conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
                # A concurrent delete may have won the race
                if cursor.rowcount == 0:
                    return None
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

        logger.info(f"Book deleted: id={book_id}")
        return Book.from_dict(dict(row))

    # ------------------------- Health ------------------------- #
    def count(self) -> int:
        conn = self._connect()
        try:
            return conn.execute("SELECT COUNT(*) FROM books").fetchone()[0]
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            conn = self._connect()
        except StoreError:
            return False
        try:
            conn.execute("SELECT 1")
            return True
        except sqlite3.Error:
            return False
        finally:
            conn.close()
