from dataclasses import dataclass, field
from typing import List, Optional

from smart_library.book import Book

YEAR_MIN = 1000
YEAR_MAX = 2100

FORM_FIELDS = ("title", "author", "isbn", "year")


@dataclass
class CatalogState:
    """Client-side view of the catalog, changed only through named transitions."""

    books: List[Book] = field(default_factory=list)
    loading: bool = True
    error: str = ""

    def start_loading(self) -> None:
        self.loading = True
        self.error = ""

    def list_loaded(self, books: List[Book]) -> None:
        # Server order is kept as-is (newest first)
        self.books = list(books)
        self.loading = False

    def error_set(self, message: str) -> None:
        self.error = message
        self.loading = False

    def create_succeeded(self, book: Book) -> None:
        self.books = [book] + self.books

    def delete_succeeded(self, book_id: str) -> None:
        self.books = [book for book in self.books if book.id != book_id]

    def find(self, book_id: str) -> Optional[Book]:
        return next((book for book in self.books if book.id == book_id), None)


@dataclass
class BookForm:
    """State of the add-book form."""

    title: str = ""
    author: str = ""
    isbn: str = ""
    year: str = ""
    loading: bool = False
    error: str = ""
    success: str = ""

    def update(self, name: str, value: str) -> None:
        if name not in FORM_FIELDS:
            raise KeyError(name)
        setattr(self, name, value)
        self.error = ""
        self.success = ""

    def validate(self) -> Optional[str]:
        """Return an error message if the form may not be submitted."""
        if not all(getattr(self, name) for name in FORM_FIELDS):
            return "Please fill in all fields"
        try:
            year = int(str(self.year).strip())
        except ValueError:
            return "Publication year must be a number"
        if not YEAR_MIN <= year <= YEAR_MAX:
            return f"Publication year must be between {YEAR_MIN} and {YEAR_MAX}"
        return None

    def payload(self) -> dict:
        return {
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "year": int(str(self.year).strip()),
        }

    def reset(self) -> None:
        self.title = self.author = self.isbn = self.year = ""
