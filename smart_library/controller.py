import logging
from typing import Callable, Optional

from smart_library.book import Book
from smart_library.errors import CatalogAPIError
from smart_library.services.http_client import CatalogHTTPClient
from smart_library.state import BookForm, CatalogState

logger = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load books. Please make sure the server is running."
ADD_ERROR = "Failed to add book. Please try again."
ADD_SUCCESS = "Book added successfully!"
DELETE_ERROR = "Failed to delete book. Please try again."


class CatalogController:
    """Drives a CatalogState from user actions and API results."""

    def __init__(self, api: CatalogHTTPClient, state: Optional[CatalogState] = None) -> None:
        self.api = api
        self.state = state if state is not None else CatalogState()

    def mount(self) -> CatalogState:
        """Fetch the full list and replace the local one."""
        self.state.start_loading()
        try:
            books = self.api.list_books()
        except CatalogAPIError as e:
            logger.error(f"Error fetching books: {e}")
            self.state.error_set(LOAD_ERROR)
        else:
            self.state.list_loaded(books)
        return self.state

    def submit(self, form: BookForm) -> Optional[Book]:
        """Submit the add form; on success the new book is prepended locally."""
        if form.loading:
            return None

        problem = form.validate()
        if problem:
            form.error = problem
            return None

        form.loading = True
        form.error = ""
        try:
            book = self.api.create_book(form.payload())
        except CatalogAPIError as e:
            form.error = e.message or ADD_ERROR
            return None
        finally:
            form.loading = False

        self.state.create_succeeded(book)
        form.reset()
        form.success = ADD_SUCCESS
        return book

    def delete(self, book_id: str, confirm: Callable[[str], bool],
               alert: Callable[[str], None]) -> bool:
        """Ask for confirmation, then delete and drop the book locally."""
        book = self.state.find(book_id)
        title = book.title if book else book_id
        if not confirm(f'Are you sure you want to delete "{title}"?'):
            return False

        try:
            self.api.delete_book(book_id)
        except CatalogAPIError as e:
            logger.error(f"Error deleting book: {e}")
            alert(DELETE_ERROR)
            return False

        self.state.delete_succeeded(book_id)
        return True
