import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from smart_library.book import Book, BookSchema
from smart_library.config import settings
from smart_library.errors import CatalogError, StoreError
from smart_library.library import Library

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "All fields are required (title, author, isbn, year)"


# --- Models ---
class BookModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    author: str
    isbn: str
    year: int
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")

    @classmethod
    def from_book(cls, book: Book) -> "BookModel":
        return cls(**book.to_dict())


class BookCreateModel(BaseModel):
    """Create payload. Fields stay loosely typed so the handler can answer 400 itself."""
    title: Any = None
    author: Any = None
    isbn: Any = None
    year: Any = None


class DeleteResponseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    deleted_book: BookModel = Field(alias="deletedBook")


# --- Helpers ---
def _error_response(status_code: int, message: str, error: Optional[Exception] = None) -> JSONResponse:
    content = {"message": message}
    if error is not None:
        content["error"] = str(error)
    return JSONResponse(status_code=status_code, content=content)


def get_library(request: Request) -> Library:
    """Dependency returning the store attached to the running app."""
    return request.app.state.library


async def _invalid_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Rejected request body on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request body", "error": str(exc.errors())},
    )


# --- Book routes ---
router = APIRouter(prefix="/api/books", tags=["books"])


@router.get("", response_model=List[BookModel])
@router.get("/", response_model=List[BookModel], include_in_schema=False)
def list_books(library: Library = Depends(get_library)):
    """Return every book, newest first."""
    try:
        books = library.list_books()
    except CatalogError as e:
        logger.error(f"Error fetching books: {e}")
        return _error_response(500, "Failed to fetch books", e)
    return [BookModel.from_book(book) for book in books]


@router.post("", response_model=BookModel, status_code=201)
@router.post("/", response_model=BookModel, status_code=201, include_in_schema=False)
def add_book(payload: Optional[BookCreateModel] = None, library: Library = Depends(get_library)):
    """Add a new book. All four fields are required."""
    data = payload.model_dump() if payload is not None else {}
    if BookSchema.missing_fields(data):
        return _error_response(400, REQUIRED_FIELDS_MESSAGE)

    try:
        book = library.add_book(Book(**data))
    except CatalogError as e:
        logger.error(f"Error adding book: {e}")
        return _error_response(500, "Failed to add book", e)
    return BookModel.from_book(book)


@router.delete("/{book_id}", response_model=DeleteResponseModel)
def delete_book(book_id: str, library: Library = Depends(get_library)):
    """Remove a book by its id."""
    try:
        deleted = library.remove_book(book_id)
    except CatalogError as e:
        # Malformed ids land here too and answer 500 like any store failure
        logger.error(f"Error deleting book: {e}")
        return _error_response(500, "Failed to delete book", e)

    if deleted is None:
        return _error_response(404, "Book not found")
    return DeleteResponseModel(message="Book deleted successfully", deleted_book=BookModel.from_book(deleted))


# --- Status routes ---
status_router = APIRouter(tags=["status"])


@status_router.get("/")
def root():
    """Basic route to check the server is running."""
    return {"message": "Smart Library System API is running!"}


@status_router.get("/health")
def health(library: Library = Depends(get_library)):
    """Lightweight health endpoint: store reachability and book count."""
    db_ok = library.ping()
    total_books = 0
    if db_ok:
        try:
            total_books = library.count()
        except StoreError:
            db_ok = False
    return {
        "status": "healthy" if db_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "total_books": total_books,
        "db": db_ok,
    }


def create_app(library: Optional[Library] = None) -> FastAPI:
    """Build the API application around a store (a default one if omitted)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{settings.app_name} API serving catalog at {app.state.library.db_file}")
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.library = library or Library()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _invalid_body_handler)

    app.include_router(router)
    app.include_router(status_router)
    return app
