import json
import os
from typing import List, Optional

from rich import box
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from smart_library.book import Book
from smart_library.config import settings
from smart_library.state import BookForm, CatalogState

# Environment variable to control CLI output mode
# Allowed values: 'rich' (default), 'plain', 'json'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"
OUTPUT_MODES = {"rich", "plain", "json"}

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in OUTPUT_MODES:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    mode = os.environ.get(OUTPUT_MODE_ENV, "rich").lower()
    return mode if mode in OUTPUT_MODES else "rich"


def select_view(state: CatalogState) -> str:
    """Pick which view the state calls for: loading, error, empty or list."""
    if state.loading:
        return "loading"
    if state.error:
        return "error"
    if not state.books:
        return "empty"
    return "list"


def select_layout(width: int, breakpoint: Optional[int] = None) -> str:
    """Table layout on wide terminals, cards on narrow ones."""
    limit = settings.list_breakpoint if breakpoint is None else breakpoint
    return "table" if width >= limit else "cards"


def _count_label(books: List[Book]) -> str:
    return f"{len(books)} {'Book' if len(books) == 1 else 'Books'}"


def _book_table(books: List[Book]) -> Table:
    table = Table(title=f"📚 Book Collection ({_count_label(books)})", show_lines=True,
                  header_style="bold cyan", box=box.ROUNDED)
    table.add_column("#", style="dim", justify="right")
    table.add_column("ID", style="magenta", no_wrap=True)
    table.add_column("Title", style="bold white")
    table.add_column("Author", style="white")
    table.add_column("ISBN", style="green", no_wrap=True)
    table.add_column("Year", justify="right")
    for index, book in enumerate(books, 1):
        table.add_row(str(index), book.id or "", escape(str(book.title)), escape(str(book.author)),
                      escape(str(book.isbn)), str(book.year))
    return table


def _book_cards(books: List[Book]) -> Group:
    cards = [
        Panel(
            f"Author: {escape(str(book.author))}\n"
            f"ISBN: [green]{escape(str(book.isbn))}[/]\n"
            f"Year: {book.year}\n"
            f"[dim]ID: {book.id}[/]",
            title=f"[bold]{escape(str(book.title))}[/]",
            title_align="left",
            border_style="cyan",
        )
        for book in books
    ]
    return Group(f"[bold]📚 Book Collection[/] ({_count_label(books)})", *cards)


def render_catalog(state: CatalogState, console: Optional[Console] = None) -> None:
    """Print the catalog for the current state and output mode."""
    console = console or _console
    mode = get_output_mode()
    view = select_view(state)

    if mode == "json":
        if view == "error":
            print(json.dumps({"error": state.error}, ensure_ascii=False))
        elif view != "loading":
            print(json.dumps([book.to_dict() for book in state.books], ensure_ascii=False))
        return

    if view == "loading":
        console.print("Loading books...")
    elif view == "error":
        if mode == "plain":
            console.print(f"Error: {state.error}", markup=False)
        else:
            console.print(Panel(escape(state.error), title="Error", border_style="red"))
    elif view == "empty":
        console.print("No Books Found")
        console.print("Add a book to get started", style="dim")
    elif mode == "plain":
        for book in state.books:
            console.print(f"{book.id} - {book.title} by {book.author} ({book.year})", markup=False)
    elif select_layout(console.width) == "table":
        console.print(_book_table(state.books))
    else:
        console.print(_book_cards(state.books))


def render_form_feedback(form: BookForm, console: Optional[Console] = None) -> None:
    """Print the form's inline error or success message, if any."""
    console = console or _console
    if form.error:
        console.print(f"[bold red]✗[/] {escape(form.error)}")
    if form.success:
        console.print(f"[bold green]✓[/] {escape(form.success)}")


def render_alert(message: str, console: Optional[Console] = None) -> None:
    console = console or _console
    console.print(Panel.fit(escape(message), title="⚠️  Alert", border_style="red"))
