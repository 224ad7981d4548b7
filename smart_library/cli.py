import json
import subprocess
import sys
from typing import Callable, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from smart_library.config import settings
from smart_library.controller import CatalogController
from smart_library.services.http_client import CatalogHTTPClient
from smart_library.state import FORM_FIELDS, BookForm
from smart_library.ui_helpers import (
    get_output_mode,
    render_alert,
    render_catalog,
    render_form_feedback,
    set_output_mode,
)

APP_NAME = "Smart Library CLI"

console = Console()

app = typer.Typer(help=APP_NAME)


def get_api_client() -> CatalogHTTPClient:
    """Client for the configured API; tests swap this out."""
    return CatalogHTTPClient()


def _mount(api: CatalogHTTPClient) -> CatalogController:
    controller = CatalogController(api)
    if console.is_terminal:
        with console.status("Loading books..."):
            controller.mount()
    else:
        controller.mount()
    return controller


def _confirm(question: str) -> bool:
    return Confirm.ask(escape(question), console=console, default=False)


def _alert_collector(failures: List[str]) -> Callable[[str], None]:
    def alert(message: str) -> None:
        failures.append(message)
        render_alert(message, console)
    return alert


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: rich | plain | json (default: rich)",
    )
):
    """Global CLI options (e.g. output mode)."""
    if output:
        set_output_mode(output)


@app.command("list")
def cli_list():
    """List all books, newest first."""
    with get_api_client() as api:
        controller = _mount(api)
    render_catalog(controller.state, console)
    if controller.state.error:
        raise typer.Exit(code=1)


@app.command("add")
def cli_add(
    title: str = typer.Option("", "--title", "-t", help="Book title"),
    author: str = typer.Option("", "--author", "-a", help="Author name"),
    isbn: str = typer.Option("", "--isbn", "-i", help="ISBN number"),
    year: str = typer.Option("", "--year", "-y", help="Publication year (1000-2100)"),
):
    """Add a new book."""
    form = BookForm(title=title, author=author, isbn=isbn, year=year)
    with get_api_client() as api:
        book = CatalogController(api).submit(form)

    if book is None:
        render_form_feedback(form, console)
        raise typer.Exit(code=1)

    if get_output_mode() == "json":
        print(json.dumps(book.to_dict(), ensure_ascii=False))
        return
    render_form_feedback(form, console)
    console.print(f"[bold]{escape(str(book.title))}[/] by {escape(str(book.author))} [dim](id: {book.id})[/]")


@app.command("remove")
def cli_remove(
    book_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Delete without asking for confirmation"),
):
    """Delete a book by its id."""
    failures: List[str] = []
    with get_api_client() as api:
        # The list is needed so the confirmation can name the book
        controller = _mount(api)
        removed = controller.delete(
            book_id,
            confirm=(lambda question: True) if yes else _confirm,
            alert=_alert_collector(failures),
        )

    if removed:
        console.print(f"Book {book_id} deleted.")
    elif failures:
        raise typer.Exit(code=1)
    else:
        console.print("Deletion cancelled.")


def _render_menu() -> None:
    menu_items = [
        ("1", "Refresh book list", "🔄"),
        ("2", "Add a book", "➕"),
        ("3", "Delete a book", "🗑️"),
        ("0", "Exit", "🚪"),
    ]
    table = Table.grid(padding=(0, 2))
    table.add_column(justify="right", style="bold cyan", width=4)
    table.add_column(justify="left", style="white")
    for key, label, icon in menu_items:
        table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")
    console.print(Panel(table, title=APP_NAME, border_style="cyan", box=box.HEAVY, padding=(1, 2)))


def _fill_form(form: BookForm) -> None:
    labels = {"title": "Book title", "author": "Author name", "isbn": "ISBN number", "year": "Publication year"}
    for name in FORM_FIELDS:
        value = Prompt.ask(labels[name], console=console, default=getattr(form, name) or None)
        form.update(name, (value or "").strip())


@app.command("menu")
def cli_menu():
    """Interactive session that keeps the book list in memory between actions."""
    failures: List[str] = []
    with get_api_client() as api:
        controller = _mount(api)
        form = BookForm()
        while True:
            render_catalog(controller.state, console)
            _render_menu()
            choice = Prompt.ask("Choose an option", choices=["1", "2", "3", "0"], default="1", console=console)

            if choice == "1":
                controller.mount()
            elif choice == "2":
                _fill_form(form)
                controller.submit(form)
                render_form_feedback(form, console)
            elif choice == "3":
                book_id = Prompt.ask("Book ID", console=console).strip()
                controller.delete(book_id, confirm=_confirm, alert=_alert_collector(failures))
            else:
                console.print("[green]Goodbye![/]")
                break
            console.print()


@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind (default from API_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", help="Port to listen on (default from API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Restart the server when code changes"),
):
    """Start the catalog API with uvicorn."""
    host = host or settings.api_host
    port = int(port or settings.api_port)
    console.print(f"Starting catalog API on http://{host}:{port}/")
    args = [
        sys.executable,
        "-m", "uvicorn",
        "smart_library.api:create_app",
        "--factory",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        args.append("--reload")
    try:
        subprocess.run(args, check=False)
    except FileNotFoundError:
        console.print("[bold red]Error:[/] could not launch uvicorn. Make sure it is installed.")
        raise typer.Exit(code=1)


def main() -> None:
    if len(sys.argv) > 1:
        app()
    else:
        app(["menu"])


if __name__ == "__main__":
    main()
