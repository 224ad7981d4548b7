from unittest.mock import MagicMock

import pytest

from smart_library.book import Book
from smart_library.controller import (
    ADD_ERROR,
    ADD_SUCCESS,
    DELETE_ERROR,
    LOAD_ERROR,
    CatalogController,
)
from smart_library.errors import CatalogAPIError
from smart_library.state import BookForm, CatalogState


def _book(book_id, title="Dune"):
    return Book(id=book_id, title=title, author="Frank Herbert", isbn="9780441013593", year=1965,
                created_at="2024-01-01T00:00:00.000Z", updated_at="2024-01-01T00:00:00.000Z")


def _filled_form(**overrides):
    values = {"title": "Dune", "author": "Frank Herbert", "isbn": "9780441013593", "year": "1965"}
    values.update(overrides)
    return BookForm(**values)


# ------------------------- CatalogState ------------------------- #
def test_initial_state_is_loading():
    state = CatalogState()
    assert state.loading is True
    assert state.books == []
    assert state.error == ""


def test_list_loaded_replaces_books_and_stops_loading():
    state = CatalogState(books=[_book("old")])
    state.list_loaded([_book("a"), _book("b")])
    assert [b.id for b in state.books] == ["a", "b"]
    assert state.loading is False


def test_start_loading_clears_error():
    state = CatalogState(loading=False, error="boom")
    state.start_loading()
    assert state.loading is True
    assert state.error == ""


def test_create_succeeded_prepends():
    state = CatalogState(books=[_book("a")], loading=False)
    state.create_succeeded(_book("new"))
    assert [b.id for b in state.books] == ["new", "a"]


def test_delete_succeeded_removes_only_matching_id():
    state = CatalogState(books=[_book("a"), _book("b"), _book("c")], loading=False)
    state.delete_succeeded("b")
    assert [b.id for b in state.books] == ["a", "c"]


# ------------------------- BookForm ------------------------- #
def test_update_clears_messages():
    form = BookForm(error="bad", success="good")
    form.update("title", "Emma")
    assert form.title == "Emma"
    assert form.error == ""
    assert form.success == ""


def test_update_unknown_field():
    with pytest.raises(KeyError):
        BookForm().update("publisher", "Penguin")


@pytest.mark.parametrize("field", ["title", "author", "isbn", "year"])
def test_validate_requires_every_field(field):
    form = _filled_form(**{field: ""})
    assert form.validate() == "Please fill in all fields"


@pytest.mark.parametrize("year", ["999", "2101", "soon"])
def test_validate_rejects_bad_years(year):
    assert _filled_form(year=year).validate() is not None


@pytest.mark.parametrize("year", ["1000", "2100", "1965"])
def test_validate_accepts_years_in_range(year):
    assert _filled_form(year=year).validate() is None


def test_payload_converts_year():
    assert _filled_form().payload()["year"] == 1965


# ------------------------- CatalogController ------------------------- #
def test_mount_loads_books():
    api = MagicMock()
    api.list_books.return_value = [_book("a")]
    controller = CatalogController(api)

    state = controller.mount()

    assert [b.id for b in state.books] == ["a"]
    assert state.loading is False
    assert state.error == ""


def test_mount_failure_sets_fixed_error():
    api = MagicMock()
    api.list_books.side_effect = CatalogAPIError("connection refused")
    controller = CatalogController(api)

    state = controller.mount()

    assert state.error == LOAD_ERROR
    assert state.books == []
    assert state.loading is False


def test_submit_prepends_and_resets_form():
    api = MagicMock()
    api.create_book.return_value = _book("new")
    controller = CatalogController(api, CatalogState(books=[_book("a")], loading=False))
    form = _filled_form()

    book = controller.submit(form)

    assert book.id == "new"
    api.create_book.assert_called_once_with(
        {"title": "Dune", "author": "Frank Herbert", "isbn": "9780441013593", "year": 1965}
    )
    api.list_books.assert_not_called()
    assert [b.id for b in controller.state.books] == ["new", "a"]
    assert (form.title, form.author, form.isbn, form.year) == ("", "", "", "")
    assert form.success == ADD_SUCCESS
    assert form.loading is False


def test_submit_invalid_form_never_calls_api():
    api = MagicMock()
    controller = CatalogController(api, CatalogState(loading=False))
    form = _filled_form(author="")

    assert controller.submit(form) is None
    assert form.error == "Please fill in all fields"
    api.create_book.assert_not_called()


def test_submit_ignored_while_pending():
    api = MagicMock()
    controller = CatalogController(api, CatalogState(loading=False))
    form = _filled_form()
    form.loading = True

    assert controller.submit(form) is None
    api.create_book.assert_not_called()


def test_submit_failure_shows_server_message_and_keeps_books():
    api = MagicMock()
    api.create_book.side_effect = CatalogAPIError("All fields are required (title, author, isbn, year)", 400)
    controller = CatalogController(api, CatalogState(books=[_book("a")], loading=False))
    form = _filled_form()

    assert controller.submit(form) is None
    assert form.error == "All fields are required (title, author, isbn, year)"
    assert form.title == "Dune"
    assert [b.id for b in controller.state.books] == ["a"]
    assert form.loading is False


def test_submit_failure_without_message_uses_generic_text():
    api = MagicMock()
    api.create_book.side_effect = CatalogAPIError("")
    controller = CatalogController(api, CatalogState(loading=False))
    form = _filled_form()

    controller.submit(form)

    assert form.error == ADD_ERROR


def test_delete_asks_with_title_then_removes_locally():
    api = MagicMock()
    controller = CatalogController(api, CatalogState(books=[_book("a", "Emma"), _book("b")], loading=False))
    confirm = MagicMock(return_value=True)
    alert = MagicMock()

    assert controller.delete("a", confirm, alert) is True

    confirm.assert_called_once_with('Are you sure you want to delete "Emma"?')
    api.delete_book.assert_called_once_with("a")
    alert.assert_not_called()
    assert [b.id for b in controller.state.books] == ["b"]


def test_delete_declined_does_nothing():
    api = MagicMock()
    controller = CatalogController(api, CatalogState(books=[_book("a")], loading=False))

    assert controller.delete("a", lambda question: False, MagicMock()) is False
    api.delete_book.assert_not_called()
    assert len(controller.state.books) == 1


def test_delete_failure_alerts_and_keeps_books():
    api = MagicMock()
    api.delete_book.side_effect = CatalogAPIError("Book not found", 404)
    controller = CatalogController(api, CatalogState(books=[_book("a")], loading=False))
    alert = MagicMock()

    assert controller.delete("a", lambda question: True, alert) is False
    alert.assert_called_once_with(DELETE_ERROR)
    assert [b.id for b in controller.state.books] == ["a"]
