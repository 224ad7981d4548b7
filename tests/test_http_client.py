import httpx
import pytest

from smart_library.controller import CatalogController
from smart_library.errors import CatalogAPIError
from smart_library.services.http_client import CatalogHTTPClient
from smart_library.state import BookForm

pytestmark = pytest.mark.integration

DUNE = {"title": "Dune", "author": "Herbert", "isbn": "9780441013593", "year": 1965}


def test_create_list_delete_round_trip(api):
    created = api.create_book(DUNE)
    assert created.title == "Dune"
    assert created.id

    assert [b.id for b in api.list_books()] == [created.id]

    deleted = api.delete_book(created.id)
    assert deleted.id == created.id
    assert api.list_books() == []


def test_server_message_is_surfaced(api):
    with pytest.raises(CatalogAPIError) as excinfo:
        api.create_book({"title": "Dune"})
    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "All fields are required (title, author, isbn, year)"


def test_delete_unknown_id(api):
    with pytest.raises(CatalogAPIError) as excinfo:
        api.delete_book("c" * 24)
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Book not found"


def test_transport_failure_raises_api_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport = httpx.MockTransport(refuse)
    api = CatalogHTTPClient(client=httpx.Client(transport=transport, base_url="http://catalog.test"))

    with pytest.raises(CatalogAPIError) as excinfo:
        api.list_books()
    assert excinfo.value.status_code is None
    assert "connection refused" in excinfo.value.message


def test_controller_reconciles_without_refetch(api, lib):
    lib_book = api.create_book({**DUNE, "title": "Existing"})
    controller = CatalogController(api)
    controller.mount()

    form = BookForm(title="Emma", author="Jane Austen", isbn="0141439580", year="1815")
    added = controller.submit(form)

    assert [b.id for b in controller.state.books] == [added.id, lib_book.id]
    assert [b.id for b in controller.state.books] == [b.id for b in api.list_books()]

    assert controller.delete(added.id, lambda question: True, pytest.fail) is True
    assert [b.id for b in controller.state.books] == [lib_book.id]
    assert lib.count() == 1
