import pytest
from fastapi.testclient import TestClient

from smart_library.api import create_app
from smart_library.library import Library
from smart_library.services.http_client import CatalogHTTPClient


@pytest.fixture
def lib(tmp_path, request):
    # A unique database file for each test
    db_file = str(tmp_path / f"test_{request.node.name}.db")
    return Library(db_file=db_file)


@pytest.fixture
def client(lib):
    return TestClient(create_app(lib))


@pytest.fixture
def api(client):
    # The HTTP client talks to the in-process app through the TestClient transport
    return CatalogHTTPClient(client=client)


@pytest.fixture(autouse=True)
def _default_output_mode(monkeypatch):
    monkeypatch.delenv("LIB_CLI_OUTPUT", raising=False)
