"""Smart Library - Core Application Package

This package contains the catalog modules:
- REST API endpoints (api.py)
- Catalog store (library.py) over SQLite (database.py)
- Book record and shared schema (book.py)
- Client state, controller and rendering (state.py, controller.py, ui_helpers.py)
- CLI interface (cli.py)
"""

__version__ = "1.0.0"
