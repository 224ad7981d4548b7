from typing import Dict, Optional


class CatalogError(Exception):
    """Base class for catalog errors."""
    pass


class ValidationError(CatalogError):
    """A book record failed the schema guard."""

    def __init__(self, errors: Dict[str, str]) -> None:
        self.errors = dict(errors)
        details = ", ".join(f"{name}: {msg}" for name, msg in self.errors.items())
        super().__init__(f"Book validation failed: {details}")


class StoreError(CatalogError):
    """The store could not complete an operation."""
    pass


class InvalidIdentifierError(StoreError):
    """The identifier is not well formed for the store's addressing scheme."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(
            f'Cast to ObjectId failed for value "{value}" (type {type(value).__name__}) at path "id" for model "Book"'
        )


class CatalogAPIError(CatalogError):
    """An HTTP call to the catalog API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)
