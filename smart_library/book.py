from __future__ import annotations

import math
from typing import Any, Dict, List, Tuple

from smart_library.errors import ValidationError


class Book:
    """A single book record in the catalog."""

    def __init__(self, title: Any, author: Any, isbn: Any, year: Any, id: str | None = None,
                 created_at: str | None = None, updated_at: str | None = None) -> None:
        self.id = id
        self.title = title
        self.author = author
        self.isbn = isbn
        self.year = year
        self.created_at = created_at
        self.updated_at = updated_at

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} ({self.year}, ISBN: {self.isbn})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "year": self.year,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        # SQLite rows use snake_case columns, API payloads use camelCase
        return Book(
            id=data.get("id", data.get("_id")),
            title=data.get("title"),
            author=data.get("author"),
            isbn=data.get("isbn"),
            year=data.get("year"),
            created_at=data.get("createdAt", data.get("created_at")),
            updated_at=data.get("updatedAt", data.get("updated_at")),
        )


class BookSchema:
    """Required-field contract shared by the API pre-check and the store guard.

    ``missing_fields`` answers the API question "is anything missing?" using
    JSON truthiness (``None``, ``""``, ``0`` and ``False`` count as missing).
    ``validate`` is the persistence guard: it trims text, coerces the year and
    raises ``ValidationError`` naming every offending field.
    """

    REQUIRED_FIELDS: Tuple[str, ...] = ("title", "author", "isbn", "year")
    TEXT_FIELDS: Tuple[str, ...] = ("title", "author", "isbn")
    REQUIRED_MESSAGES: Dict[str, str] = {
        "title": "Book title is required",
        "author": "Author name is required",
        "isbn": "ISBN is required",
        "year": "Publication year is required",
    }

    @staticmethod
    def is_blank(value: Any) -> bool:
        return value is None or value is False or value == "" or (
            isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0
        )

    @classmethod
    def missing_fields(cls, data: Dict[str, Any] | None) -> List[str]:
        data = data or {}
        return [name for name in cls.REQUIRED_FIELDS if cls.is_blank(data.get(name))]

    @classmethod
    def validate(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        errors: Dict[str, str] = {}
        cleaned: Dict[str, Any] = {}

        for name in cls.TEXT_FIELDS:
            try:
                cleaned[name] = cls._cast_text(name, data.get(name))
            except ValueError as e:
                errors[name] = str(e)
                continue
            if not cleaned[name]:
                errors[name] = cls.REQUIRED_MESSAGES[name]

        try:
            cleaned["year"] = cls.coerce_year(data.get("year"))
        except ValueError as e:
            errors["year"] = str(e)

        if errors:
            raise ValidationError(errors)
        return cleaned

    @staticmethod
    def _cast_text(name: str, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise ValueError(f'Cast to string failed for value "{value}" at path "{name}"')

    @classmethod
    def coerce_year(cls, value: Any) -> int:
        """Coerce a number or numeric string to an integer year."""
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError(cls.REQUIRED_MESSAGES["year"])
        if isinstance(value, bool):
            raise ValueError(f'Cast to Number failed for value "{value}" at path "year"')
        if isinstance(value, int):
            return value
        number = value
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                number = float(text)
            except ValueError:
                raise ValueError(f'Cast to Number failed for value "{value}" at path "year"') from None
        if isinstance(number, float):
            if not math.isfinite(number):
                raise ValueError(f'Cast to Number failed for value "{value}" at path "year"')
            # Fractional years are truncated toward zero
            return int(number)
        raise ValueError(f'Cast to Number failed for value "{value}" at path "year"')
