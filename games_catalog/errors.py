"""Exception types raised by the catalog core."""

from __future__ import annotations

from typing import Any

ERROR_MESSAGES = {
    "ELASTIC_NOT_CONFIGURED": "Search backend address could not be derived",
    "SEARCH_BACKEND_FAILURE": "Search backend request failed",
    "DATA_ACCESS_FAILURE": "Catalog store is unavailable",
    "INVALID_DISCOUNT": "Discount percentage must be between 0 and 100 (exclusive)",
    "INVALID_WINDOW": "Promotion end date must be after its start date",
    "MISSING_SEARCH_PARAMETER": "Query parameter 'name' or 'genre' is required",
    "MISSING_GAME_IDS": "At least one game id is required",
    "INVALID_GENRE": "Genre id must be a positive integer and name is required",
    "GENRE_EXISTS": "Genre with the specified id already exists",
}


class CatalogError(Exception):
    """Structured exception carrying a stable code and context data."""

    def __init__(self, code: str, message: str = "", **data: Any) -> None:
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "data": {key: str(value) for key, value in self.data.items()},
        }


class ConfigurationError(CatalogError):
    """The search backend address cannot be derived from settings."""

    def __init__(self, message: str = "", **data: Any) -> None:
        super().__init__("ELASTIC_NOT_CONFIGURED", message, **data)


class SearchBackendError(CatalogError):
    """Non-2xx answer or transport failure from the search backend."""

    def __init__(
        self,
        message: str = "",
        *,
        status_code: int | None = None,
        **data: Any,
    ) -> None:
        self.status_code = status_code
        super().__init__("SEARCH_BACKEND_FAILURE", message, **data)


class DataAccessError(CatalogError):
    """The relational store could not be reached or rejected a statement."""

    def __init__(self, message: str = "", **data: Any) -> None:
        super().__init__("DATA_ACCESS_FAILURE", message, **data)


class CatalogValidationError(CatalogError):
    """Input rejected before any I/O."""


class CatalogConflictError(CatalogError):
    """Write rejected because the target already exists."""
