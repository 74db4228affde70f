from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from .sanitize import validate_postal_code

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InvalidPostalCode(ValueError):
    """Raised for postal-code input that must not reach the query layer."""

    def __init__(self, title: str, description: str) -> None:
        super().__init__(f"{title}: {description}")
        self.title = title
        self.description = description


class PostalCodeSearch(Generic[T]):
    """Validate postal-code input before handing it to *search*."""

    def __init__(self, search: Callable[[str], T]) -> None:
        self._search = search

    def submit(self, raw: str | None) -> T:
        postal_code = (raw or "").strip()
        if not postal_code:
            raise InvalidPostalCode(
                "Please enter a postal code",
                "Enter a 6-digit postal code to search for listings",
            )
        if not validate_postal_code(postal_code):
            raise InvalidPostalCode("Invalid postal code", "Postal code must be 6 digits")

        logger.info("Searching listings with postal code %s", postal_code)
        return self._search(postal_code)

    def clear(self) -> T:
        """Search with an empty postal code, which removes the filter."""
        return self._search("")
