from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from chowkashi.search.postal import InvalidPostalCode, PostalCodeSearch
from chowkashi.search.sanitize import validate_postal_code


@pytest.mark.parametrize("raw", ["12345", "1234567", "56OO01", "560 001", "abcdef", "٥٦٠٠٠١", "56000\n1"])
def test_invalid_postal_codes_never_reach_search(raw):
    search = MagicMock()
    with pytest.raises(InvalidPostalCode) as exc:
        PostalCodeSearch(search).submit(raw)
    assert exc.value.title == "Invalid postal code"
    search.assert_not_called()


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_empty_postal_code_prompts(raw):
    search = MagicMock()
    with pytest.raises(InvalidPostalCode) as exc:
        PostalCodeSearch(search).submit(raw)
    assert exc.value.title == "Please enter a postal code"
    search.assert_not_called()


def test_valid_postal_code_is_trimmed_and_searched():
    search = MagicMock(return_value=["result"])
    assert PostalCodeSearch(search).submit("  560034 ") == ["result"]
    search.assert_called_once_with("560034")


def test_clear_searches_with_empty_code():
    search = MagicMock()
    PostalCodeSearch(search).clear()
    search.assert_called_once_with("")


@pytest.mark.parametrize("raw", ["560001\n", "٥٦٠٠٠١", "５６０００１"])
def test_validate_postal_code_accepts_only_six_ascii_digits(raw):
    assert validate_postal_code(raw) is False
