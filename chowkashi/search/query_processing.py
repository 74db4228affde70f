from __future__ import annotations

import logging

from ..llm.groq_client import infer_category
from .sanitize import normalize_whitespace

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: list[str] = [
    "restaurants",
    "cafes",
    "salons",
    "shopping",
    "health",
    "services",
    "education",
    "real-estate",
    "community",
    "fitness",
]

# Marketplace terms are checked first; the service categories below override them
_MARKETPLACE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("cars", ("car", "vehicle", "automobile", "suv", "hatchback", "sedan")),
    ("bikes", ("bike", "motorcycle", "scooter", "bullet", "ktm")),
    ("mobiles", ("mobile", "phone", "smartphone", "iphone", "android")),
    ("electronics", ("electronic", "laptop", "tv", "television", "computer")),
    ("furniture", ("furniture", "sofa", "table", "chair", "bed")),
    ("home_appliances", ("appliance", "refrigerator", "fridge", "washing machine", "microwave")),
]

_SERVICE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("fitness", ("yoga",)),
    ("restaurants", ("restaurant",)),
    ("cafes", ("café", "cafe", "coffee")),
    ("salons", ("salon", "haircut")),
    ("services", ("plumber",)),
    ("fitness", ("fitness", "gym")),
    ("restaurants", ("biryani", "food", "dinner", "lunch", "breakfast")),
]

_CAR_BRANDS = ("wrv", "honda", "maruti", "suzuki", "hyundai", "toyota", "bmw", "audi", "ford", "tata", "kia")


def _first_match(query: str, table: list[tuple[str, tuple[str, ...]]]) -> str | None:
    for category, words in table:
        if any(word in query for word in words):
            return category
    return None


def infer_category_from_keywords(query: str) -> str | None:
    normalized = normalize_whitespace(query.lower())
    inferred = _first_match(normalized, _MARKETPLACE_KEYWORDS)
    inferred = _first_match(normalized, _SERVICE_KEYWORDS) or inferred
    if any(brand in normalized for brand in _CAR_BRANDS):
        inferred = "cars"
    return inferred


def process_natural_language_query(
    query: str,
    category: str = "all",
    known_categories: list[str] | None = None,
    use_llm: bool = True,
) -> tuple[str, str]:
    """Return the processed query and the category to search in.

    An explicit category wins. Otherwise keywords decide, then the LLM; the
    category stays ``"all"`` when neither recognises the query.
    """
    processed = normalize_whitespace(query.lower())
    if category and category != "all":
        return processed, category

    inferred = infer_category_from_keywords(processed)
    if inferred is None and use_llm and processed:
        inferred = infer_category(processed, known_categories or DEFAULT_CATEGORIES)

    logger.info("Processed query %r, inferred category %s", processed, inferred or "all")
    return processed, inferred or "all"
