from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from chowkashi.datastore.client import set_client
from chowkashi.datastore.reviews import aggregate_reviews, fetch_review_aggregates

ROWS = [
    {"business_id": "a", "rating": 5, "criteria_ratings": {"service": 5, "value": 4}},
    {"business_id": "a", "rating": 3, "criteria_ratings": {"service": 3}},
    {"business_id": "b", "rating": 4, "criteria_ratings": None},
    {"business_id": "zzz", "rating": 1, "criteria_ratings": {}},
]


def test_aggregate_reviews():
    result = aggregate_reviews(ROWS, ["a", "b", "c"])

    assert set(result) == {"a", "b", "c"}
    assert result["a"].average_rating == pytest.approx(4.0)
    assert result["a"].review_count == 2
    assert result["a"].average_criteria_ratings == {"service": pytest.approx(4.0), "value": pytest.approx(4.0)}
    assert result["b"].average_rating == pytest.approx(4.0)
    assert result["b"].average_criteria_ratings == {}
    assert result["c"].review_count == 0
    assert result["c"].average_rating == 0.0


def test_aggregate_reviews_json_criteria():
    rows = [{"business_id": "a", "rating": 4, "criteria_ratings": '{"cleanliness": 2}'}]
    assert aggregate_reviews(rows, ["a"])["a"].average_criteria_ratings == {"cleanliness": 2.0}


def test_fetch_review_aggregates_queries_business_reviews():
    query = MagicMock()
    query.select.return_value = query
    query.in_.return_value = query
    query.execute.return_value = MagicMock(data=ROWS[:2])
    client = MagicMock()
    client.table.return_value = query
    set_client(client)
    try:
        result = fetch_review_aggregates(["a", "b"])
    finally:
        set_client(None)

    client.table.assert_called_once_with("business_reviews")
    query.in_.assert_called_once_with("business_id", ["a", "b"])
    assert result["a"].review_count == 2
    assert result["b"].review_count == 0


def test_fetch_review_aggregates_failure_gives_zeros():
    client = MagicMock()
    client.table.side_effect = Exception("offline")
    set_client(client)
    try:
        result = fetch_review_aggregates(["a"])
    finally:
        set_client(None)
    assert result["a"].review_count == 0


def test_fetch_review_aggregates_no_ids():
    assert fetch_review_aggregates([]) == {}
