"""Shared fixtures for the test suite."""

import pytest
from unittest.mock import MagicMock

from database import DatabaseManager
from models import Transaction


@pytest.fixture
def tmp_db(tmp_path):
    """Fresh DatabaseManager backed by a real SQLite DB in tmp_path."""
    db_path = str(tmp_path / "test.db")
    db = DatabaseManager(db_uri=db_path)
    yield db
    db.close()


@pytest.fixture
def mock_response():
    """Factory for mock HTTP responses."""
    def _make(status_code=200, json_data=None):
        resp = MagicMock()
        resp.status_code = status_code
        resp.json.return_value = json_data if json_data is not None else []
        # truthy when status_code is 2xx
        resp.__bool__ = lambda self: 200 <= self.status_code < 300
        return resp
    return _make


@pytest.fixture
def sample_transaction():
    """Factory fixture: call with overrides to get a Transaction."""
    def _make(**overrides):
        record = {
            "title": "Fjallraven Backpack",
            "description": "Your perfect pack for everyday use",
            "price": 109.95,
            "category": "men's clothing",
            "image": "https://example.com/img.jpg",
            "sold": False,
            "dateOfSale": "2021-11-27T20:29:54+05:30",
        }
        record.update(overrides)
        return Transaction.model_validate(record)
    return _make


@pytest.fixture
def scenario_transactions(sample_transaction):
    """Two March sales (50 sold, 150 unsold) and one unsold April sale at 1000."""
    return [
        sample_transaction(title="Cotton Tee", price=50, sold=True,
                           category="clothing", dateOfSale="2022-03-05T10:00:00Z"),
        sample_transaction(title="Desk Lamp", price=150, sold=False,
                           category="home", dateOfSale="2021-03-20T10:00:00Z"),
        sample_transaction(title="Gaming Laptop", price=1000, sold=False,
                           category="electronics", dateOfSale="2022-04-11T10:00:00Z"),
    ]


@pytest.fixture
def seeded_db(tmp_db, scenario_transactions):
    tmp_db.replace_all(scenario_transactions)
    return tmp_db
