"""Tests for SeedPipeline: mocked provider + real DB."""

import pytest
from unittest.mock import patch, MagicMock

from database import DatabaseManager
from errors import UpstreamFetchError
from models import TransactionFilter


def _make_mock_provider(transactions):
    provider = MagicMock()
    provider.url = "https://feed.example.com/tx.json"
    provider.fetch_transactions.return_value = transactions
    return provider


@pytest.fixture
def pipeline_db(tmp_path):
    """Yield db_path for pipeline tests. Pre-create schema."""
    db_path = str(tmp_path / "pipeline.db")
    db = DatabaseManager(db_uri=db_path)
    yield db, db_path
    db.close()


class TestSeedPipeline:
    """Test SeedPipeline with mocked provider and real DB."""

    def _run_pipeline(self, db_path, mock_provider):
        with patch("sources.product_feed.pipeline.ProductFeedProvider", return_value=mock_provider), \
             patch("sources.product_feed.pipeline.log"):
            from sources.product_feed.pipeline import SeedPipeline
            return SeedPipeline(db_uri=db_path).run()

    def test_end_to_end(self, pipeline_db, scenario_transactions):
        db, db_path = pipeline_db
        n = self._run_pipeline(db_path, _make_mock_provider(scenario_transactions))
        assert n == 3
        assert db.count(TransactionFilter()) == 3

    def test_replaces_existing(self, pipeline_db, sample_transaction, scenario_transactions):
        db, db_path = pipeline_db
        db.replace_all([sample_transaction(title="Stale")] * 5)
        self._run_pipeline(db_path, _make_mock_provider(scenario_transactions))
        titles = [t.title for t in db.find(TransactionFilter())]
        assert "Stale" not in titles
        assert len(titles) == 3

    def test_provider_closed(self, pipeline_db, scenario_transactions):
        _, db_path = pipeline_db
        provider = _make_mock_provider(scenario_transactions)
        self._run_pipeline(db_path, provider)
        provider.close.assert_called_once()

    def test_fetch_error_leaves_store_untouched(self, pipeline_db, scenario_transactions):
        db, db_path = pipeline_db
        db.replace_all(scenario_transactions)
        provider = _make_mock_provider([])
        provider.fetch_transactions.side_effect = UpstreamFetchError("feed down")
        with pytest.raises(UpstreamFetchError):
            self._run_pipeline(db_path, provider)
        assert db.count(TransactionFilter()) == 3


class TestMain:
    def test_exit_code_on_failure(self, tmp_path):
        from sources.product_feed import pipeline
        with patch.object(pipeline, "SeedPipeline") as seed_cls, \
             patch.object(pipeline, "log"), \
             patch("sys.argv", ["seed", "--db", str(tmp_path / "x.db")]):
            seed_cls.return_value.run.side_effect = UpstreamFetchError("feed down")
            assert pipeline.main() == 1

    def test_exit_code_on_success(self, tmp_path):
        from sources.product_feed import pipeline
        with patch.object(pipeline, "SeedPipeline") as seed_cls, \
             patch.object(pipeline, "log"), \
             patch("sys.argv", ["seed", "--url", "https://feed.example.com/tx.json"]):
            seed_cls.return_value.run.return_value = 3
            assert pipeline.main() == 0
            seed_cls.assert_called_once_with(url="https://feed.example.com/tx.json", db_uri=None)
