"""
Product feed provider.

Fetches the full product-transaction dataset from the remote JSON feed in a
single GET. No API key, no pagination: the whole array arrives at once.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError as ModelValidationError

from api.config import settings
from errors import UpstreamFetchError
from models import Transaction
from utils.session import RequestSession

logger = logging.getLogger(__name__)


class ProductFeedProvider:
    """Provider for the remote product transactions feed."""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url or settings.SOURCE_URL
        self.session = RequestSession(timeout=timeout or settings.SOURCE_TIMEOUT)
        self.name = "product-feed"

    def fetch_transactions(self) -> List[Transaction]:
        """
        Fetch and validate every transaction in the feed.

        Returns:
            List of Transaction models (ids unset, assigned by the store)

        Raises:
            UpstreamFetchError: feed unreachable, non-2xx, non-JSON, not a
                JSON array, or a record that fails validation
        """
        resp = self.session.get(self.url)
        if resp is None:
            raise UpstreamFetchError(f"Failed to fetch product feed from {self.url}")
        if not resp:
            raise UpstreamFetchError(
                f"Product feed returned HTTP {resp.status_code} from {self.url}"
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamFetchError(f"Product feed returned invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise UpstreamFetchError(
                f"Product feed returned {type(data).__name__}, expected a JSON array"
            )

        transactions = []
        for i, record in enumerate(data):
            if not isinstance(record, dict):
                raise UpstreamFetchError(f"Product feed record {i} is not an object")
            record = {k: v for k, v in record.items() if k != "id"}
            try:
                transactions.append(Transaction.model_validate(record))
            except ModelValidationError as e:
                raise UpstreamFetchError(f"Product feed record {i} is invalid: {e}") from e

        logger.info(f"Fetched {len(transactions)} transactions from {self.name}")
        return transactions

    def close(self):
        self.session.close()
