"""Remote data sources feeding the transactions store."""
