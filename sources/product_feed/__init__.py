"""Remote product feed: fetcher and seed pipeline for the transactions store."""
