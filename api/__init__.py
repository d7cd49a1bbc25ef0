"""
REST API for product transactions.

Seeds the transactions store from the remote product feed and serves
listing, search and monthly statistics over HTTP.
"""

__version__ = "1.0.0"
