"""Query cache and the per-resource hooks built on it."""

from queries.client import QueryClient, QueryOptions, QueryResult

__all__ = ["QueryClient", "QueryOptions", "QueryResult"]
