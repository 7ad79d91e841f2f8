"""Server-side proxies in front of the upstream intelligence API."""

from proxies.dashboard import build_dashboard
from proxies.search import proxy_search

__all__ = ["build_dashboard", "proxy_search"]
