"""Upstream PodInsight intelligence API client."""

from upstream.base import DiscoveryError, UpstreamError, UpstreamStatusError, UpstreamTimeout
from upstream.client import IntelligenceClient

__all__ = [
    "DiscoveryError",
    "IntelligenceClient",
    "UpstreamError",
    "UpstreamStatusError",
    "UpstreamTimeout",
]
