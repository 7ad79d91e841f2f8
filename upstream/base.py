"""Error types raised by the upstream intelligence client."""


class UpstreamError(Exception):
    """The upstream intelligence API could not be reached or answered badly."""


class UpstreamStatusError(UpstreamError):
    """Upstream answered with a non-success HTTP status."""

    def __init__(self, url: str, status_code: int, reason: str = ""):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"{url} responded with status {status_code} {reason}".rstrip())


class UpstreamTimeout(UpstreamError):
    """Upstream did not answer within the allotted budget."""

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(f"{url} did not respond within {timeout:g}s")


class DiscoveryError(UpstreamError):
    """The episode discovery step failed; fatal to dashboard aggregation."""
