"""Exception hierarchy for the tracker.

Malformed table rows, non-matching product titles and missing region markers
are recovered locally and never raise.  Only network-level failures and host
misuse surface as exceptions.
"""


class TrackerError(RuntimeError):
    """Base exception for tracker failures."""


class SourceFetchError(TrackerError):
    """Raised when a single listing page cannot be fetched."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class CatalogFetchError(TrackerError):
    """Raised when no listing page could be fetched, so there is nothing to merge."""

    def __init__(self, failures: list):
        names = ", ".join(failure.url for failure in failures) or "no sources configured"
        super().__init__(f"Could not fetch any catalog source ({names})")
        self.failures = list(failures)


class UnknownCommandError(TrackerError):
    """Raised when the host is asked to invoke a command that was never registered."""
