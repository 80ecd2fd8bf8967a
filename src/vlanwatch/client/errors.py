"""Custom exceptions for vlanwatch."""

from __future__ import annotations


class VlanWatchError(Exception):
    """Base exception for all vlanwatch errors."""


class VlanWatchRequestError(VlanWatchError):
    """Raised when a network-level error occurs (connection refused, timeout, etc.)."""

    def __init__(self, url: str, cause: Exception) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Request to {url!r} failed: {cause}")


class VlanWatchResponseError(VlanWatchError):
    """Raised when the report feed returns a non-2xx HTTP status code."""

    def __init__(self, status_code: int, url: str) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP {status_code} for {url!r}")


class VlanWatchFeedError(VlanWatchError):
    """Raised when a feed response cannot be decoded."""


class VlanWatchStorageError(VlanWatchError):
    """Raised when a persisted document or a backup file is unreadable or malformed."""


class UnknownNetworkError(VlanWatchError):
    """Raised when a network id or label is not known to the tracker."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Unknown network {key!r}")


class InvalidReportDateError(VlanWatchError):
    """Raised when a report date is not a real calendar date in ``YYYY-MM-DD`` form."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid report date {value!r}; expected YYYY-MM-DD")
