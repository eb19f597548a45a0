"""
Exceptions raised while fetching and building UPnP device descriptions.

All errors derive from UPnPError so callers can handle discovery failures
with a single except clause, or pick out the specific kind they care about.
"""


class UPnPError(Exception):
    """Base exception for UPnP description errors."""

    pass


class FetchError(UPnPError):
    """A description document could not be retrieved.

    Raised for unreachable hosts, DNS or connect failures and non-2xx
    responses.
    """

    def __init__(self, location: str, reason: str, status: int = None):
        """Initialize the fetch error.

        Args:
            location: URL that was being fetched.
            reason: Human-readable failure description.
            status: HTTP status code when the server answered with an error.
        """
        super().__init__(f"Unable to fetch {location}: {reason}")
        self.location = location
        self.reason = reason
        self.status = status


class MalformedDescriptionError(UPnPError):
    """A description document is missing a required element or holds an invalid value."""

    pass


class InvalidArgumentError(UPnPError, ValueError):
    """A constructor was called with an unusable combination of arguments."""

    pass


class UnknownTypeError(UPnPError):
    """A deviceType URN does not follow the UPnP device schema pattern."""

    def __init__(self, device_type: str):
        super().__init__(f"Unrecognized device type URN: {device_type!r}")
        self.device_type = device_type
