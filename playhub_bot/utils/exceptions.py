"""
Custom exceptions for the PlayHub client and leaderboard system with user-friendly error messages.
"""

class PlayHubException(Exception):
    """Base exception for PlayHub-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class UpstreamAPIError(PlayHubException):
    """Raised when the upstream API answers with a non-success status or an unreadable body."""
    def __init__(self, status: int, url: str, details: str = None):
        self.status = status
        self.url = url
        super().__init__(
            f"API request failed: {status} for {url} - {details or ''}".rstrip(' -'),
            f"API error: {status}"
        )

class UpstreamUnavailableError(PlayHubException):
    """Raised when the upstream API cannot be reached after all retries."""
    def __init__(self, url: str, cause: Exception = None):
        self.url = url
        self.cause = cause
        super().__init__(
            f"Request to {url} failed after retries: {cause!r}",
            "PlayHub is not responding right now. Please try again later."
        )

class LocationNotFoundError(PlayHubException):
    """Raised when a city name cannot be geocoded."""
    def __init__(self, city: str):
        super().__init__(
            f"Geocoding returned no result for '{city}'",
            f"Could not find location: {city}"
        )

class InvalidDateRangeError(PlayHubException):
    """Raised when a leaderboard date window is malformed."""
    def __init__(self, reason: str):
        super().__init__(f"Invalid date range: {reason}", reason)
