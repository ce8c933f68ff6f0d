from __future__ import annotations


class CountryServiceError(Exception):
    pass


class ValidationError(CountryServiceError):
    """Bad caller input. Raised before any network call."""


class UpstreamUnavailableError(CountryServiceError):
    """Timeout or transport failure talking to the upstream API."""


class UpstreamApiError(CountryServiceError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"API Error: {message} (status: {status_code})")
        self.status_code = status_code
        self.message = message


class InvalidDataError(CountryServiceError):
    """Malformed payload reaching the summary mapper."""
