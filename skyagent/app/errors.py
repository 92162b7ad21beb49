from __future__ import annotations

from typing import Optional


class SkyAgentError(Exception):
    """Base class for every failure surfaced to a caller."""

    message = "Unable to fetch weather. Try again."

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        super().__init__(detail or self.message)


class MissingLocation(SkyAgentError):
    message = "Please enter a city or a latitude/longitude pair."


class PlaceNotFound(SkyAgentError):
    message = "City not found."


class UpstreamUnavailable(SkyAgentError):
    message = "Weather service unavailable. Try again later."

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.body = body


class IncompleteUpstreamData(SkyAgentError):
    message = "Forecast data from the weather service is incomplete."
