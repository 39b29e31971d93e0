from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(slots=True, frozen=True)
class LocationRecord:
    """Normalized result of a geolocation lookup.

    Produced independently by the Fastah API client and by the local
    database reader; both fill the same display fields.
    """

    country_code: str
    city_name: str
    latitude: float
    longitude: float
    timezone: str
    continent_code: str = ""
    country_name: str = ""

    @property
    def lat_lng(self) -> str:
        return f"{self.latitude:.2f}, {self.longitude:.2f}"

    def display_fields(self) -> Tuple[str, str, str, str]:
        """Values for the Country, City, Lat/Lng and TZ columns, in that order."""
        return (self.country_code, self.city_name, self.lat_lng, self.timezone)


@dataclass(slots=True, frozen=True)
class ErrorPayload:
    message: str


@dataclass(slots=True, frozen=True)
class ApiError:
    """A non-200 answer from the remote API."""

    status_code: int
    payload: Optional[ErrorPayload] = None

    @property
    def message(self) -> str:
        if self.payload is None:
            return "unparseable error response"
        return self.payload.message


@dataclass(slots=True, frozen=True)
class LookupOutcome:
    """Either a location record or an API error, never both."""

    record: Optional[LocationRecord] = None
    error: Optional[ApiError] = None

    @property
    def ok(self) -> bool:
        return self.record is not None
