"""Client for the Fastah IP geolocation API."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import httpx

from .cli_errors import DataError, NetworkError
from .constants import FASTAH_ENDPOINT_BASE, FASTAH_KEY_HEADER
from .models import ApiError, ErrorPayload, LocationRecord, LookupOutcome

logger = logging.getLogger(__name__)

REQUIRED_STRING_FIELDS = ("cityName", "continentCode", "countryCode", "countryName", "tz")
REQUIRED_NUMBER_FIELDS = ("lat", "lng")


class RemoteLookupError(NetworkError):
    """The request never produced an HTTP response (DNS, connect, TLS, timeout)."""


class ResponseFormatError(DataError):
    """A 200 response whose body does not match the location schema."""


def parse_location_response(body: bytes | str) -> LocationRecord:
    """
    Parse a success envelope into a LocationRecord.

    Every field of ``locationData`` is required; a missing or mistyped field
    means the API schema changed and is reported as ResponseFormatError.
    """
    try:
        envelope = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ResponseFormatError(f"Response is not valid JSON: {e}") from e

    if not isinstance(envelope, dict) or not isinstance(envelope.get("locationData"), dict):
        raise ResponseFormatError("Response has no locationData object (data model changed?)")
    data: Mapping[str, Any] = envelope["locationData"]

    for name in REQUIRED_STRING_FIELDS:
        if not isinstance(data.get(name), str):
            raise ResponseFormatError(f"locationData.{name} missing or not a string")
    for name in REQUIRED_NUMBER_FIELDS:
        value = data.get(name)
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ResponseFormatError(f"locationData.{name} missing or not a number")

    return LocationRecord(
        country_code=data["countryCode"],
        city_name=data["cityName"],
        latitude=float(data["lat"]),
        longitude=float(data["lng"]),
        timezone=data["tz"],
        continent_code=data["continentCode"],
        country_name=data["countryName"],
    )


def parse_error_response(status_code: int, body: bytes | str) -> ApiError:
    """Parse an error envelope; an unreadable one yields an ApiError without payload."""
    try:
        envelope = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return ApiError(status_code)
    if not isinstance(envelope, dict):
        return ApiError(status_code)
    message = envelope.get("message", "")
    if not isinstance(message, str):
        return ApiError(status_code)
    return ApiError(status_code, ErrorPayload(message))


class FastahClient:
    """Performs one remote lookup per call over a shared httpx.Client."""

    def __init__(
        self,
        client: httpx.Client,
        api_key: str,
        base_url: str = FASTAH_ENDPOINT_BASE,
    ) -> None:
        self.client = client
        self.api_key = api_key
        self.base_url = base_url

    def url_for(self, ip: str) -> str:
        return self.base_url + ip

    def lookup(self, ip: str) -> LookupOutcome:
        url = self.url_for(ip)
        try:
            # client.get reads the whole body and releases the connection
            response = self.client.get(url, headers={FASTAH_KEY_HEADER: self.api_key})
        except httpx.DecodingError as e:
            raise ResponseFormatError(f"Problem decoding Fastah API response body: {e}") from e
        except httpx.RequestError as e:
            raise RemoteLookupError(f"Problem sending HTTP request to Fastah API: {e}") from e

        logger.debug("GET %s -> %d (%s)", url, response.status_code, response.http_version)
        if response.status_code == 200:
            return LookupOutcome(record=parse_location_response(response.content))

        error = parse_error_response(response.status_code, response.content)
        return LookupOutcome(error=error)
