"""Offline lookups against a MaxMind GeoLite2-City database."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import geoip2.database
import geoip2.errors
import maxminddb

from .cli_errors import ConfigError, DataError
from .constants import MMDB_FILE_NAME
from .models import LocationRecord

logger = logging.getLogger(__name__)


class LocalDatabaseError(ConfigError):
    """The database file is missing, unreadable or not a City database."""


class LocalLookupError(DataError):
    """The database has no usable record for an address."""


def default_database_path() -> Path:
    return Path.home() / MMDB_FILE_NAME


def _coordinate(value: Optional[float]) -> float:
    return 0.0 if value is None else float(value)


class LocalGeoDatabase:
    """Thin wrapper over ``geoip2.database.Reader`` returning LocationRecords."""

    def __init__(self, reader: Any, path: Optional[Path] = None) -> None:
        self._reader = reader
        self.path = path

    @classmethod
    def open(cls, path: str | Path | None = None) -> "LocalGeoDatabase":
        db_path = Path(path) if path else default_database_path()
        try:
            reader = geoip2.database.Reader(str(db_path))
        except (OSError, ValueError, maxminddb.InvalidDatabaseError) as e:
            raise LocalDatabaseError(f"Cannot open {db_path}: {e}") from e
        logger.debug("Opened local database %s", db_path)
        return cls(reader, db_path)

    def lookup(self, ip: str) -> LocationRecord:
        try:
            response = self._reader.city(ip)
        except geoip2.errors.AddressNotFoundError as e:
            raise LocalLookupError(f"{ip} not found in local database") from e
        except (
            geoip2.errors.GeoIP2Error,
            maxminddb.InvalidDatabaseError,
            TypeError,
            ValueError,
        ) as e:
            raise LocalLookupError(f"Problem looking up {ip} in local database: {e}") from e

        return LocationRecord(
            country_code=response.country.iso_code or "",
            city_name=response.city.names.get("en", ""),
            # Records without coordinates show 0.00, 0.00.
            latitude=_coordinate(response.location.latitude),
            longitude=_coordinate(response.location.longitude),
            timezone=response.location.time_zone or "",
            continent_code=response.continent.code or "",
            country_name=response.country.names.get("en", ""),
        )

    def close(self) -> None:
        self._reader.close()

    def __enter__(self) -> "LocalGeoDatabase":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
