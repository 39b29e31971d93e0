"""The batch lookup loop: one table row per valid IP address read from a stream."""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterable, List, Optional, Protocol

from .cli_errors import DataError
from .constants import COMPARE_HEADER, LOCATION_FIELDS, PLAIN_HEADER, SENTINEL
from .fastah import ResponseFormatError
from .local_db import LocalDatabaseError, LocalGeoDatabase, LocalLookupError
from .models import LocationRecord, LookupOutcome
from .policy import Action, ErrorKind, ErrorPolicy
from .table import ResultTable

logger = logging.getLogger(__name__)


class RemoteLookup(Protocol):
    def lookup(self, ip: str) -> LookupOutcome: ...


class LocalLookup(Protocol):
    def lookup(self, ip: str) -> LocationRecord: ...


@dataclass
class BatchResult:
    table: ResultTable
    processed: int = 0
    skipped: int = 0
    remote_errors: int = 0
    local_errors: int = 0


def parse_ip(text: str) -> Optional[str]:
    """Return the canonical form of an IPv4/IPv6 address, or None if ``text`` is not one."""
    try:
        address = ipaddress.ip_address(text)
    except ValueError:
        return None
    if isinstance(address, ipaddress.IPv6Address):
        # Zoned addresses (fe80::1%eth0) only make sense on the local host.
        if address.scope_id is not None:
            return None
        if address.ipv4_mapped is not None:
            return str(address.ipv4_mapped)
    return str(address)


def remote_columns(stride: int) -> List[int]:
    return [1 + i * stride for i in range(LOCATION_FIELDS)]


def local_columns() -> List[int]:
    return [2 + i * 2 for i in range(LOCATION_FIELDS)]


class BatchLookup:
    """
    Resolves addresses one at a time, in input order.

    With a local database the table uses the nine-column comparison layout:
    remote ("F") values sit in odd columns and local ("M") values in the even
    columns next to them. Without one the five-column layout is used.
    """

    def __init__(
        self,
        remote: RemoteLookup,
        local: Optional[LocalLookup] = None,
        policy: Optional[ErrorPolicy] = None,
    ) -> None:
        self.remote = remote
        self.local = local
        self.policy = policy or ErrorPolicy()

    @property
    def compare(self) -> bool:
        return self.local is not None

    @property
    def header(self) -> tuple[str, ...]:
        return COMPARE_HEADER if self.compare else PLAIN_HEADER

    def _handle(self, kind: ErrorKind, message: str) -> None:
        action = self.policy.action_for(kind)
        if action is Action.ABORT:
            raise DataError(message)
        if action is Action.WARN:
            logger.warning(message)
        else:
            logger.debug(message)

    def build_row(self, ip: str, result: BatchResult) -> List[str]:
        row = [""] * len(self.header)
        row[0] = ip

        if self.local is not None:
            try:
                local_record = self.local.lookup(ip)
            except LocalLookupError as e:
                result.local_errors += 1
                self._handle(ErrorKind.LOCAL_LOOKUP_FAILURE, str(e))
                local_values: Iterable[str] = [SENTINEL] * LOCATION_FIELDS
            else:
                local_values = local_record.display_fields()
            for column, value in zip(local_columns(), local_values):
                row[column] = value

        stride = 2 if self.compare else 1
        try:
            outcome = self.remote.lookup(ip)
        except ResponseFormatError as e:
            result.remote_errors += 1
            self._handle(
                ErrorKind.BAD_RESPONSE,
                f"Problem parsing Fastah API response for {ip} (data model changed?): {e.message}",
            )
            outcome = None

        if outcome is not None and outcome.ok:
            assert outcome.record is not None
            remote_values: Iterable[str] = outcome.record.display_fields()
        else:
            if outcome is not None and outcome.error is not None:
                result.remote_errors += 1
                self._handle(
                    ErrorKind.API_ERROR,
                    f"Problem with Fastah API call for {ip}; HTTP code "
                    f"{outcome.error.status_code} ( {outcome.error.message} )",
                )
            remote_values = [SENTINEL] * LOCATION_FIELDS
        for column, value in zip(remote_columns(stride), remote_values):
            row[column] = value
        return row

    def run(self, stream: IO[str] | Iterable[str]) -> BatchResult:
        result = BatchResult(table=ResultTable(self.header))
        lines = iter(stream)
        while True:
            try:
                line = next(lines)
            except StopIteration:
                break
            except (OSError, UnicodeDecodeError) as e:
                raise DataError(f"Problem reading input: {e}") from e

            raw = line.strip()
            if not raw:
                continue
            ip = parse_ip(raw)
            if ip is None:
                result.skipped += 1
                self._handle(
                    ErrorKind.MALFORMED_INPUT, f"Skipping line that is not an IP address: {raw!r}"
                )
                continue

            result.table.append(self.build_row(ip, result))
            result.processed += 1
        return result


def open_local_database(
    path: Optional[str | Path],
    policy: ErrorPolicy,
    explicit: bool = False,
) -> Optional[LocalGeoDatabase]:
    """
    Open the comparison database, or return None when comparison gets disabled.

    When the user asked for comparison explicitly an open failure is always
    fatal; otherwise the policy for LOCAL_OPEN_FAILURE decides.
    """
    try:
        return LocalGeoDatabase.open(path)
    except LocalDatabaseError as e:
        if explicit or policy.action_for(ErrorKind.LOCAL_OPEN_FAILURE) is Action.ABORT:
            raise
        if policy.action_for(ErrorKind.LOCAL_OPEN_FAILURE) is Action.WARN:
            logger.warning("Disabling local database comparison (%s)", e.message)
        else:
            logger.debug("Disabling local database comparison (%s)", e.message)
        return None


def run_batch(
    stream: IO[str] | Iterable[str],
    remote: RemoteLookup,
    *,
    compare: bool = True,
    database_path: Optional[str | Path] = None,
    policy: Optional[ErrorPolicy] = None,
    compare_requested: bool = False,
) -> BatchResult:
    """Open the local database if comparing, run the loop, and always close it."""
    policy = policy or ErrorPolicy()
    local: Optional[LocalGeoDatabase] = None
    if compare:
        local = open_local_database(database_path, policy, explicit=compare_requested)
    try:
        return BatchLookup(remote, local, policy).run(stream)
    finally:
        if local is not None:
            local.close()
