"""GeoResolver implementation backed by a MaxMind City database."""

import ipaddress
from pathlib import Path
from typing import Protocol

import geoip2.database
import geoip2.errors

from ..logging_config import get_logger
from ..models import Location

logger = get_logger(__name__)

UNKNOWN_COUNTRY = "??"


class IGeoResolver(Protocol):
    """Maps an IP address to a location."""

    def resolve(self, ip: str) -> Location | None:
        """Return the location of ip, or None if it cannot be located."""
        ...


def routable_address(ip: str) -> str | None:
    """Canonical form of ip if it is globally routable, else None."""
    try:
        addr = ipaddress.ip_address(ip.strip())
    except ValueError:
        return None

    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped:
        addr = addr.ipv4_mapped

    if addr.is_loopback or addr.is_private or addr.is_multicast or not addr.is_global:
        return None
    return str(addr)


def is_routable(ip: str) -> bool:
    """True if ip is a syntactically valid, globally routable address."""
    return routable_address(ip) is not None


class GeoResolver:
    """Resolves public addresses through a geoip2 City reader."""

    def __init__(
        self,
        db_path: str | Path | None = None,
        reader: geoip2.database.Reader | None = None,
    ):
        self._db_path = Path(db_path) if db_path else None
        self._reader = reader

    @property
    def available(self) -> bool:
        """Whether a database is loaded."""
        return self._reader is not None

    def open(self) -> None:
        """Open the database; a missing file leaves the resolver inert."""
        if self._reader is not None or self._db_path is None:
            return
        if not self._db_path.exists():
            logger.warning(
                "GeoIP database not found at %s, all lookups will be dropped",
                self._db_path,
            )
            return
        self._reader = geoip2.database.Reader(str(self._db_path))
        logger.info("GeoIP database loaded from %s", self._db_path)

    def close(self) -> None:
        """Release the database reader."""
        if self._reader is not None:
            self._reader.close()
            self._reader = None

    def resolve(self, ip: str) -> Location | None:
        """Return the location of ip, or None if it cannot be located."""
        address = routable_address(ip)
        if address is None or self._reader is None:
            return None

        try:
            response = self._reader.city(address)
        except (geoip2.errors.AddressNotFoundError, ValueError):
            return None

        lat = response.location.latitude
        lng = response.location.longitude
        if lat is None or lng is None:
            return None

        country = (
            response.country.iso_code
            or response.registered_country.iso_code
            or UNKNOWN_COUNTRY
        )
        return Location(
            latitude=lat,
            longitude=lng,
            country_code=country,
            city=response.city.name,
        )
