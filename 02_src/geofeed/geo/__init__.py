"""Geolocation module."""

from .resolver import GeoResolver, IGeoResolver, is_routable

__all__ = ["GeoResolver", "IGeoResolver", "is_routable"]
