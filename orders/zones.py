"""
Purpose: Zone catalog seam.
What it does:
ZoneCatalog is the interface the catalog service must satisfy
(getZonesForRestaurant). InMemoryZoneCatalog keeps zones in definition order,
which is the tie-break order for overlapping zones of equal priority.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Protocol

from .models import DeliveryZone


class ZoneCatalog(Protocol):
    def get_zones_for_restaurant(self, restaurant_id: str) -> List[DeliveryZone]:
        ...


class InMemoryZoneCatalog:
    def __init__(self, zones: Iterable[DeliveryZone] = ()):
        self._zones: Dict[str, List[DeliveryZone]] = {}
        for zone in zones:
            self.add(zone)

    def add(self, zone: DeliveryZone) -> None:
        self._zones.setdefault(zone.restaurant_id, []).append(zone)

    def get_zones_for_restaurant(self, restaurant_id: str) -> List[DeliveryZone]:
        return list(self._zones.get(restaurant_id, []))
