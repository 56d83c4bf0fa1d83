#Purpose: Builds the candidate pool for one order before scoring.
#Asks the driver directory for available, recently located drivers and
#re-applies the hard eligibility rules locally (the directory result is a
#hint, not a guarantee): available, unassigned, fresh location, and the
#driver's preferred zones must cover the destination when they are set.
#Output: "rule-qualified drivers" (still not ranked).
#An empty pool means "no eligible drivers", which is reported differently
#from "everyone scored low".

import logging
from datetime import datetime
from typing import Collection, List, Optional

from drivers.directory import DriverDirectory
from drivers.models import Driver
from drivers.policy import DispatchPolicy, default_dispatch_policy
from drivers.selection import filter_eligible_drivers
from orders.models import Order
from orders.zones import ZoneCatalog
from routing.geofence import zones_containing

logger = logging.getLogger(__name__)


def destination_zone_ids(order: Order, zone_catalog: Optional[ZoneCatalog]) -> List[str]:
    """Ids of the restaurant's active zones that contain the order destination."""
    if zone_catalog is None:
        return []
    zones = [zone for zone in zone_catalog.get_zones_for_restaurant(order.restaurant_id) if zone.is_active]
    return [zone.id for zone in zones_containing(order.destination, zones)]


def build_base_candidates(
    order: Order,
    directory: DriverDirectory,
    now: datetime,
    *,
    zone_catalog: Optional[ZoneCatalog] = None,
    policy: Optional[DispatchPolicy] = None,
    exclude_ids: Collection[str] = (),
) -> List[Driver]:
    policy = policy or default_dispatch_policy()

    drivers = directory.get_available_drivers(policy.freshness_window_minutes)
    candidates = filter_eligible_drivers(
        drivers,
        now,
        policy,
        destination_zone_ids=destination_zone_ids(order, zone_catalog),
        exclude_ids=exclude_ids,
    )

    logger.debug(
        "Order %s: %d drivers from directory, %d eligible (excluded %d)",
        order.id, len(drivers), len(candidates), len(exclude_ids),
    )
    return candidates
