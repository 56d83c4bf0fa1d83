"""
Purpose: Hard eligibility rules for choosing a driver.
What it does:
Accepts a pool of drivers and drops anyone who cannot take a new order right now:
not available, already carrying an order, stale location, or restricted to
zones that don't cover the destination.
Ranking happens later in dispatch.scoring.
"""

from datetime import datetime
from typing import Collection, Iterable, List, Optional

from routing.eta_service import is_location_fresh

from .models import Driver, DriverStatus
from .policy import DispatchPolicy, default_dispatch_policy


def serves_destination(driver: Driver, destination_zone_ids: Optional[Collection[str]]) -> bool:
    """
    Drivers without preferred zones go anywhere. Drivers with preferred zones
    only take orders whose destination lies in one of them.
    """
    if driver.preferred_zone_ids is None:
        return True
    if not destination_zone_ids:
        return False
    return not driver.preferred_zone_ids.isdisjoint(destination_zone_ids)


def filter_eligible_drivers(
    drivers: Iterable[Driver],
    now: datetime,
    policy: Optional[DispatchPolicy] = None,
    *,
    destination_zone_ids: Optional[Collection[str]] = None,
    exclude_ids: Collection[str] = (),
) -> List[Driver]:
    """
    Returns only drivers who are available, unassigned, recently located and
    allowed in the destination zone. Excluded drivers are dropped, not scored.
    """
    policy = policy or default_dispatch_policy()
    eligible = []

    for driver in drivers:
        if driver.id in exclude_ids:
            continue

        if driver.status != DriverStatus.AVAILABLE:
            continue

        if not driver.is_idle:
            continue

        if not is_location_fresh(driver, now, policy.freshness_window_minutes):
            continue

        if not serves_destination(driver, destination_zone_ids):
            continue

        eligible.append(driver)

    return eligible
