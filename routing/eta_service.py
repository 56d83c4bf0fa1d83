#Purpose: ETA estimation policy.
#Converts the driver's current position into a "arrives in X" prediction
#for an order that is out for delivery.
#Speed comes from the driver's vehicle type and is derated during the
#configured rush-hour windows. Distance defaults to haversine; a road
#distance provider (e.g. OSRMClient.road_distance_km) can be injected.
#Read-only: never mutates the order or the driver.

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from drivers.policy import DispatchPolicy, default_dispatch_policy
from routing.geo import LatLon, distance_km

logger = logging.getLogger(__name__)

DistanceProvider = Callable[[LatLon, LatLon], float]


class DriverLocationStale(Exception):
    """The driver's last location update is too old to trust an ETA."""
    pass


@dataclass(frozen=True)
class EtaResult:
    eta_at: datetime
    minutes_remaining: int
    distance_remaining_km: float


def is_rush_hour(moment: datetime, windows) -> bool:
    """True if moment's hour falls in any [start_hour, end_hour) window."""
    return any(start_hour <= moment.hour < end_hour for start_hour, end_hour in windows)


def location_age(driver, now: datetime) -> Optional[timedelta]:
    if driver.location_updated_at is None:
        return None
    return now - driver.location_updated_at


def is_location_fresh(driver, now: datetime, freshness_window_minutes: float) -> bool:
    """
    Missing timestamps are stale. Timestamps slightly in the future
    (clock skew between feed and dispatcher) count as fresh.
    """
    age = location_age(driver, now)
    if age is None:
        return False
    return age <= timedelta(minutes=freshness_window_minutes)


class ETAEstimator:
    def __init__(
        self,
        policy: Optional[DispatchPolicy] = None,
        distance_provider: Optional[DistanceProvider] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.policy = policy or default_dispatch_policy()
        self.distance_provider = distance_provider or distance_km
        self.clock = clock

    def effective_speed_kmh(self, vehicle_type, now: datetime) -> float:
        key = getattr(vehicle_type, "value", vehicle_type)
        speeds = self.policy.vehicle_speeds_kmh
        speed = speeds.get(key, speeds["car"])
        if is_rush_hour(now, self.policy.rush_hour_windows):
            speed *= 1 - self.policy.rush_hour_derate
        return speed

    def estimate(self, order, driver, now: Optional[datetime] = None) -> EtaResult:
        """
        minutes_remaining = ceil(distance / km-per-minute), eta_at = now + minutes_remaining.

        Raises DriverLocationStale when the driver's position is older than the
        freshness window; callers should treat that as "ETA unavailable".
        """
        now = now or self.clock()

        if not is_location_fresh(driver, now, self.policy.freshness_window_minutes):
            logger.warning(
                "Driver %s location is stale (last update %s), no ETA for order %s",
                driver.id, driver.location_updated_at, order.id,
            )
            raise DriverLocationStale(
                f"Driver {driver.id} location last updated at {driver.location_updated_at}"
            )

        distance_remaining = self.distance_provider(driver.location, order.destination)
        speed_km_per_minute = self.effective_speed_kmh(driver.vehicle_type, now) / 60.0
        minutes_remaining = math.ceil(distance_remaining / speed_km_per_minute)

        return EtaResult(
            eta_at=now + timedelta(minutes=minutes_remaining),
            minutes_remaining=minutes_remaining,
            distance_remaining_km=round(distance_remaining, 3),
        )
