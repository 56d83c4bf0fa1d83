"""
Purpose: Core data models for the drivers domain.
What it does:
Defines the structure of a Driver, their availability and vehicle type,
without relying on any ORM.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from routing.geo import LatLon


class DriverStatus(str, Enum):
    """
    Standardizes the state a driver can be in.
    """
    AVAILABLE = "available"
    BUSY = "busy"
    OFFLINE = "offline"
    ON_BREAK = "on_break"
    INACTIVE = "inactive"


class VehicleType(str, Enum):
    CAR = "car"
    MOTORCYCLE = "motorcycle"
    BICYCLE = "bicycle"
    SCOOTER = "scooter"
    WALKING = "walking"


@dataclass(frozen=True)
class Driver:
    """
    A purely stateless representation of a Driver at a specific point in time.
    State changes produce a new instance (see dispatch.state_machines.driver_state).
    """
    id: str
    location: LatLon
    status: DriverStatus

    location_updated_at: Optional[datetime] = None

    # Pre-aggregated performance metrics, maintained outside this core.
    rating: float = 0.0          # 0-5
    on_time_rate: float = 0.0    # 0-100 (%)
    total_deliveries: int = 0

    current_order_id: Optional[str] = None
    vehicle_type: VehicleType = VehicleType.CAR

    # None means the driver accepts any zone
    preferred_zone_ids: Optional[FrozenSet[str]] = None

    # Bumped by the directory on every committed change (optimistic concurrency).
    version: int = 0

    @property
    def is_idle(self) -> bool:
        return self.current_order_id is None

    @classmethod
    def new(
        cls,
        driver_id: str,
        lat: float,
        lon: float,
        status: str | DriverStatus = DriverStatus.OFFLINE,
        *,
        rating: float = 0.0,
        on_time_rate: float = 0.0,
        total_deliveries: int = 0,
        vehicle_type: str | VehicleType = VehicleType.CAR,
        location_updated_at: datetime | None = None,
        preferred_zone_ids: Optional[Iterable[str]] = None,
    ) -> Driver:
        if isinstance(status, str):
            status = DriverStatus(status)
        if isinstance(vehicle_type, str):
            vehicle_type = VehicleType(vehicle_type)

        return cls(
            id=driver_id,
            location=(lat, lon),
            status=status,
            location_updated_at=location_updated_at or datetime.now(),
            rating=rating,
            on_time_rate=on_time_rate,
            total_deliveries=total_deliveries,
            vehicle_type=vehicle_type,
            preferred_zone_ids=frozenset(preferred_zone_ids) if preferred_zone_ids is not None else None,
        )
