"""
Purpose: Central configuration for fee resolution, driver scoring, assignment and ETA.
What it does:

Stores all tunable thresholds/weights used across the dispatch core:

FRESHNESS_WINDOW_MINUTES = 10
SCORE WEIGHTS = distance 0.3, rating 0.3, on-time 0.2, load 0.1, priority 0.1
DEFAULT FEE = 2.99 + 0.50/km, 30 minutes
RUSH WINDOWS = 07-09, 16-18 (30% slower)

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Dict, List, Tuple

from dotenv import load_dotenv


@dataclass(frozen=True)
class DispatchPolicy:
    """
    Central configuration for the delivery assignment & ETA core.
    """

    # --- Location freshness ---
    # A driver whose last location ping is older than this is neither
    # eligible for assignment nor trusted for ETA.
    freshness_window_minutes: float = 10

    # --- Scoring weights ---
    distance_weight: float = 0.3
    rating_weight: float = 0.3
    on_time_weight: float = 0.2
    load_weight: float = 0.1
    priority_weight: float = 0.1

    # loadFactor is 1.0 for an idle driver, this value otherwise
    loaded_driver_factor: float = 0.5

    priority_multipliers: Dict[str, float] = field(
        default_factory=lambda: {"normal": 1.0, "high": 1.5, "urgent": 2.0}
    )

    # --- Fee fallback when no zone contains the destination ---
    default_base_fee: float = 2.99
    default_per_km_fee: float = 0.50
    default_estimated_minutes: int = 30

    # --- Order totals ---
    tax_rate: float = 0.08
    service_fee_rate: float = 0.02

    # --- ETA ---
    # km/h by vehicle type; car is the baseline
    vehicle_speeds_kmh: Dict[str, float] = field(
        default_factory=lambda: {
            "car": 40.0,
            "motorcycle": 35.0,
            "scooter": 25.0,
            "bicycle": 15.0,
            "walking": 5.0,
        }
    )
    # [start_hour, end_hour) in local time
    rush_hour_windows: List[Tuple[int, int]] = field(default_factory=lambda: [(7, 9), (16, 18)])
    rush_hour_derate: float = 0.30

    # --- Assignment concurrency ---
    max_assignment_attempts: int = 3
    lock_timeout_seconds: float = 2.0

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.freshness_window_minutes <= 0:
            raise ValueError("freshness_window_minutes must be > 0")

        weights = (
            self.distance_weight,
            self.rating_weight,
            self.on_time_weight,
            self.load_weight,
            self.priority_weight,
        )
        if any(weight < 0 for weight in weights):
            raise ValueError("Scoring weights must be >= 0")

        for priority in ("normal", "high", "urgent"):
            if priority not in self.priority_multipliers:
                raise ValueError(f"Missing priority multiplier for '{priority}'")

        if not 0 <= self.rush_hour_derate < 1:
            raise ValueError("rush_hour_derate must be in [0, 1)")

        for start_hour, end_hour in self.rush_hour_windows:
            if not 0 <= start_hour < end_hour <= 24:
                raise ValueError(f"Invalid rush hour window ({start_hour}, {end_hour})")

        if "car" not in self.vehicle_speeds_kmh:
            raise ValueError("vehicle_speeds_kmh must define the 'car' baseline")
        if any(speed <= 0 for speed in self.vehicle_speeds_kmh.values()):
            raise ValueError("Vehicle speeds must be > 0")

        if self.max_assignment_attempts < 1:
            raise ValueError("max_assignment_attempts must be >= 1")

        if self.lock_timeout_seconds <= 0:
            raise ValueError("lock_timeout_seconds must be > 0")

    @classmethod
    def from_env(cls) -> DispatchPolicy:
        """
        Default policy with overrides read from the environment (or a .env file).

        Example in .env:
        DISPATCH_FRESHNESS_WINDOW_MINUTES=5
        DISPATCH_MAX_ASSIGNMENT_ATTEMPTS=5
        """
        load_dotenv()
        overrides = {}

        freshness = os.getenv("DISPATCH_FRESHNESS_WINDOW_MINUTES")
        if freshness:
            overrides["freshness_window_minutes"] = float(freshness)

        attempts = os.getenv("DISPATCH_MAX_ASSIGNMENT_ATTEMPTS")
        if attempts:
            overrides["max_assignment_attempts"] = int(attempts)

        lock_timeout = os.getenv("DISPATCH_LOCK_TIMEOUT_SECONDS")
        if lock_timeout:
            overrides["lock_timeout_seconds"] = float(lock_timeout)

        derate = os.getenv("DISPATCH_RUSH_HOUR_DERATE")
        if derate:
            overrides["rush_hour_derate"] = float(derate)

        policy = replace(cls(), **overrides)
        policy.validate()
        return policy


def default_dispatch_policy() -> DispatchPolicy:
    """
    Convenience factory for the default policy.
    """
    p = DispatchPolicy()
    p.validate()
    return p
