#Purpose: Ranking model (the "who is best" layer).
#Takes candidates (already eligible) and produces a weighted score per driver:
#  distance to the restaurant, rating, on-time rate, current load and the
#  order's priority multiplier.
#Tie-breaking is deterministic: equal scores go to the lowest driver id.
#Output: ranked AssignmentScores, best first.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from drivers.models import Driver
from drivers.policy import DispatchPolicy, default_dispatch_policy
from orders.models import Order
from routing.geo import LatLon, distance_km

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentScore:
    """
    Transient per (order, driver) score. Never persisted.
    """
    driver_id: str
    distance_km: float
    distance_factor: float
    rating_factor: float
    on_time_factor: float
    load_factor: float
    priority_multiplier: float
    score: float


class DriverScorer:
    def __init__(self, policy: Optional[DispatchPolicy] = None):
        self.policy = policy or default_dispatch_policy()

    def score(self, order: Order, driver: Driver, restaurant_location: LatLon) -> AssignmentScore:
        policy = self.policy

        distance = distance_km(driver.location, restaurant_location)
        distance_factor = 1.0 / (1.0 + distance)
        rating_factor = driver.rating / 5.0
        on_time_factor = driver.on_time_rate / 100.0
        load_factor = 1.0 if driver.is_idle else policy.loaded_driver_factor
        priority_multiplier = policy.priority_multipliers[order.priority.value]

        score = (
            distance_factor * policy.distance_weight
            + rating_factor * policy.rating_weight
            + on_time_factor * policy.on_time_weight
            + load_factor * policy.load_weight
            + priority_multiplier * policy.priority_weight
        )

        return AssignmentScore(
            driver_id=driver.id,
            distance_km=distance,
            distance_factor=distance_factor,
            rating_factor=rating_factor,
            on_time_factor=on_time_factor,
            load_factor=load_factor,
            priority_multiplier=priority_multiplier,
            score=score,
        )

    def rank_candidates(
        self,
        order: Order,
        drivers: Iterable[Driver],
        restaurant_location: Optional[LatLon] = None,
    ) -> List[AssignmentScore]:
        """
        Scores every driver and sorts best first (score desc, then driver id asc).
        """
        restaurant_location = restaurant_location or order.restaurant_location
        scores = [self.score(order, driver, restaurant_location) for driver in drivers]
        scores.sort(key=lambda candidate: (-candidate.score, candidate.driver_id))

        for candidate in scores:
            logger.debug(
                "Order %s driver %s score=%.4f (%.2f km)",
                order.id, candidate.driver_id, candidate.score, candidate.distance_km,
            )
        return scores


def rank_candidates(
    order: Order,
    drivers: Iterable[Driver],
    policy: Optional[DispatchPolicy] = None,
) -> List[AssignmentScore]:
    return DriverScorer(policy).rank_candidates(order, drivers)
