"""
Purpose: Orchestrator / decision pipeline (the "glue").
What it does:
Accepts an Order, builds the eligible candidate pool, ranks it, and commits the
best driver. The commit re-validates the driver under a per-driver lock so two
dispatch requests can never hand the same driver two orders; a lost race
excludes that driver and retries selection a bounded number of times.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Set

from drivers.directory import DriverDirectory, LockManager
from drivers.models import Driver, DriverStatus
from drivers.policy import DispatchPolicy, default_dispatch_policy
from orders.models import Order, OrderStatus
from orders.zones import ZoneCatalog
from routing.geo import validate_coordinate

from .candidate_filter import build_base_candidates
from .scoring import AssignmentScore, DriverScorer
from .state_machines.driver_state import handle_driver_assignment
from .state_machines.order_state import OrderStateException, transition_order_to_out_for_delivery

logger = logging.getLogger(__name__)


class NoDriverAvailable(Exception):
    """No eligible driver could be committed to the order. Not a defect: retry later."""
    pass


class AssignmentConflict(Exception):
    """Another assignment committed the chosen driver first."""
    pass


class AssignmentSelector:
    """
    Picks and commits one driver per order.

    Locks: the order lock serializes attempts on the same order, the driver lock
    guards the read-check-write on the driver record. Lock order is always
    order -> driver.
    """

    def __init__(
        self,
        directory: DriverDirectory,
        *,
        lock_manager: Optional[LockManager] = None,
        zone_catalog: Optional[ZoneCatalog] = None,
        policy: Optional[DispatchPolicy] = None,
        scorer: Optional[DriverScorer] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.policy = policy or default_dispatch_policy()
        self.directory = directory
        self.lock_manager = lock_manager or LockManager(default_timeout=self.policy.lock_timeout_seconds)
        self.zone_catalog = zone_catalog
        self.scorer = scorer or DriverScorer(self.policy)
        self.clock = clock

    def assign(self, order: Order, now: Optional[datetime] = None) -> AssignmentScore:
        """
        Returns the winning driver's AssignmentScore after committing:
        driver -> busy with order.id, order -> out_for_delivery with the driver id.

        Raises NoDriverAvailable when the pool is empty or every attempt lost its race,
        OrderStateException when the order can no longer be assigned.
        InvalidCoordinate is raised before any lock is taken.
        Nothing is mutated unless a commit succeeds.
        """
        validate_coordinate(order.restaurant_location)
        validate_coordinate(order.destination)
        now = now or self.clock()
        timeout = self.policy.lock_timeout_seconds

        with self.lock_manager.lock(f"order_{order.id}", timeout=timeout):
            self._check_order_assignable(order)

            excluded: Set[str] = set()
            for attempt in range(1, self.policy.max_assignment_attempts + 1):
                candidates = build_base_candidates(
                    order,
                    self.directory,
                    now,
                    zone_catalog=self.zone_catalog,
                    policy=self.policy,
                    exclude_ids=excluded,
                )
                if not candidates:
                    logger.warning("No eligible drivers for order %s (attempt %d)", order.id, attempt)
                    raise NoDriverAvailable(f"No eligible drivers for order {order.id}")

                ranked = self.scorer.rank_candidates(order, candidates, order.restaurant_location)
                best = ranked[0]
                snapshot = next(driver for driver in candidates if driver.id == best.driver_id)

                try:
                    self._commit(order, snapshot, now)
                except AssignmentConflict as exc:
                    logger.warning("Attempt %d for order %s lost a race: %s", attempt, order.id, exc)
                    excluded.add(snapshot.id)
                    continue

                logger.info(
                    "Assigned order %s to driver %s (score %.4f, %.2f km from restaurant)",
                    order.id, best.driver_id, best.score, best.distance_km,
                )
                return best

        logger.warning(
            "Gave up on order %s after %d conflicting attempts",
            order.id, self.policy.max_assignment_attempts,
        )
        raise NoDriverAvailable(
            f"Order {order.id}: {self.policy.max_assignment_attempts} assignment attempts conflicted"
        )

    def _check_order_assignable(self, order: Order) -> None:
        if order.status not in (OrderStatus.PENDING, OrderStatus.ASSIGNED) or order.assigned_driver_id is not None:
            raise OrderStateException(
                f"Order {order.id} cannot be assigned (status {order.status.value}, "
                f"driver {order.assigned_driver_id})"
            )

    def _commit(self, order: Order, snapshot: Driver, now: datetime) -> None:
        with self.lock_manager.lock(f"driver_{snapshot.id}", timeout=self.policy.lock_timeout_seconds):
            current = self.directory.get(snapshot.id)

            if current is None:
                raise AssignmentConflict(f"Driver {snapshot.id} disappeared from the directory")
            if current.version != snapshot.version:
                raise AssignmentConflict(
                    f"Driver {snapshot.id} changed (version {snapshot.version} -> {current.version})"
                )
            if current.status != DriverStatus.AVAILABLE or current.current_order_id is not None:
                raise AssignmentConflict(f"Driver {snapshot.id} is no longer available")

            # The order may have been changed by a writer outside the order lock.
            self._check_order_assignable(order)

            saved = self.directory.save(handle_driver_assignment(current, order.id))
            try:
                transition_order_to_out_for_delivery(order, current.id, now)
            except OrderStateException:
                self.directory.save(replace(current, version=saved.version))
                raise
