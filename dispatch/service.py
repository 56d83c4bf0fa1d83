"""
Purpose: The "one call" entry points used by the order-management service.
What it does:
- resolve_fee(order)      -> FeeResult (checkout time)
- assign_driver(order)    -> AssignmentResult (dispatch time)
- estimate_eta(order)     -> EtaResult (while in transit, polled)
- complete_delivery(order) / cancel_order(order) free the assigned driver.

Collaborators (driver directory, zone catalog, locks) are injected so tests can
use in-memory fakes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from drivers.directory import DriverDirectory, LockManager
from drivers.policy import DispatchPolicy, default_dispatch_policy
from orders.models import Order
from orders.pricing import FeeAndZoneResolver, FeeResult
from orders.zones import ZoneCatalog
from routing.eta_service import DistanceProvider, ETAEstimator, EtaResult

from .dispatcher import AssignmentSelector, NoDriverAvailable
from .state_machines.driver_state import handle_driver_release
from .state_machines import order_state
from .state_machines.order_state import OrderStateException, transition_order_to_delivered

logger = logging.getLogger(__name__)

NO_DRIVER_AVAILABLE = "no_driver_available"


@dataclass(frozen=True)
class AssignmentResult:
    order_id: str
    driver_id: Optional[str]
    score: Optional[float] = None
    reason: Optional[str] = None

    @property
    def assigned(self) -> bool:
        return self.driver_id is not None


class DeliveryService:
    def __init__(
        self,
        directory: DriverDirectory,
        zone_catalog: Optional[ZoneCatalog] = None,
        *,
        policy: Optional[DispatchPolicy] = None,
        lock_manager: Optional[LockManager] = None,
        distance_provider: Optional[DistanceProvider] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.policy = policy or default_dispatch_policy()
        self.directory = directory
        self.zone_catalog = zone_catalog
        self.clock = clock
        self.lock_manager = lock_manager or LockManager(default_timeout=self.policy.lock_timeout_seconds)

        self.fee_resolver = FeeAndZoneResolver(zone_catalog, self.policy)
        self.selector = AssignmentSelector(
            directory,
            lock_manager=self.lock_manager,
            zone_catalog=zone_catalog,
            policy=self.policy,
            clock=clock,
        )
        self.eta_estimator = ETAEstimator(self.policy, distance_provider=distance_provider, clock=clock)

    def resolve_fee(self, order: Order) -> FeeResult:
        result = self.fee_resolver.resolve_for_order(order)
        order.delivery_fee = result.fee
        order.delivery_zone_id = result.zone_id
        order.estimated_minutes = result.estimated_minutes
        return result

    def assign_driver(self, order: Order) -> AssignmentResult:
        try:
            best = self.selector.assign(order)
        except NoDriverAvailable:
            return AssignmentResult(order_id=order.id, driver_id=None, reason=NO_DRIVER_AVAILABLE)
        return AssignmentResult(order_id=order.id, driver_id=best.driver_id, score=best.score)

    def estimate_eta(self, order: Order) -> EtaResult:
        driver = self._assigned_driver(order)
        return self.eta_estimator.estimate(order, driver, now=self.clock())

    def complete_delivery(self, order: Order) -> Order:
        with self.lock_manager.lock(f"order_{order.id}"):
            driver = self._assigned_driver(order)
            with self.lock_manager.lock(f"driver_{driver.id}"):
                current = self.directory.get(driver.id)
                if current.current_order_id != order.id:
                    raise OrderStateException(
                        f"Driver {driver.id} is carrying {current.current_order_id}, not order {order.id}"
                    )
                released = handle_driver_release(current)
                transition_order_to_delivered(order, now=self.clock())
                self.directory.save(released)
        logger.info("Order %s delivered by driver %s", order.id, driver.id)
        return order

    def cancel_order(self, order: Order) -> Order:
        with self.lock_manager.lock(f"order_{order.id}"):
            driver_id = order.assigned_driver_id
            order_state.cancel_order(order)
            if driver_id is not None:
                with self.lock_manager.lock(f"driver_{driver_id}"):
                    driver = self.directory.get(driver_id)
                    if driver is not None and driver.current_order_id == order.id:
                        self.directory.save(handle_driver_release(driver))
        logger.info("Order %s cancelled", order.id)
        return order

    def _assigned_driver(self, order: Order):
        if order.assigned_driver_id is None:
            raise OrderStateException(f"Order {order.id} has no assigned driver")
        driver = self.directory.get(order.assigned_driver_id)
        if driver is None:
            raise OrderStateException(
                f"Driver {order.assigned_driver_id} for order {order.id} is not in the directory"
            )
        return driver
