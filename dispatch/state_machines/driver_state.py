from dataclasses import replace

from drivers.models import Driver, DriverStatus


class DriverStateException(Exception):
    """Raised when an invalid driver transition is attempted."""
    pass


def handle_driver_assignment(driver: Driver, order_id: str) -> Driver:
    """
    Called when the dispatcher commits an order to a driver.
    The driver must be available and idle; they become busy with exactly one order.
    """
    if driver.status != DriverStatus.AVAILABLE:
        raise DriverStateException(f"Driver {driver.id} is not available. Current: {driver.status.value}")

    if driver.current_order_id is not None:
        raise DriverStateException(
            f"Driver {driver.id} already carries order {driver.current_order_id}"
        )

    # Because Driver is a frozen dataclass, we must return a new instance via replace
    return replace(driver, status=DriverStatus.BUSY, current_order_id=order_id)


def handle_driver_release(driver: Driver) -> Driver:
    """
    Called when the driver's order is delivered or cancelled.
    Frees the driver for the next assignment.
    """
    if driver.status != DriverStatus.BUSY:
        raise DriverStateException(f"Driver {driver.id} is not busy. Current: {driver.status.value}")

    return replace(driver, status=DriverStatus.AVAILABLE, current_order_id=None)
