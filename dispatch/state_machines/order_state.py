from datetime import datetime
from typing import Optional

from orders.models import Order, OrderStatus


class OrderStateException(Exception):
    """Raised when an invalid state transition is attempted."""
    pass


def transition_order_to_out_for_delivery(order: Order, driver_id: str, now: Optional[datetime] = None) -> Order:
    """
    Called when the dispatcher commits a driver to the order.
    Only PENDING orders, or ASSIGNED ones still waiting for a driver, qualify.
    """
    if order.status not in (OrderStatus.PENDING, OrderStatus.ASSIGNED):
        raise OrderStateException(f"Cannot dispatch order {order.id} from {order.status.value}")

    if order.assigned_driver_id is not None:
        raise OrderStateException(
            f"Order {order.id} is already assigned to driver {order.assigned_driver_id}"
        )

    order.assigned_driver_id = driver_id
    order.driver_assigned_at = now or datetime.now()
    order.status = OrderStatus.OUT_FOR_DELIVERY
    return order


def transition_order_to_delivered(order: Order, now: Optional[datetime] = None) -> Order:
    if order.status != OrderStatus.OUT_FOR_DELIVERY:
        raise OrderStateException(f"Order {order.id} is not OUT_FOR_DELIVERY. Current: {order.status.value}")

    order.status = OrderStatus.DELIVERED
    order.delivered_at = now or datetime.now()
    return order


def cancel_order(order: Order) -> Order:
    """
    Cancellation is allowed from any non-terminal state.
    """
    if order.status.is_terminal:
        raise OrderStateException(f"Order {order.id} is already {order.status.value}")

    order.status = OrderStatus.CANCELLED
    return order
