"""
Purpose: Domain models for the Orders capability.
What it does:
- Defines core data structures:
- Order (id, restaurant + destination coords, priority, status, assigned driver, timestamps)
- DeliveryZone (polygon boundary + fee/ETA policy for one restaurant)
- Promotion / OrderLine (inputs to order totals)

Defines enums/constants:
- OrderStatus = PENDING | ASSIGNED | OUT_FOR_DELIVERY | DELIVERED | CANCELLED
- OrderPriority = NORMAL | HIGH | URGENT
- PromotionType = PERCENTAGE_DISCOUNT | FIXED_AMOUNT_DISCOUNT | FREE_DELIVERY

Rule: No distance math, no fee logic. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from routing.geo import LatLon


class OrderStatus(Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


class OrderPriority(Enum):
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class PromotionType(Enum):
    PERCENTAGE_DISCOUNT = "percentage_discount"
    FIXED_AMOUNT_DISCOUNT = "fixed_amount_discount"
    FREE_DELIVERY = "free_delivery"


@dataclass
class Order:
    """
    A delivery request. Owned by the order-processing service; this core only
    reads locations/priority and writes the assignment + status transition.
    """

    id: str
    restaurant_id: str
    restaurant_location: LatLon
    destination: LatLon

    priority: OrderPriority = OrderPriority.NORMAL
    status: OrderStatus = OrderStatus.PENDING
    assigned_driver_id: Optional[str] = None
    customer_id: Optional[str] = None

    created_at: datetime = field(default_factory=datetime.now)
    driver_assigned_at: Optional[datetime] = None
    picked_up_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    # Filled in by fee resolution
    delivery_fee: Optional[float] = None
    delivery_zone_id: Optional[str] = None
    estimated_minutes: Optional[int] = None


@dataclass(frozen=True)
class DeliveryZone:
    """
    A geographic polygon tied to a restaurant with its own fee/ETA policy.
    Higher priority wins when zones overlap.
    """

    id: str
    restaurant_id: str
    boundary: Tuple[LatLon, ...]

    name: str = ""
    base_fee: float = 0.0
    per_km_fee: float = 0.0
    estimated_minutes: int = 30
    minimum_order_amount: float = 0.0

    priority: int = 1
    is_active: bool = True


@dataclass(frozen=True)
class OrderLine:
    item_id: str
    unit_price: Decimal
    quantity: int = 1


@dataclass(frozen=True)
class Promotion:
    id: str
    code: str
    promotion_type: PromotionType

    discount_percentage: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    maximum_discount: Optional[Decimal] = None
    minimum_order_amount: Optional[Decimal] = None

    # None means open to every customer
    applicable_customer_ids: Optional[FrozenSet[str]] = None

    is_active: bool = True
    usage_limit: Optional[int] = None
    current_usage: int = 0
