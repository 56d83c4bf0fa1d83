"""
Purpose: Delivery fee / zone resolution and order totals.
What it does:

- FeeAndZoneResolver: picks the delivery zone whose polygon contains the
  destination (highest priority wins, first-defined breaks ties) and computes
  the delivery fee from the restaurant -> destination distance. Falls back to
  the policy's default fee formula when no zone matches.
- calculate_order_total: subtotal, promotion discount, service fee, tax and total.

Rule: Pure functions over their inputs and the zone catalog read. No mutation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from drivers.policy import DispatchPolicy, default_dispatch_policy
from routing.geo import distance_km, validate_coordinate
from routing.geofence import zones_containing

from .models import DeliveryZone, Order, OrderLine, Promotion, PromotionType
from .zones import ZoneCatalog

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class FeeResult:
    fee: float
    zone_id: Optional[str]
    estimated_minutes: int
    distance_km: float


@dataclass(frozen=True)
class OrderTotal:
    subtotal: Decimal
    tax_amount: Decimal
    delivery_fee: Decimal
    service_fee: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    applied_promotion_id: Optional[str] = None


def select_zone(destination, candidate_zones: Sequence[DeliveryZone]) -> Optional[DeliveryZone]:
    """
    The active zone containing destination with the highest priority.
    Ties keep the first-defined zone.
    """
    active = [zone for zone in candidate_zones if zone.is_active]
    best: Optional[DeliveryZone] = None
    for zone in zones_containing(destination, active):
        # strict '>' keeps the earlier zone on equal priority
        if best is None or zone.priority > best.priority:
            best = zone
    return best


class FeeAndZoneResolver:
    def __init__(self, zone_catalog: Optional[ZoneCatalog] = None, policy: Optional[DispatchPolicy] = None):
        self.zone_catalog = zone_catalog
        self.policy = policy or default_dispatch_policy()

    def resolve(self, restaurant_location, destination, candidate_zones: Sequence[DeliveryZone]) -> FeeResult:
        """
        fee = max(base + per_km * distance, 0) using the matched zone's rates,
        or the policy defaults when no active zone contains the destination.
        """
        restaurant_location = validate_coordinate(restaurant_location)
        destination = validate_coordinate(destination)

        distance = distance_km(restaurant_location, destination)
        zone = select_zone(destination, candidate_zones)

        if zone is not None:
            fee = max(zone.base_fee + zone.per_km_fee * distance, 0.0)
            zone_id = zone.id
            estimated_minutes = zone.estimated_minutes
        else:
            logger.debug("No zone contains %s, using default fee formula", destination)
            fee = max(self.policy.default_base_fee + self.policy.default_per_km_fee * distance, 0.0)
            zone_id = None
            estimated_minutes = self.policy.default_estimated_minutes

        return FeeResult(
            fee=round(fee, 2),
            zone_id=zone_id,
            estimated_minutes=estimated_minutes,
            distance_km=round(distance, 2),
        )

    def resolve_for_order(self, order: Order) -> FeeResult:
        zones = self.zone_catalog.get_zones_for_restaurant(order.restaurant_id) if self.zone_catalog else []
        return self.resolve(order.restaurant_location, order.destination, zones)


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def promotion_applies(promotion: Promotion, subtotal: Decimal, customer_id: Optional[str]) -> bool:
    if not promotion.is_active:
        return False
    if promotion.usage_limit is not None and promotion.current_usage >= promotion.usage_limit:
        return False
    if promotion.applicable_customer_ids is not None and customer_id not in promotion.applicable_customer_ids:
        return False
    if promotion.minimum_order_amount is not None and subtotal < promotion.minimum_order_amount:
        return False
    return True


def calculate_order_total(
    lines: Sequence[OrderLine],
    delivery_fee,
    *,
    promotion: Optional[Promotion] = None,
    customer_id: Optional[str] = None,
    policy: Optional[DispatchPolicy] = None,
) -> OrderTotal:
    """
    Prices an order the way checkout does.

    subtotal    = sum(unit_price * quantity)
    service fee = service_fee_rate * subtotal
    tax         = tax_rate * (subtotal - item discount)
    total       = subtotal + tax + delivery fee + service fee - item discount

    A free_delivery promotion waives the delivery fee; the waived amount is
    reported as discount_amount but is not subtracted from the total twice.
    """
    policy = policy or default_dispatch_policy()

    subtotal = _money(sum((Decimal(str(line.unit_price)) * line.quantity for line in lines), Decimal("0")))
    delivery = _money(delivery_fee)
    service_fee = _money(subtotal * Decimal(str(policy.service_fee_rate)))

    discount = Decimal("0.00")
    item_discount = Decimal("0.00")
    applied_promotion_id = None

    if promotion is not None and promotion_applies(promotion, subtotal, customer_id):
        if promotion.promotion_type == PromotionType.PERCENTAGE_DISCOUNT:
            discount = _money(subtotal * Decimal(str(promotion.discount_percentage or 0)) / 100)
        elif promotion.promotion_type == PromotionType.FIXED_AMOUNT_DISCOUNT:
            discount = _money(promotion.discount_amount or 0)
        elif promotion.promotion_type == PromotionType.FREE_DELIVERY:
            discount = delivery

        if promotion.maximum_discount is not None:
            discount = min(discount, _money(promotion.maximum_discount))

        if promotion.promotion_type == PromotionType.FREE_DELIVERY:
            delivery = delivery - discount
        else:
            discount = min(discount, subtotal)
            item_discount = discount

        applied_promotion_id = promotion.id
        logger.debug("Applied promotion %s: discount %s", promotion.code, discount)

    tax = _money((subtotal - item_discount) * Decimal(str(policy.tax_rate)))
    total = _money(subtotal + tax + delivery + service_fee - item_discount)

    return OrderTotal(
        subtotal=subtotal,
        tax_amount=tax,
        delivery_fee=delivery,
        service_fee=service_fee,
        discount_amount=discount,
        total_amount=total,
        applied_promotion_id=applied_promotion_id,
    )
