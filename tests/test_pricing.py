from decimal import Decimal

import pytest

from orders.models import DeliveryZone, Order, OrderLine, Promotion, PromotionType
from orders.pricing import FeeAndZoneResolver, calculate_order_total, select_zone
from orders.zones import InMemoryZoneCatalog
from routing.geo import InvalidCoordinate, distance_km

RESTAURANT = (40.7128, -74.0060)
DESTINATION = (40.7306, -73.9352)

# covers DESTINATION
WIDE_RING = ((40.69, -74.03), (40.69, -73.90), (40.76, -73.90), (40.76, -74.03))


def make_zone(zone_id, priority=1, base_fee=1.0, per_km_fee=0.1, minutes=25, ring=WIDE_RING, is_active=True):
    return DeliveryZone(
        id=zone_id,
        restaurant_id="r1",
        boundary=ring,
        base_fee=base_fee,
        per_km_fee=per_km_fee,
        estimated_minutes=minutes,
        priority=priority,
        is_active=is_active,
    )


@pytest.fixture
def resolver():
    return FeeAndZoneResolver()


def test_default_fee_when_no_zone_matches(resolver):
    """
    No candidate zones -> 2.99 + 0.50/km, 30 minutes, no zone id.
    """
    distance = distance_km(RESTAURANT, DESTINATION)
    result = resolver.resolve(RESTAURANT, DESTINATION, [])

    assert result.zone_id is None
    assert result.estimated_minutes == 30
    assert result.fee == round(2.99 + 0.50 * distance, 2)
    assert result.distance_km == round(distance, 2)


def test_zone_rates_apply_when_destination_inside(resolver):
    distance = distance_km(RESTAURANT, DESTINATION)
    zone = make_zone("z1", base_fee=1.5, per_km_fee=0.2, minutes=22)

    result = resolver.resolve(RESTAURANT, DESTINATION, [zone])

    assert result.zone_id == "z1"
    assert result.estimated_minutes == 22
    assert result.fee == round(1.5 + 0.2 * distance, 2)


def test_highest_priority_zone_wins(resolver):
    zones = [make_zone("low", priority=1), make_zone("high", priority=3), make_zone("mid", priority=2)]
    assert resolver.resolve(RESTAURANT, DESTINATION, zones).zone_id == "high"


def test_priority_tie_goes_to_first_defined(resolver):
    zones = [make_zone("first", priority=2), make_zone("second", priority=2)]
    assert resolver.resolve(RESTAURANT, DESTINATION, zones).zone_id == "first"


def test_inactive_and_non_containing_zones_are_ignored(resolver):
    far_ring = ((0, 0), (0, 1), (1, 1), (1, 0))
    zones = [make_zone("inactive", priority=9, is_active=False), make_zone("far", priority=5, ring=far_ring)]

    result = resolver.resolve(RESTAURANT, DESTINATION, zones)

    assert result.zone_id is None
    assert result.estimated_minutes == 30


def test_fee_never_negative(resolver):
    zone = make_zone("promo", base_fee=-10.0, per_km_fee=-1.0)
    result = resolver.resolve(RESTAURANT, DESTINATION, [zone])

    assert result.zone_id == "promo"
    assert result.fee == 0.0


def test_invalid_destination_raises(resolver):
    with pytest.raises(InvalidCoordinate):
        resolver.resolve(RESTAURANT, (200, -73.9352), [make_zone("z1")])


def test_resolve_for_order_reads_restaurant_zones():
    catalog = InMemoryZoneCatalog([make_zone("z1", minutes=18)])
    resolver = FeeAndZoneResolver(catalog)
    order = Order(id="o1", restaurant_id="r1", restaurant_location=RESTAURANT, destination=DESTINATION)
    other = Order(id="o2", restaurant_id="r2", restaurant_location=RESTAURANT, destination=DESTINATION)

    assert resolver.resolve_for_order(order).zone_id == "z1"
    assert resolver.resolve_for_order(other).zone_id is None


def test_select_zone_returns_none_for_empty_catalog():
    assert select_zone(DESTINATION, []) is None


# --- Order totals ---

LINES = [
    OrderLine(item_id="carbonara", unit_price=Decimal("18.99"), quantity=2),
    OrderLine(item_id="tiramisu", unit_price=Decimal("7.50"), quantity=1),
]


def test_order_total_without_promotion():
    total = calculate_order_total(LINES, 3.99)

    assert total.subtotal == Decimal("45.48")
    assert total.service_fee == Decimal("0.91")
    assert total.tax_amount == Decimal("3.64")
    assert total.discount_amount == Decimal("0.00")
    assert total.total_amount == Decimal("54.02")
    assert total.applied_promotion_id is None


def test_percentage_promotion_respects_maximum_discount():
    promotion = Promotion(
        id="p1",
        code="TENOFF",
        promotion_type=PromotionType.PERCENTAGE_DISCOUNT,
        discount_percentage=Decimal("10"),
        maximum_discount=Decimal("3.00"),
    )
    total = calculate_order_total(LINES, 3.99, promotion=promotion)

    assert total.discount_amount == Decimal("3.00")
    # tax on (45.48 - 3.00)
    assert total.tax_amount == Decimal("3.40")
    assert total.total_amount == Decimal("45.48") + Decimal("3.40") + Decimal("3.99") + Decimal("0.91") - Decimal("3.00")
    assert total.applied_promotion_id == "p1"


def test_free_delivery_waives_fee_once():
    promotion = Promotion(id="p2", code="FREEDEL", promotion_type=PromotionType.FREE_DELIVERY)
    total = calculate_order_total(LINES, 3.99, promotion=promotion)

    assert total.delivery_fee == Decimal("0.00")
    assert total.discount_amount == Decimal("3.99")
    assert total.tax_amount == Decimal("3.64")
    assert total.total_amount == Decimal("45.48") + Decimal("3.64") + Decimal("0.91")


def test_fixed_discount_capped_at_subtotal():
    promotion = Promotion(
        id="p3",
        code="BIG",
        promotion_type=PromotionType.FIXED_AMOUNT_DISCOUNT,
        discount_amount=Decimal("100"),
    )
    total = calculate_order_total([OrderLine("soda", Decimal("2.00"))], 2.99, promotion=promotion)

    assert total.discount_amount == Decimal("2.00")
    assert total.tax_amount == Decimal("0.00")
    assert total.total_amount == Decimal("2.99") + Decimal("0.04")


@pytest.mark.parametrize(
    "promotion, customer_id",
    [
        (Promotion(id="a", code="A", promotion_type=PromotionType.FREE_DELIVERY, is_active=False), None),
        (Promotion(id="b", code="B", promotion_type=PromotionType.FREE_DELIVERY, usage_limit=5, current_usage=5), None),
        (Promotion(id="c", code="C", promotion_type=PromotionType.FREE_DELIVERY, applicable_customer_ids=frozenset({"vip"})), "regular"),
        (Promotion(id="d", code="D", promotion_type=PromotionType.FREE_DELIVERY, minimum_order_amount=Decimal("50")), None),
    ],
)
def test_ineligible_promotions_are_not_applied(promotion, customer_id):
    total = calculate_order_total(LINES, 3.99, promotion=promotion, customer_id=customer_id)

    assert total.applied_promotion_id is None
    assert total.delivery_fee == Decimal("3.99")
    assert total.discount_amount == Decimal("0.00")
