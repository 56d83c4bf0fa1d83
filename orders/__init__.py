"""
Orders domain package.

Public API:
- Domain models: Order, DeliveryZone, OrderStatus, OrderPriority
- Fee resolution: FeeAndZoneResolver, FeeResult
- Zone catalog: InMemoryZoneCatalog
"""
from .models import DeliveryZone, Order, OrderPriority, OrderStatus
from .pricing import FeeAndZoneResolver, FeeResult, calculate_order_total
from .zones import InMemoryZoneCatalog

__all__ = [
    "Order",
    "DeliveryZone",
    "OrderStatus",
    "OrderPriority",
    "FeeAndZoneResolver",
    "FeeResult",
    "calculate_order_total",
    "InMemoryZoneCatalog",
]
