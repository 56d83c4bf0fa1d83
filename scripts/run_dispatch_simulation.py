import logging
import os
import random
from datetime import datetime, timedelta
from typing import List

import pandas as pd

from dispatch.service import DeliveryService
from drivers.directory import InMemoryDriverDirectory
from drivers.models import Driver
from orders.models import DeliveryZone, Order, OrderPriority
from orders.zones import InMemoryZoneCatalog
from routing.eta_service import DriverLocationStale
from scripts.generate_mock_drivers import generate_mock_drivers

RESTAURANT_ID = "MRIT001"
RESTAURANT_LOCATION = (40.7128, -74.0060)

# Two overlapping zones around the restaurant: a small premium inner zone
# and a wider standard zone.
ZONES = [
    DeliveryZone(
        id="zone-standard",
        restaurant_id=RESTAURANT_ID,
        name="Lower Manhattan",
        boundary=((40.69, -74.03), (40.69, -73.96), (40.75, -73.96), (40.75, -74.03)),
        base_fee=1.99,
        per_km_fee=0.40,
        estimated_minutes=35,
        priority=1,
    ),
    DeliveryZone(
        id="zone-inner",
        restaurant_id=RESTAURANT_ID,
        name="Financial District",
        boundary=((40.70, -74.02), (40.70, -73.99), (40.72, -73.99), (40.72, -74.02)),
        base_fee=0.99,
        per_km_fee=0.25,
        estimated_minutes=20,
        priority=5,
    ),
]


def load_drivers(filepath: str, now: datetime) -> List[Driver]:
    df = pd.read_csv(filepath)

    drivers = []
    for _, row in df.iterrows():
        drivers.append(
            Driver.new(
                str(row["driver_id"]),
                float(row["lat"]),
                float(row["lon"]),
                str(row["status"]),
                rating=float(row["rating"]),
                on_time_rate=float(row["on_time_rate"]),
                total_deliveries=int(row["total_deliveries"]),
                vehicle_type=str(row["vehicle_type"]),
                location_updated_at=now - timedelta(minutes=int(row["ping_age_minutes"])),
            )
        )
    return drivers


def generate_orders(count: int, rng: random.Random) -> List[Order]:
    priorities = [OrderPriority.NORMAL] * 6 + [OrderPriority.HIGH] * 3 + [OrderPriority.URGENT]
    orders = []
    for i in range(count):
        destination = (
            RESTAURANT_LOCATION[0] + (rng.random() - 0.5) * 0.12,
            RESTAURANT_LOCATION[1] + (rng.random() - 0.5) * 0.12,
        )
        orders.append(
            Order(
                id=f"ORD-{str(i+1).zfill(4)}",
                restaurant_id=RESTAURANT_ID,
                restaurant_location=RESTAURANT_LOCATION,
                destination=destination,
                priority=rng.choice(priorities),
            )
        )
    return orders


def run_simulation(order_count: int = 60, driver_count: int = 40, seed: int = 7) -> pd.DataFrame:
    print("=== STARTING END-TO-END DISPATCH SIMULATION ===")
    rng = random.Random(seed)
    now = datetime.now()

    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    drivers_path = os.path.join(base_dir, "mock_drivers.csv")
    generate_mock_drivers(drivers_path, count=driver_count, seed=seed)

    # 1. Load Data
    directory = InMemoryDriverDirectory(load_drivers(drivers_path, now), clock=lambda: now)
    catalog = InMemoryZoneCatalog(ZONES)
    orders = generate_orders(order_count, rng)
    print(f"Loaded {len(orders)} Orders and {len(directory.all())} Drivers.\n")

    service = DeliveryService(directory, catalog, clock=lambda: now)

    # 2. Checkout -> dispatch -> ETA for every order; every third delivery
    #    completes immediately and frees its driver for later orders.
    rows = []
    for index, order in enumerate(orders):
        fee = service.resolve_fee(order)
        result = service.assign_driver(order)

        minutes_remaining = None
        if result.assigned:
            try:
                minutes_remaining = service.estimate_eta(order).minutes_remaining
            except DriverLocationStale:
                minutes_remaining = None
            if index % 3 == 0:
                service.complete_delivery(order)

        rows.append({
            "order_id": order.id,
            "priority": order.priority.value,
            "zone_id": fee.zone_id or "default",
            "fee": fee.fee,
            "distance_km": fee.distance_km,
            "driver_id": result.driver_id or "NONE",
            "score": round(result.score, 4) if result.score is not None else None,
            "eta_minutes": minutes_remaining,
            "status": order.status.value,
        })

    results = pd.DataFrame(rows)

    output_path = os.path.join(base_dir, "dispatch_results.csv")
    results.to_csv(output_path, index=False)

    assigned = results[results["driver_id"] != "NONE"]
    print("\n--- Fee by zone ---")
    print(results.groupby("zone_id")["fee"].agg(["count", "mean", "min", "max"]).round(2))
    print("\n--- Assignment by priority ---")
    print(assigned.groupby("priority")[["score", "eta_minutes"]].mean().round(2))

    print("\n=== SIMULATION COMPLETE ===")
    print(f"Orders Assigned: {len(assigned)} / {len(results)}")
    print(f"Results written to '{output_path}'.")
    return results


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_simulation()
