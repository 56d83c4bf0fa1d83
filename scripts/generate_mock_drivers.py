import csv
import random

VEHICLE_TYPES = ["car", "car", "car", "motorcycle", "scooter", "bicycle"]


def generate_mock_drivers(filename="mock_drivers_100.csv", count=100, seed=None):
    # Base coordinate roughly mapping to lower Manhattan, where the sample
    # restaurant (40.7128, -74.0060) sits.
    base_lat = 40.7128
    base_lon = -74.0060
    rng = random.Random(seed)

    with open(filename, mode='w', newline='') as file:
        writer = csv.writer(file)
        writer.writerow([
            "driver_id", "lat", "lon", "status", "rating", "on_time_rate",
            "total_deliveries", "vehicle_type", "ping_age_minutes",
        ])

        for i in range(count):
            driver_id = f"DRV-{str(i+1).zfill(3)}"

            # Scatter drivers randomly around the city center (roughly +/- 8km)
            lat = base_lat + (rng.random() - 0.5) * 0.15
            lon = base_lon + (rng.random() - 0.5) * 0.15

            # 75% available, the rest busy/offline/on break
            roll = rng.random()
            if roll < 0.75:
                status = "available"
            elif roll < 0.85:
                status = "busy"
            elif roll < 0.95:
                status = "offline"
            else:
                status = "on_break"

            rating = round(rng.uniform(3.0, 5.0), 2)
            on_time_rate = round(rng.uniform(60.0, 100.0), 1)
            total_deliveries = rng.randint(0, 2000)
            vehicle_type = rng.choice(VEHICLE_TYPES)

            # ~10% of drivers have not pinged inside the 10 minute freshness window
            ping_age_minutes = rng.randint(11, 60) if rng.random() < 0.1 else rng.randint(0, 9)

            writer.writerow([
                driver_id, round(lat, 6), round(lon, 6), status, rating, on_time_rate,
                total_deliveries, vehicle_type, ping_age_minutes,
            ])

    print(f"Successfully generated {count} mock drivers into '{filename}'.")


if __name__ == "__main__":
    generate_mock_drivers()
