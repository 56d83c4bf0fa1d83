from datetime import datetime, timedelta

import pytest

from drivers.models import Driver, DriverStatus, VehicleType
from drivers.policy import DispatchPolicy
from orders.models import Order
from routing.eta_service import DriverLocationStale, ETAEstimator, is_rush_hour
from routing.geo import InvalidCoordinate

MIDDAY = datetime(2024, 5, 14, 12, 0)
MORNING_RUSH = datetime(2024, 5, 14, 8, 30)
EVENING_RUSH = datetime(2024, 5, 14, 16, 0)


def make_driver(now, vehicle_type=VehicleType.CAR, ping_age=timedelta(minutes=1), location=(40.70, -74.00)):
    return Driver.new(
        "d1", location[0], location[1], DriverStatus.BUSY,
        vehicle_type=vehicle_type, location_updated_at=now - ping_age,
    )


@pytest.fixture
def order():
    return Order(
        id="o1",
        restaurant_id="r1",
        restaurant_location=(40.7128, -74.0060),
        destination=(40.7306, -73.9352),
    )


def fixed_distance(km):
    return lambda origin, destination: km


@pytest.mark.parametrize(
    "vehicle_type, now, distance, expected_minutes",
    [
        (VehicleType.CAR, MIDDAY, 11.0, 17),          # 40 km/h: 16.5 min
        (VehicleType.CAR, MORNING_RUSH, 11.0, 24),    # 28 km/h: 23.6 min
        (VehicleType.CAR, EVENING_RUSH, 11.0, 24),
        (VehicleType.MOTORCYCLE, MIDDAY, 11.0, 19),   # 35 km/h: 18.9 min
        (VehicleType.BICYCLE, MIDDAY, 11.1, 45),      # 15 km/h: 44.4 min
    ],
)
def test_minutes_remaining_by_vehicle_and_time_of_day(order, vehicle_type, now, distance, expected_minutes):
    estimator = ETAEstimator(distance_provider=fixed_distance(distance))

    result = estimator.estimate(order, make_driver(now, vehicle_type), now=now)

    assert result.minutes_remaining == expected_minutes
    assert result.eta_at == now + timedelta(minutes=expected_minutes)
    assert result.distance_remaining_km == distance


def test_rush_hour_windows_are_half_open():
    windows = [(7, 9), (16, 18)]
    assert is_rush_hour(datetime(2024, 1, 1, 7, 0), windows)
    assert is_rush_hour(datetime(2024, 1, 1, 8, 59), windows)
    assert not is_rush_hour(datetime(2024, 1, 1, 9, 0), windows)
    assert is_rush_hour(datetime(2024, 1, 1, 17, 30), windows)
    assert not is_rush_hour(datetime(2024, 1, 1, 18, 0), windows)
    assert not is_rush_hour(datetime(2024, 1, 1, 6, 59), windows)


def test_haversine_distance_is_the_default(order):
    estimator = ETAEstimator()
    result = estimator.estimate(order, make_driver(MIDDAY), now=MIDDAY)

    assert 6.0 < result.distance_remaining_km < 7.0
    assert result.minutes_remaining == 10


def test_driver_at_destination_has_zero_minutes(order):
    estimator = ETAEstimator()
    result = estimator.estimate(order, make_driver(MIDDAY, location=order.destination), now=MIDDAY)

    assert result.minutes_remaining == 0
    assert result.distance_remaining_km == 0.0
    assert result.eta_at == MIDDAY


def test_estimate_is_idempotent(order):
    estimator = ETAEstimator()
    driver = make_driver(MIDDAY)

    first = estimator.estimate(order, driver, now=MIDDAY)
    second = estimator.estimate(order, driver, now=MIDDAY)

    assert first == second


def test_stale_location_raises(order):
    estimator = ETAEstimator()
    driver = make_driver(MIDDAY, ping_age=timedelta(minutes=11))

    with pytest.raises(DriverLocationStale):
        estimator.estimate(order, driver, now=MIDDAY)


def test_missing_location_timestamp_is_stale(order):
    from dataclasses import replace

    driver = replace(make_driver(MIDDAY), location_updated_at=None)
    with pytest.raises(DriverLocationStale):
        ETAEstimator().estimate(order, driver, now=MIDDAY)


def test_custom_derate_and_clock(order):
    policy = DispatchPolicy(rush_hour_derate=0.5)
    estimator = ETAEstimator(policy, distance_provider=fixed_distance(10.9), clock=lambda: MORNING_RUSH)

    # 10.9 km at 20 km/h = 32.7 min
    result = estimator.estimate(order, make_driver(MORNING_RUSH))
    assert result.minutes_remaining == 33
    assert result.eta_at == MORNING_RUSH + timedelta(minutes=33)


def test_invalid_destination_propagates(order):
    order.destination = (200, -73.9352)
    with pytest.raises(InvalidCoordinate):
        ETAEstimator().estimate(order, make_driver(MIDDAY), now=MIDDAY)
