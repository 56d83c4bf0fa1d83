import pytest

from drivers.policy import DispatchPolicy, default_dispatch_policy


def test_default_policy_values():
    policy = default_dispatch_policy()

    assert policy.freshness_window_minutes == 10
    assert policy.priority_multipliers == {"normal": 1.0, "high": 1.5, "urgent": 2.0}
    assert policy.default_base_fee == 2.99
    assert policy.default_per_km_fee == 0.50
    assert policy.default_estimated_minutes == 30
    assert policy.vehicle_speeds_kmh["car"] == 40.0
    assert policy.rush_hour_windows == [(7, 9), (16, 18)]
    assert policy.rush_hour_derate == 0.30


@pytest.mark.parametrize(
    "overrides",
    [
        {"freshness_window_minutes": 0},
        {"rating_weight": -0.1},
        {"priority_multipliers": {"normal": 1.0, "high": 1.5}},
        {"rush_hour_derate": 1.0},
        {"rush_hour_windows": [(9, 7)]},
        {"vehicle_speeds_kmh": {"bicycle": 15.0}},
        {"vehicle_speeds_kmh": {"car": 0.0}},
        {"max_assignment_attempts": 0},
        {"lock_timeout_seconds": 0},
    ],
)
def test_validate_rejects_bad_values(overrides):
    with pytest.raises(ValueError):
        DispatchPolicy(**overrides).validate()


def test_from_env_overrides(monkeypatch):
    monkeypatch.setenv("DISPATCH_FRESHNESS_WINDOW_MINUTES", "5")
    monkeypatch.setenv("DISPATCH_MAX_ASSIGNMENT_ATTEMPTS", "7")
    monkeypatch.setenv("DISPATCH_LOCK_TIMEOUT_SECONDS", "0.5")
    monkeypatch.setenv("DISPATCH_RUSH_HOUR_DERATE", "0.25")

    policy = DispatchPolicy.from_env()

    assert policy.freshness_window_minutes == 5.0
    assert policy.max_assignment_attempts == 7
    assert policy.lock_timeout_seconds == 0.5
    assert policy.rush_hour_derate == 0.25


def test_from_env_rejects_invalid_override(monkeypatch):
    monkeypatch.setenv("DISPATCH_MAX_ASSIGNMENT_ATTEMPTS", "0")
    with pytest.raises(ValueError):
        DispatchPolicy.from_env()
