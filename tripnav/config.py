"""Centralised engine settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Transition execution
    transition_timeout_seconds: float = 30.0  # shared across the action list
    action_timeout_seconds: float = 30.0  # per attempt, capped by the budget
    retry_attempts: int = 2
    retry_delay_seconds: float = 1.0

    # Geofencing
    geofence_radius_m: float = 500.0
    geofence_check_interval_seconds: float = 20.0
    geofence_approach_interval_seconds: float = 5.0  # polling while near the zone
    geofence_approach_radius_factor: float = 3.0  # "near" = factor x radius

    # Routing service
    osrm_endpoints: list[str] = [
        "https://router.project-osrm.org",
        "https://routing.openstreetmap.de",
    ]
    osrm_timeout_seconds: float = 10.0

    # API
    rate_limit: str = "100/minute"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
