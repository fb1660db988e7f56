"""
Configuration & Constants
=========================
This module serves as the central registry for endpoints, thresholds and
visual constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (60 °C, 3000 ms, ...) scattered
   throughout the controllers and views.
2. Deployment: The backend address and the advisory credential come from the
   environment, so the same build runs against a lab or a field server.

Exports:
    API_BASE_URL (str): Base URL of the telemetry backend.
    AlertThresholds: Bundle of the alert state machine constants.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

# --- Backend ---
API_BASE_URL: str = os.environ.get("THERMALSENTINEL_API_URL", "http://localhost:8080/api").rstrip("/")
REQUEST_TIMEOUT_S: float = 5.0

# --- Live alerting ---
HIGH_TEMP_C: float = 60.0
LOW_TEMP_C: float = 55.0
ALERT_COOLDOWN_S: float = 60.0
SENT_DELAY_S: float = 2.5
SENT_DISPLAY_S: float = 5.0
ALERT_EMAIL: str = os.environ.get("THERMALSENTINEL_ALERT_EMAIL", "admin@sentinelcore.com")

# --- Polling ---
POLL_INTERVAL_MS: int = 3000
HISTORY_LENGTH: int = 15

# --- Terrain view ---
TERRAIN_HEIGHT: float = 10.0    # nominal height of the hottest pixel
TERRAIN_Z_SCALE: float = 0.5    # vertical exaggeration
TERRAIN_EXTENT: float = 20.0    # world length of the longest frame side

# --- Advisory service ---
ADVISORY_MODEL: str = "gemini-2.5-flash"
ADVISORY_URL: str = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
API_KEY_ENV_VARS: tuple[str, ...] = ("THERMALSENTINEL_API_KEY", "GEMINI_API_KEY")


@dataclass(frozen=True)
class AlertThresholds:
    """Constants driving the overheat notification cycle."""
    high: float = HIGH_TEMP_C
    low: float = LOW_TEMP_C
    cooldown_s: float = ALERT_COOLDOWN_S
    sent_delay_s: float = SENT_DELAY_S
    display_s: float = SENT_DISPLAY_S

    def __post_init__(self) -> None:
        if self.low >= self.high:
            raise ValueError(f"Low threshold ({self.low}) must be below high threshold ({self.high}).")
        if self.cooldown_s < 0:
            raise ValueError("cooldown_s must be non-negative")
        if self.sent_delay_s <= 0 or self.display_s <= 0:
            raise ValueError("sent_delay_s and display_s must be positive")


def resolve_api_key(remote_key: Optional[str] = None) -> Optional[str]:
    """
    Find the advisory credential.

    The environment wins over the remote configuration record; an empty
    string counts as missing.
    """
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    if remote_key and remote_key.strip():
        return remote_key.strip()
    return None
