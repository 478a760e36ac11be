# walksafe/config.py
"""
Runtime configuration for the WalkSafe service.

Values default to the shared service constants and can be overridden through
environment variables, which app.py loads from a local .env file.
"""
import os
from dataclasses import dataclass
from typing import Optional

from walksafe.constants.services import ServiceConstants


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class WalkSafeConfig:
    """Configuration parameters shared by the planner, advisor and pin store."""
    osrm_base_url: str = ServiceConstants.OSRM_BASE_URL
    request_timeout: float = ServiceConstants.REQUEST_TIMEOUT_SEC
    cache_enabled: bool = False
    gemini_api_key: Optional[str] = None
    gemini_model: str = ServiceConstants.GEMINI_MODEL
    firebase_url: Optional[str] = None
    firebase_auth: Optional[str] = None
    pin_store_path: str = ServiceConstants.LOCAL_PIN_STORE_PATH
    default_lat: float = ServiceConstants.DEFAULT_CENTER_LAT
    default_lng: float = ServiceConstants.DEFAULT_CENTER_LNG

    @classmethod
    def from_env(cls) -> "WalkSafeConfig":
        return cls(
            osrm_base_url=os.getenv("OSRM_BASE_URL", ServiceConstants.OSRM_BASE_URL),
            request_timeout=float(os.getenv("WALKSAFE_REQUEST_TIMEOUT", ServiceConstants.REQUEST_TIMEOUT_SEC)),
            cache_enabled=_env_flag("WALKSAFE_CACHE_ENABLED", False),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", ServiceConstants.GEMINI_MODEL),
            firebase_url=os.getenv("WALKSAFE_FIREBASE_URL") or None,
            firebase_auth=os.getenv("WALKSAFE_FIREBASE_AUTH") or None,
            pin_store_path=os.getenv("WALKSAFE_PIN_STORE_PATH", ServiceConstants.LOCAL_PIN_STORE_PATH),
            default_lat=float(os.getenv("WALKSAFE_DEFAULT_LAT", ServiceConstants.DEFAULT_CENTER_LAT)),
            default_lng=float(os.getenv("WALKSAFE_DEFAULT_LNG", ServiceConstants.DEFAULT_CENTER_LNG)),
        )
