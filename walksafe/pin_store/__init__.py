"""
pin_store - Hazard report collection for WalkSafe

Exposes the PinStore capability, its two backends, and create_pin_store,
which picks one backend at startup.
"""
import logging

from .base import PinStore
from .exceptions import PinStoreError, StoreConfigurationError
from .firebase import FirebasePinStore
from .local import LocalPinStore


def create_pin_store(config) -> PinStore:
    """Firebase when a database URL is configured and usable, otherwise the local file store."""
    if config.firebase_url:
        try:
            return FirebasePinStore(config.firebase_url, auth_token=config.firebase_auth,
                                    timeout=config.request_timeout)
        except StoreConfigurationError as e:
            logging.warning(f"Firebase init failed, falling back to local storage: {e}")
    else:
        logging.info("No Firebase database configured. Using local storage.")
    return LocalPinStore(config.pin_store_path)


__all__ = ['PinStore', 'PinStoreError', 'StoreConfigurationError', 'FirebasePinStore',
           'LocalPinStore', 'create_pin_store']
