"""Geocoding provider interface and candidate result shape."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class GeocodeCandidate:
    """One candidate location returned by a geocoding provider."""

    longitude: float
    latitude: float
    formatted_address: str
    street: str = ""
    city: str = ""
    state_code: str = ""
    zipcode: str = ""
    country_code: str = ""


class Geocoder(Protocol):
    """Resolve free-text addresses to candidate locations.

    Implementations return candidates in provider order (possibly
    empty) and raise ``ProviderUnavailableError`` when the provider
    cannot be reached or answers with an error.
    """

    def geocode(self, address: str) -> list[GeocodeCandidate]: ...


class Throttle:
    """Enforce a minimum interval between outbound requests.

    Parameters
    ----------
    min_interval : float
        Seconds between requests; ``0`` disables throttling.
    """

    def __init__(self, min_interval: float = 0.0) -> None:
        self.min_interval = min_interval
        self._last_ts = float("-inf")
        self._lock = threading.Lock()

    def wait(self) -> None:
        if self.min_interval <= 0:
            return
        with self._lock:
            wait = self._last_ts + self.min_interval - time.monotonic()
            if wait > 0:
                time.sleep(wait)
            self._last_ts = time.monotonic()
