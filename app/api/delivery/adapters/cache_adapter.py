from threading import Lock
from typing import Dict, Optional

from app.api.delivery.contracts.routing_contract import GeocodeResult


class CacheAdapter:
    """In-memory geocode cache shared by requests of the same worker."""

    def __init__(self):
        self._geocodes: Dict[str, GeocodeResult] = {}
        self._lock = Lock()

    @staticmethod
    def key_for(address: str) -> str:
        return " ".join(address.lower().split())

    def get(self, address: str) -> Optional[GeocodeResult]:
        with self._lock:
            return self._geocodes.get(self.key_for(address))

    def set(self, address: str, result: GeocodeResult):
        with self._lock:
            self._geocodes[self.key_for(address)] = result

    def clear(self, address: Optional[str] = None):
        with self._lock:
            if address:
                self._geocodes.pop(self.key_for(address), None)
            else:
                self._geocodes.clear()
