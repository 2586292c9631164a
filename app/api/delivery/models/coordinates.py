from typing import Optional, Tuple

from pydantic import BaseModel


class Coordinates(BaseModel):
    """Latitude/longitude value object."""
    lat: float
    lng: float

    def to_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lng)

    @classmethod
    def from_optional(cls, lat: Optional[float], lng: Optional[float]) -> Optional["Coordinates"]:
        if lat is None or lng is None:
            return None
        return cls(lat=lat, lng=lng)
