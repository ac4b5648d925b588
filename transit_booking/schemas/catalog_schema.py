"""Route, vehicle and departure models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VehicleType(str, Enum):
    BUS = "bus"
    VAN = "van"
    CAR = "car"
    PRIVATE = "private"


class DepartureStatus(str, Enum):
    SCHEDULED = "scheduled"
    DEPARTED = "departed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Vehicle(BaseModel):
    """A vehicle class that can be assigned to departures."""
    model_config = ConfigDict(frozen=True)

    vehicle_id: str
    name: str
    type: VehicleType
    capacity: int = Field(ge=1)
    features: list[str] = Field(default_factory=list)
    price_modifier: float = 1.0
    is_active: bool = True


class Route(BaseModel):
    """An origin/destination pair. City names are stored upper-cased."""
    model_config = ConfigDict(frozen=True)

    route_id: str
    origin: str
    destination: str
    base_price: int = Field(ge=0)
    duration_minutes: int = Field(default=0, ge=0)
    distance_km: Optional[float] = Field(default=None, ge=0)
    is_active: bool = True

    @field_validator("origin", "destination")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.strip().upper()


class Departure(BaseModel):
    """One bookable trip. ``available_seats`` is owned by the inventory ledger."""
    model_config = ConfigDict(frozen=True)

    departure_id: str
    route_id: str
    vehicle_id: str
    departure_time: datetime
    fare: int = Field(ge=0)
    available_seats: int = Field(ge=0)
    status: DepartureStatus = DepartureStatus.SCHEDULED
