"""
Demo catalog and departures for the console demo.

Three vehicle classes, two UYO routes with their return legs, and
departures for today and tomorrow. Fares are the route base price times
the vehicle price modifier.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from transit_booking.schemas.catalog_schema import Departure, Route, Vehicle, VehicleType
from transit_booking.storage.catalog import InMemoryRouteCatalog
from transit_booking.storage.inventory import InMemoryInventoryLedger

VEHICLES: list[Vehicle] = [
    Vehicle(vehicle_id="veh-standard", name="Standard Bus", type=VehicleType.BUS,
            capacity=40, features=["AC"], price_modifier=1.0),
    Vehicle(vehicle_id="veh-luxury", name="Luxury Bus", type=VehicleType.BUS,
            capacity=30, features=["AC", "WiFi", "Reclining Seats"], price_modifier=1.2),
    Vehicle(vehicle_id="veh-minivan", name="Mini-Van", type=VehicleType.VAN,
            capacity=10, features=["AC"], price_modifier=1.5),
]

ROUTES: list[Route] = [
    Route(route_id="uyo-lagos", origin="UYO", destination="LAGOS", base_price=15000, duration_minutes=1200),
    Route(route_id="uyo-abuja", origin="UYO", destination="ABUJA", base_price=20000, duration_minutes=1080),
    Route(route_id="lagos-uyo", origin="LAGOS", destination="UYO", base_price=15000, duration_minutes=1200),
    Route(route_id="abuja-uyo", origin="ABUJA", destination="UYO", base_price=20000, duration_minutes=1080),
]

# (route_id, vehicle_id, day offset, UTC hour)
SCHEDULE: list[tuple[str, str, int, int]] = [
    ("uyo-lagos", "veh-standard", 0, 9),
    ("uyo-lagos", "veh-luxury", 0, 14),
    ("uyo-lagos", "veh-standard", 1, 9),
    ("uyo-lagos", "veh-luxury", 1, 14),
    ("uyo-lagos", "veh-minivan", 1, 17),
    ("uyo-abuja", "veh-standard", 0, 10),
    ("uyo-abuja", "veh-standard", 1, 10),
    ("lagos-uyo", "veh-luxury", 1, 8),
    ("abuja-uyo", "veh-minivan", 2, 7),
]


def build_demo_inventory(
    today: Optional[date] = None,
) -> tuple[InMemoryRouteCatalog, InMemoryInventoryLedger]:
    """Return a catalog and ledger populated with the demo schedule."""
    today = today or datetime.now(timezone.utc).date()
    routes = {r.route_id: r for r in ROUTES}
    vehicles = {v.vehicle_id: v for v in VEHICLES}

    departures = []
    for route_id, vehicle_id, offset, hour in SCHEDULE:
        route, vehicle = routes[route_id], vehicles[vehicle_id]
        day = today + timedelta(days=offset)
        departures.append(Departure(
            departure_id=f"{route_id}-{day.isoformat()}-{hour:02d}",
            route_id=route_id,
            vehicle_id=vehicle_id,
            departure_time=datetime.combine(day, time(hour=hour), tzinfo=timezone.utc),
            fare=round(route.base_price * vehicle.price_modifier),
            available_seats=vehicle.capacity,
        ))

    return InMemoryRouteCatalog(ROUTES, VEHICLES), InMemoryInventoryLedger(departures)
