"""Route and vehicle catalog lookups used by the dialogue."""

import logging
from typing import Iterable, Optional, Protocol

from transit_booking.schemas.catalog_schema import Route, Vehicle

logger = logging.getLogger(__name__)


class RouteCatalog(Protocol):
    def distinct_origins(self, active_only: bool = True) -> list[str]: ...

    def distinct_destinations(self, origin: str, active_only: bool = True) -> list[str]: ...

    def find_route(
        self, origin: str, destination: str, active_only: bool = True
    ) -> Optional[Route]: ...

    def get_route(self, route_id: str) -> Optional[Route]: ...

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]: ...


class InMemoryRouteCatalog:
    """Catalog backed by plain dicts. City lookups are case-insensitive."""

    def __init__(
        self, routes: Iterable[Route] = (), vehicles: Iterable[Vehicle] = ()
    ) -> None:
        self._routes: dict[str, Route] = {r.route_id: r for r in routes}
        self._vehicles: dict[str, Vehicle] = {v.vehicle_id: v for v in vehicles}

    def add_route(self, route: Route) -> None:
        self._routes[route.route_id] = route

    def add_vehicle(self, vehicle: Vehicle) -> None:
        self._vehicles[vehicle.vehicle_id] = vehicle

    def _routes_iter(self, active_only: bool) -> list[Route]:
        return [r for r in self._routes.values() if r.is_active or not active_only]

    def distinct_origins(self, active_only: bool = True) -> list[str]:
        """Sorted unique origin cities."""
        return sorted({r.origin for r in self._routes_iter(active_only)})

    def distinct_destinations(self, origin: str, active_only: bool = True) -> list[str]:
        """Sorted unique destinations reachable from ``origin``."""
        normalized = origin.strip().upper()
        return sorted({
            r.destination for r in self._routes_iter(active_only) if r.origin == normalized
        })

    def find_route(
        self, origin: str, destination: str, active_only: bool = True
    ) -> Optional[Route]:
        o, d = origin.strip().upper(), destination.strip().upper()
        for route in self._routes_iter(active_only):
            if route.origin == o and route.destination == d:
                return route
        logger.debug("No route found for %s -> %s", o, d)
        return None

    def get_route(self, route_id: str) -> Optional[Route]:
        return self._routes.get(route_id)

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        return self._vehicles.get(vehicle_id)
