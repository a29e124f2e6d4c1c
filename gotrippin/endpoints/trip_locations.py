from fastapi import APIRouter, Depends, status
from typing import Annotated

from gotrippin.core.supabase_config import SupabaseDep
from gotrippin.models.trip_location import CreateTripLocation, UpdateTripLocation, ReorderLocations
from gotrippin.services.trip_locations import TripLocationsService
from gotrippin.services.utils import CurrentUser

router = APIRouter(prefix="/trips/{trip_id}/locations", tags=["Trip Locations"])


def get_locations_service(supabase: SupabaseDep) -> TripLocationsService:
    return TripLocationsService(supabase)


LocationsDep = Annotated[TripLocationsService, Depends(get_locations_service)]


@router.get("")
async def get_route(trip_id: str, user: CurrentUser, locations: LocationsDep) -> list[dict]:
    return locations.get_route(trip_id, user["id"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_location(trip_id: str, location: CreateTripLocation, user: CurrentUser, locations: LocationsDep) -> dict:
    return locations.add_location(trip_id, user["id"], location)


@router.post("/reorder")
async def reorder_locations(trip_id: str, order: ReorderLocations, user: CurrentUser, locations: LocationsDep) -> list[dict]:
    return locations.reorder_locations(trip_id, user["id"], order)


@router.get("/{location_id}")
async def get_location(trip_id: str, location_id: str, user: CurrentUser, locations: LocationsDep) -> dict:
    return locations.get_location(trip_id, location_id, user["id"])


@router.put("/{location_id}")
async def update_location(
    trip_id: str,
    location_id: str,
    location: UpdateTripLocation,
    user: CurrentUser,
    locations: LocationsDep,
) -> dict:
    return locations.update_location(trip_id, location_id, user["id"], location)


@router.delete("/{location_id}")
async def remove_location(trip_id: str, location_id: str, user: CurrentUser, locations: LocationsDep) -> dict:
    return locations.remove_location(trip_id, location_id, user["id"])
