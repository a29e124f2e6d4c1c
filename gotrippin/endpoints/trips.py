from fastapi import APIRouter, Depends, status
from typing import Annotated

from gotrippin.core.supabase_config import SupabaseDep
from gotrippin.models.trip import CreateTrip, UpdateTrip, AddMember
from gotrippin.services.trips import TripsService
from gotrippin.services.utils import CurrentUser

router = APIRouter(prefix="/trips", tags=["Trips"])


def get_trips_service(supabase: SupabaseDep) -> TripsService:
    return TripsService(supabase)


TripsDep = Annotated[TripsService, Depends(get_trips_service)]


@router.get("")
async def get_trips(user: CurrentUser, trips: TripsDep) -> list[dict]:
    return trips.get_trips(user["id"])


# declared before /{trip_id} so "share" is never taken for an id
@router.get("/share/{share_code}")
async def get_trip_by_share_code(share_code: str, user: CurrentUser, trips: TripsDep) -> dict:
    return trips.get_trip_by_share_code(share_code, user["id"])


@router.get("/{trip_id}")
async def get_trip(trip_id: str, user: CurrentUser, trips: TripsDep) -> dict:
    return trips.get_trip(trip_id, user["id"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_trip(trip_data: CreateTrip, user: CurrentUser, trips: TripsDep) -> dict:
    return trips.create_trip(user["id"], trip_data)


@router.put("/{trip_id}")
async def update_trip(trip_id: str, trip_data: UpdateTrip, user: CurrentUser, trips: TripsDep) -> dict:
    return trips.update_trip(trip_id, user["id"], trip_data)


@router.delete("/{trip_id}")
async def delete_trip(trip_id: str, user: CurrentUser, trips: TripsDep) -> dict:
    return trips.delete_trip(trip_id, user["id"])


@router.get("/{trip_id}/members")
async def get_members(trip_id: str, user: CurrentUser, trips: TripsDep) -> list[dict]:
    return trips.get_members(trip_id, user["id"])


@router.post("/{trip_id}/members", status_code=status.HTTP_201_CREATED)
async def add_member(trip_id: str, member: AddMember, user: CurrentUser, trips: TripsDep) -> dict:
    return trips.add_member(trip_id, user["id"], str(member.user_id))


@router.delete("/{trip_id}/members/{user_id}")
async def remove_member(trip_id: str, user_id: str, user: CurrentUser, trips: TripsDep) -> dict:
    return trips.remove_member(trip_id, user["id"], user_id)
