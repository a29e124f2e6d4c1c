from fastapi import APIRouter, Depends, Query
from typing import Annotated

from gotrippin.core.config import settings
from gotrippin.core.supabase_config import SupabaseDep
from gotrippin.services.routes import RouteService, RouteProfile
from gotrippin.services.trip_locations import TripLocationsService
from gotrippin.services.utils import CurrentUser

router = APIRouter(prefix="/trips/{trip_id}/route", tags=["Routes"])


def get_route_service() -> RouteService:
    return RouteService(settings.MAPBOX_ACCESS_TOKEN)


RouteDep = Annotated[RouteService, Depends(get_route_service)]


@router.get("")
async def get_trip_route(
    trip_id: str,
    user: CurrentUser,
    supabase: SupabaseDep,
    routes: RouteDep,
    profile: RouteProfile = Query(default="driving"),
) -> dict:
    locations = TripLocationsService(supabase).get_route(trip_id, user["id"])
    return await routes.build_route(locations, profile)
