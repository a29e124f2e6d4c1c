from fastapi import APIRouter, Depends, Query, status
from typing import Annotated

from gotrippin.core.supabase_config import SupabaseDep
from gotrippin.models.activity import CreateActivity, UpdateActivity
from gotrippin.services.activities import ActivitiesService
from gotrippin.services.utils import CurrentUser

router = APIRouter(prefix="/trips/{trip_id}/activities", tags=["Activities"])


def get_activities_service(supabase: SupabaseDep) -> ActivitiesService:
    return ActivitiesService(supabase)


ActivitiesDep = Annotated[ActivitiesService, Depends(get_activities_service)]


@router.get("")
async def get_activities(
    trip_id: str,
    user: CurrentUser,
    activities: ActivitiesDep,
    location_id: str | None = Query(default=None),
) -> list[dict]:
    return activities.get_activities(trip_id, user["id"], location_id)


@router.get("/grouped")
async def get_grouped_activities(trip_id: str, user: CurrentUser, activities: ActivitiesDep) -> dict:
    return activities.get_grouped(trip_id, user["id"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_activity(trip_id: str, activity: CreateActivity, user: CurrentUser, activities: ActivitiesDep) -> dict:
    return activities.create_activity(trip_id, user["id"], activity)


@router.get("/{activity_id}")
async def get_activity(trip_id: str, activity_id: str, user: CurrentUser, activities: ActivitiesDep) -> dict:
    return activities.get_activity(trip_id, activity_id, user["id"])


@router.put("/{activity_id}")
async def update_activity(
    trip_id: str,
    activity_id: str,
    activity: UpdateActivity,
    user: CurrentUser,
    activities: ActivitiesDep,
) -> dict:
    return activities.update_activity(trip_id, activity_id, user["id"], activity)


@router.delete("/{activity_id}")
async def delete_activity(trip_id: str, activity_id: str, user: CurrentUser, activities: ActivitiesDep) -> dict:
    return activities.delete_activity(trip_id, activity_id, user["id"])
