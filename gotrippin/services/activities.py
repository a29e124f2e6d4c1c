from fastapi import HTTPException, status
from postgrest.exceptions import APIError
from supabase import Client
import logging

from gotrippin.models.activity import CreateActivity, UpdateActivity
from gotrippin.services.database import SupabaseService, first
from gotrippin.services.utils import Utils

logger = logging.getLogger(__name__)

utils = Utils()

ACTIVITY_SELECT = "*, trip_locations(id, location_name, order_index)"
BAD_TIMES = "End time must be after or equal to start time"


class ActivitiesService:

    def __init__(self, client: Client):
        self.db = SupabaseService(client)

    @property
    def activities(self):
        return self.db.table("activities")

    def validate_membership(self, trip_id: str, user_id: str) -> None:
        if not self.db.is_trip_member(trip_id, user_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You must be a member of this trip to access activities",
            )

    def validate_location(self, location_id: str, trip_id: str) -> None:
        rows = self.db.table("trip_locations").select("trip_id").eq("id", location_id).limit(1).execute().data
        location = first(rows)

        if not location:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location not found")
        if location["trip_id"] != trip_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location does not belong to this trip")

    def _fetch(self, activity_id: str) -> dict | None:
        return first(self.activities.select(ACTIVITY_SELECT).eq("id", activity_id).limit(1).execute().data)

    def get_activities(self, trip_id: str, user_id: str, location_id: str | None = None) -> list[dict]:
        self.validate_membership(trip_id, user_id)

        query = self.activities.select(ACTIVITY_SELECT).eq("trip_id", trip_id)
        if location_id:
            query = query.eq("location_id", location_id)

        try:
            return query.order("start_time", nullsfirst=False).execute().data
        except APIError as e:
            logger.error(f"Failed to fetch activities of {trip_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to fetch activities")

    def get_grouped(self, trip_id: str, user_id: str) -> dict:
        """Stops in route order with their activities, plus activities without a stop."""
        self.validate_membership(trip_id, user_id)

        try:
            locations = (
                self.db.table("trip_locations")
                .select("*, activities(*)")
                .eq("trip_id", trip_id)
                .order("order_index")
                .execute()
                .data
            )
        except APIError as e:
            logger.error(f"Failed to fetch locations with activities of {trip_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to fetch locations with activities")

        try:
            unassigned = (
                self.activities.select("*")
                .eq("trip_id", trip_id)
                .is_("location_id", "null")
                .order("start_time", nullsfirst=False)
                .execute()
                .data
            )
        except APIError as e:
            logger.error(f"Failed to fetch unassigned activities of {trip_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to fetch unassigned activities")

        return {"locations": locations, "unassigned": unassigned}

    def get_activity(self, trip_id: str, activity_id: str, user_id: str) -> dict:
        try:
            activity = self._fetch(activity_id)
        except APIError as e:
            logger.error(f"Failed to fetch activity {activity_id}: {e.message}")
            activity = None

        if not activity or activity["trip_id"] != trip_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")

        self.validate_membership(activity["trip_id"], user_id)
        return activity

    def create_activity(self, trip_id: str, user_id: str, data: CreateActivity) -> dict:
        self.validate_membership(trip_id, user_id)

        if data.location_id:
            self.validate_location(str(data.location_id), trip_id)

        if utils.ends_before(data.start_time, data.end_time):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=BAD_TIMES)

        activity = data.model_dump(mode="json")
        activity["trip_id"] = trip_id
        activity["created_by"] = user_id

        try:
            created = self.activities.insert(activity).execute().data[0]
            return self._fetch(created["id"]) or created
        except APIError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Failed to create activity: {e.message}")

    def update_activity(self, trip_id: str, activity_id: str, user_id: str, data: UpdateActivity) -> dict:
        activity = self.get_activity(trip_id, activity_id, user_id)
        updates = data.model_dump(exclude_unset=True, mode="json")

        if updates.get("location_id"):
            self.validate_location(updates["location_id"], trip_id)

        start = updates.get("start_time", activity.get("start_time"))
        end = updates.get("end_time", activity.get("end_time"))
        if utils.ends_before(start, end):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=BAD_TIMES)

        if not updates:
            return activity

        try:
            self.activities.update(updates).eq("id", activity_id).execute()
            return self._fetch(activity_id)
        except APIError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Failed to update activity: {e.message}")

    def delete_activity(self, trip_id: str, activity_id: str, user_id: str) -> dict:
        self.get_activity(trip_id, activity_id, user_id)

        try:
            self.activities.delete().eq("id", activity_id).execute()
        except APIError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Failed to delete activity: {e.message}")

        return {"message": "Activity deleted successfully"}
