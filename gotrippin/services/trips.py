from fastapi import HTTPException, status
from postgrest.exceptions import APIError
from supabase import Client
import logging

from gotrippin.models.trip import CreateTrip, UpdateTrip
from gotrippin.services.database import SupabaseService
from gotrippin.services.routes import get_random_route_color
from gotrippin.services.utils import Utils

logger = logging.getLogger(__name__)

utils = Utils()

SHARE_CODE_ATTEMPTS = 5
UNIQUE_VIOLATION = "23505"

ACCESS_DENIED = "Trip not found or access denied"


class TripsService:

    def __init__(self, client: Client):
        self.db = SupabaseService(client)

    def require_member(self, trip_id: str, user_id: str, denied: str, failure: str) -> None:
        try:
            is_member = self.db.is_trip_member(trip_id, user_id)
        except APIError as e:
            logger.error(f"Membership check failed for {trip_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=failure)

        if not is_member:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=denied)

    def get_trips(self, user_id: str) -> list[dict]:
        try:
            return self.db.get_trips(user_id)
        except APIError as e:
            logger.error(f"Failed to fetch trips for {user_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to fetch trips")

    def get_trip(self, trip_id: str, user_id: str) -> dict:
        try:
            trip = self.db.get_trip(trip_id, user_id)
        except APIError as e:
            logger.error(f"Failed to fetch trip {trip_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")

        if not trip:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_DENIED)
        return trip

    def get_trip_by_share_code(self, share_code: str, user_id: str) -> dict:
        if not utils.is_valid_share_code(share_code):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid share code")

        try:
            trip = self.db.get_trip_by_share_code(share_code)
        except APIError as e:
            logger.error(f"Failed to fetch trip by share code {share_code}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")

        if not trip:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")

        self.require_member(trip["id"], user_id, ACCESS_DENIED, "Trip not found")
        return trip

    def create_trip(self, user_id: str, data: CreateTrip) -> dict:
        trip_data = data.model_dump(exclude_unset=True, mode="json")
        trip_data["created_at"] = utils.now_utc().isoformat()
        if not trip_data.get("color"):
            trip_data["color"] = get_random_route_color()

        trip = None
        for attempt in range(SHARE_CODE_ATTEMPTS):
            trip_data["share_code"] = utils.generate_share_code()
            try:
                trip = self.db.create_trip(trip_data)
                break
            except APIError as e:
                if e.code == UNIQUE_VIOLATION:
                    logger.warning(f"Share code collision on attempt {attempt + 1}, regenerating")
                    continue
                logger.error(f"Failed to create trip: {e.message}")
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to create trip")

        if trip is None:
            logger.error("Could not generate a unique share code")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to create trip")

        try:
            self.db.add_trip_member(trip["id"], user_id)
        except APIError as e:
            logger.error(f"Failed to add creator to trip {trip['id']}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to create trip")

        logger.info(f"Trip {trip['id']} created by {user_id}")
        return trip

    def update_trip(self, trip_id: str, user_id: str, data: UpdateTrip) -> dict:
        self.require_member(trip_id, user_id, ACCESS_DENIED, "Failed to update trip")

        updates = data.model_dump(exclude_unset=True, mode="json")
        try:
            if not updates:
                return self.get_trip(trip_id, user_id)
            trip = self.db.update_trip(trip_id, updates)
        except APIError as e:
            logger.error(f"Failed to update trip {trip_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to update trip")

        if not trip:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to update trip")
        return trip

    def delete_trip(self, trip_id: str, user_id: str) -> dict:
        self.require_member(trip_id, user_id, ACCESS_DENIED, "Failed to delete trip")

        try:
            self.db.delete_trip(trip_id)
        except APIError as e:
            logger.error(f"Failed to delete trip {trip_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to delete trip")

        return {"message": "Trip deleted successfully"}

    def get_members(self, trip_id: str, user_id: str) -> list[dict]:
        self.require_member(trip_id, user_id, "You must be a member of this trip to view members", "Failed to fetch trip members")

        try:
            return self.db.get_trip_members(trip_id)
        except APIError as e:
            logger.error(f"Failed to fetch members of {trip_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to fetch trip members")

    def add_member(self, trip_id: str, user_id: str, new_member_id: str) -> dict:
        self.require_member(trip_id, user_id, "You must be a member of this trip to add others", "Failed to add member")

        try:
            self.db.add_trip_member(trip_id, new_member_id)
        except APIError as e:
            logger.error(f"Failed to add {new_member_id} to {trip_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to add member")

        return {"message": "Member added successfully"}

    def remove_member(self, trip_id: str, user_id: str, member_id: str) -> dict:
        # anyone may leave a trip; removing others requires membership
        if user_id != member_id:
            self.require_member(trip_id, user_id, "You must be a member of this trip", "Failed to remove member")

        try:
            self.db.remove_trip_member(trip_id, member_id)
        except APIError as e:
            logger.error(f"Failed to remove {member_id} from {trip_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to remove member")

        return {"message": "Member removed successfully"}
