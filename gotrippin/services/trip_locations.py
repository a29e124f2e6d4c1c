from fastapi import HTTPException, status
from postgrest.exceptions import APIError
from supabase import Client
import logging

from gotrippin.models.trip_location import CreateTripLocation, UpdateTripLocation, ReorderLocations
from gotrippin.services.database import SupabaseService, first
from gotrippin.services.utils import Utils

logger = logging.getLogger(__name__)

utils = Utils()

DUPLICATE_ORDER_INDEX = "A location with this order index already exists. Use reorder to change positions."
BAD_DATES = "Departure date must be after or equal to arrival date"


class TripLocationsService:
    """Ordered stops of a trip. Every operation requires trip membership."""

    def __init__(self, client: Client):
        self.db = SupabaseService(client)

    @property
    def locations(self):
        return self.db.table("trip_locations")

    def validate_membership(self, trip_id: str, user_id: str) -> None:
        if not self.db.is_trip_member(trip_id, user_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You must be a member of this trip to access locations",
            )

    def get_route(self, trip_id: str, user_id: str) -> list[dict]:
        self.validate_membership(trip_id, user_id)

        try:
            return self.locations.select("*").eq("trip_id", trip_id).order("order_index").execute().data
        except APIError as e:
            logger.error(f"Failed to fetch route of {trip_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failed to fetch route locations")

    def get_location(self, trip_id: str, location_id: str, user_id: str) -> dict:
        try:
            location = first(self.locations.select("*").eq("id", location_id).limit(1).execute().data)
        except APIError as e:
            logger.error(f"Failed to fetch location {location_id}: {e.message}")
            location = None

        if not location or location["trip_id"] != trip_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")

        self.validate_membership(location["trip_id"], user_id)
        return location

    def _next_order_index(self, trip_id: str) -> int:
        rows = (
            self.locations.select("order_index")
            .eq("trip_id", trip_id)
            .order("order_index", desc=True)
            .limit(1)
            .execute()
            .data
        )
        return rows[0]["order_index"] + 1 if rows else 1

    def add_location(self, trip_id: str, user_id: str, data: CreateTripLocation) -> dict:
        self.validate_membership(trip_id, user_id)

        if utils.ends_before(data.arrival_date, data.departure_date):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=BAD_DATES)

        location = {
            "trip_id": trip_id,
            "location_name": data.location_name,
            "latitude": data.latitude,
            "longitude": data.longitude,
            "order_index": data.order_index or self._next_order_index(trip_id),
            "arrival_date": data.arrival_date,
            "departure_date": data.departure_date,
        }

        try:
            return self.locations.insert(location).execute().data[0]
        except APIError as e:
            if e.code == "23505":
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_ORDER_INDEX)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Failed to add location: {e.message}")

    def update_location(self, trip_id: str, location_id: str, user_id: str, data: UpdateTripLocation) -> dict:
        location = self.get_location(trip_id, location_id, user_id)
        updates = data.model_dump(exclude_unset=True)

        arrival = updates.get("arrival_date", location.get("arrival_date"))
        departure = updates.get("departure_date", location.get("departure_date"))
        if utils.ends_before(arrival, departure):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=BAD_DATES)

        if not updates:
            return location

        try:
            rows = self.locations.update(updates).eq("id", location_id).execute().data
        except APIError as e:
            if e.code == "23505":
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_ORDER_INDEX)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Failed to update location: {e.message}")

        return first(rows) or {**location, **updates}

    def remove_location(self, trip_id: str, location_id: str, user_id: str) -> dict:
        location = self.get_location(trip_id, location_id, user_id)
        removed_index = location["order_index"]

        try:
            self.locations.delete().eq("id", location_id).execute()
        except APIError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Failed to delete location: {e.message}")

        # Close the gap left by the removed stop. The delete already succeeded,
        # so failures here are only logged.
        try:
            later = (
                self.locations.select("id, order_index")
                .eq("trip_id", trip_id)
                .gt("order_index", removed_index)
                .order("order_index")
                .execute()
                .data
            )
            for loc in later:
                self.locations.update({"order_index": loc["order_index"] - 1}).eq("id", loc["id"]).execute()
        except APIError as e:
            logger.error(f"Failed to close order gap in trip {trip_id}: {e.message}")

        return {"message": "Location deleted successfully"}

    def reorder_locations(self, trip_id: str, user_id: str, data: ReorderLocations) -> list[dict]:
        self.validate_membership(trip_id, user_id)
        location_ids = [str(i) for i in data.location_ids]

        try:
            existing = self.locations.select("id").eq("trip_id", trip_id).execute().data
        except APIError as e:
            logger.error(f"Failed to verify locations of {trip_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Failed to verify locations")

        existing_ids = [loc["id"] for loc in existing]
        invalid = [i for i in location_ids if i not in existing_ids]
        if invalid:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid location IDs: {', '.join(invalid)}")

        missing = [i for i in existing_ids if i not in location_ids]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"All locations must be included in reorder. Missing: {', '.join(missing)}",
            )

        # Move every stop to a temporary negative slot first so the unique
        # (trip_id, order_index) constraint holds between the two passes.
        for index, location_id in enumerate(location_ids, start=1):
            try:
                self.locations.update({"order_index": -index}).eq("id", location_id).execute()
            except APIError as e:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Failed to reorder location {location_id}: {e.message}",
                )

        for index, location_id in enumerate(location_ids, start=1):
            try:
                self.locations.update({"order_index": index}).eq("id", location_id).execute()
            except APIError as e:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Failed to finalize reorder for location {location_id}: {e.message}",
                )

        return self.get_route(trip_id, user_id)
