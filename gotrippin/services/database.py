from supabase import Client
import logging

from gotrippin.services.utils import Utils

logger = logging.getLogger(__name__)

utils = Utils()


def first(rows: list[dict] | None) -> dict | None:
    return rows[0] if rows else None


class SupabaseService:
    """Thin helpers over the Supabase tables shared by several services."""

    def __init__(self, client: Client):
        self.client = client

    def table(self, name: str):
        return self.client.table(name)

    # Profiles

    def get_profile(self, user_id: str) -> dict | None:
        rows = self.table("profiles").select("*").eq("id", user_id).limit(1).execute().data
        return first(rows)

    def create_profile(self, user_id: str, data: dict | None = None) -> dict:
        rows = self.table("profiles").insert({"id": user_id, **(data or {})}).execute().data
        return rows[0]

    def update_profile(self, user_id: str, updates: dict) -> dict | None:
        rows = self.table("profiles").update(updates).eq("id", user_id).execute().data
        return first(rows)

    # Trips

    def get_trips(self, user_id: str) -> list[dict]:
        memberships = self.table("trip_members").select("trip_id").eq("user_id", user_id).execute().data
        trip_ids = [m["trip_id"] for m in memberships]
        if not trip_ids:
            return []

        return (
            self.table("trips")
            .select("*")
            .in_("id", trip_ids)
            .order("created_at", desc=True)
            .execute()
            .data
        )

    def get_trip(self, trip_id: str, user_id: str) -> dict | None:
        if not self.is_trip_member(trip_id, user_id):
            return None
        rows = self.table("trips").select("*").eq("id", trip_id).limit(1).execute().data
        return first(rows)

    def get_trip_by_share_code(self, share_code: str) -> dict | None:
        rows = self.table("trips").select("*").eq("share_code", share_code).limit(1).execute().data
        return first(rows)

    def create_trip(self, trip_data: dict) -> dict:
        rows = self.table("trips").insert(trip_data).execute().data
        return rows[0]

    def update_trip(self, trip_id: str, updates: dict) -> dict | None:
        rows = self.table("trips").update(updates).eq("id", trip_id).execute().data
        return first(rows)

    def delete_trip(self, trip_id: str) -> bool:
        self.table("trips").delete().eq("id", trip_id).execute()
        return True

    # Membership

    def is_trip_member(self, trip_id: str, user_id: str) -> bool:
        rows = (
            self.table("trip_members")
            .select("trip_id")
            .eq("trip_id", trip_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
            .data
        )
        return bool(rows)

    def add_trip_member(self, trip_id: str, user_id: str) -> dict:
        rows = (
            self.table("trip_members")
            .insert({"trip_id": trip_id, "user_id": user_id, "joined_at": utils.now_utc().isoformat()})
            .execute()
            .data
        )
        return rows[0]

    def remove_trip_member(self, trip_id: str, user_id: str) -> None:
        self.table("trip_members").delete().eq("trip_id", trip_id).eq("user_id", user_id).execute()

    def get_trip_members(self, trip_id: str) -> list[dict]:
        members = self.table("trip_members").select("*").eq("trip_id", trip_id).execute().data
        user_ids = [m["user_id"] for m in members]
        if not user_ids:
            return []

        profiles = {
            p["id"]: p
            for p in self.table("profiles").select("*").in_("id", user_ids).execute().data
        }
        return [{**m, "profile": profiles.get(m["user_id"])} for m in members]
