from fastapi import HTTPException, status
from postgrest.exceptions import APIError
from supabase import Client
import logging

from gotrippin.models.profile import UpdateProfile
from gotrippin.services.database import SupabaseService

logger = logging.getLogger(__name__)


class ProfilesService:

    def __init__(self, client: Client):
        self.db = SupabaseService(client)

    def get_profile(self, user_id: str) -> dict:
        try:
            profile = self.db.get_profile(user_id)
        except APIError as e:
            logger.error(f"Failed to fetch profile {user_id}: {e.message}")
            profile = None

        if not profile:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
        return profile

    def get_or_create_profile(self, user_id: str) -> dict:
        try:
            profile = self.db.get_profile(user_id)
            if profile:
                return profile
            logger.info(f"Creating empty profile for {user_id}")
            return self.db.create_profile(user_id)
        except APIError as e:
            logger.error(f"Failed to load profile {user_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    def update_profile(self, user_id: str, data: UpdateProfile) -> dict:
        updates = data.model_dump(exclude_unset=True)

        try:
            if not updates:
                return self.get_or_create_profile(user_id)
            profile = self.db.update_profile(user_id, updates)
        except APIError as e:
            logger.error(f"Failed to update profile {user_id}: {e.message}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile update failed")

        if not profile:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile update failed")
        return profile
