from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Annotated

from gotrippin.core.supabase_config import SupabaseDep
from gotrippin.models.profile import UpdateProfile, AvatarUploadRequest
from gotrippin.services.profiles import ProfilesService
from gotrippin.services.storage import StorageDep
from gotrippin.services.utils import CurrentUser

router = APIRouter(prefix="/profiles", tags=["Profiles"])


def get_profiles_service(supabase: SupabaseDep) -> ProfilesService:
    return ProfilesService(supabase)


ProfilesDep = Annotated[ProfilesService, Depends(get_profiles_service)]


@router.get("")
async def get_my_profile(user: CurrentUser, profiles: ProfilesDep) -> dict:
    return profiles.get_or_create_profile(user["id"])


@router.put("")
async def update_my_profile(data: UpdateProfile, user: CurrentUser, profiles: ProfilesDep) -> dict:
    return profiles.update_profile(user["id"], data)


@router.post("/avatar/upload-url")
async def get_avatar_upload_url(upload: AvatarUploadRequest, user: CurrentUser, storage: StorageDep) -> dict:
    return storage.presign_avatar_upload(user["id"], upload.content_type, upload.file_extension)


@router.get("/avatars")
async def list_avatars(user: CurrentUser, storage: StorageDep) -> dict:
    return {"files": storage.list_avatars(user["id"])}


@router.delete("/avatars")
async def delete_avatar(user: CurrentUser, storage: StorageDep, key: str = Query(min_length=1)) -> dict:
    return storage.delete_avatar(user["id"], key)


@router.get("/{profile_id}")
async def get_profile(profile_id: str, profiles: ProfilesDep) -> dict:
    return profiles.get_profile(profile_id)


@router.put("/{profile_id}")
async def update_profile(profile_id: str, data: UpdateProfile, user: CurrentUser, profiles: ProfilesDep) -> dict:
    if profile_id != user["id"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only update your own profile")
    return profiles.update_profile(profile_id, data)
