from fastapi import APIRouter

from gotrippin.core.supabase_config import SupabaseDep
from gotrippin.models.auth_model import EmailPasswordRequestForm
from gotrippin.services.auth import AuthService
from gotrippin.services.utils import CurrentUser

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login")
async def login(credentials: EmailPasswordRequestForm, supabase: SupabaseDep) -> dict:
    return AuthService(supabase).login(credentials.email, credentials.password)


@router.get("/health")
async def auth_health() -> dict:
    return {"status": "Auth module is operational"}


@router.get("/me")
async def me(user: CurrentUser) -> dict:
    return {"user": user, "message": "Token validated successfully"}
