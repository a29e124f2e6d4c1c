from fastapi import HTTPException, status
from supabase import AuthError, Client
import logging

logger = logging.getLogger(__name__)


class AuthService:

    def __init__(self, client: Client):
        self.client = client

    def login(self, email: str, password: str) -> dict:
        try:
            resp = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as e:
            logger.info(f"Login failed for {email}: {e}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

        if not resp or not resp.session or not resp.user:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

        return {
            "access_token": resp.session.access_token,
            "user": {"id": resp.user.id, "email": resp.user.email},
            "message": "Login successful. Use the access_token as a Bearer token.",
        }
