from fastapi import Depends, Request, HTTPException, status
from jose import jwt, JWTError
from pydantic import HttpUrl, TypeAdapter, ValidationError
from datetime import datetime, timezone
from typing import Annotated
import logging
import re
import secrets
import string

from gotrippin.core.config import settings
from gotrippin.core.supabase_config import get_supabase

logger = logging.getLogger(__name__)

SHARE_CODE_ALPHABET = string.ascii_letters + string.digits
SHARE_CODE_RE = re.compile(r"^[a-zA-Z0-9]{8}$")
HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

_url_adapter = TypeAdapter(HttpUrl)


class Utils:

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def parse_iso(value: str) -> datetime:
        """
        Parses an ISO 8601 date or datetime. Values without an offset are
        treated as UTC so they can be compared with offset-aware ones.
        """
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @staticmethod
    def validate_iso8601(v: str) -> str:
        try:
            Utils.parse_iso(v)
        except (ValueError, AttributeError):
            raise ValueError("Must be a valid ISO 8601 date")
        return v

    @staticmethod
    def validate_hex_color(v: str) -> str:
        if not HEX_COLOR_RE.match(v):
            raise ValueError("Must be a valid hex color (e.g., #ff6b6b)")
        return v

    @staticmethod
    def validate_url(v: str) -> str:
        try:
            _url_adapter.validate_python(v)
        except ValidationError:
            raise ValueError("Must be a valid URL")
        return v

    @staticmethod
    def generate_share_code(length: int = 8) -> str:
        return "".join(secrets.choice(SHARE_CODE_ALPHABET) for _ in range(length))

    @staticmethod
    def is_valid_share_code(code: str) -> bool:
        return bool(SHARE_CODE_RE.match(code))

    @staticmethod
    def ends_before(start: str | None, end: str | None) -> bool:
        """True when both bounds are set and ``end`` precedes ``start``."""
        if not start or not end:
            return False
        return Utils.parse_iso(end) < Utils.parse_iso(start)


class AuthHelpers:

    @staticmethod
    def get_token(request: Request) -> str:
        auth_header = request.headers.get("Authorization")

        if not auth_header:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No authorization header provided")

        token = auth_header.replace("Bearer ", "", 1).strip()

        if not token:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")
        return token

    @staticmethod
    def decode_token(token: str) -> dict:
        """Verifies a Supabase access token locally with the project's JWT secret."""
        try:
            payload = jwt.decode(
                token,
                settings.SUPABASE_JWT_SECRET,
                algorithms=["HS256"],
                audience="authenticated",
            )
        except JWTError:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

        if not payload.get("sub"):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

        return {
            "id": payload["sub"],
            "email": payload.get("email"),
            "role": payload.get("role"),
        }

    @staticmethod
    def fetch_user(token: str) -> dict:
        """Asks Supabase Auth who owns the token."""
        try:
            resp = get_supabase().auth.get_user(token)
        except Exception as e:
            logger.warning(f"Supabase token validation failed: {e}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token validation failed")

        user = resp.user if resp else None
        if not user:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

        return {"id": user.id, "email": user.email, "role": user.role}

    @staticmethod
    def verify_request(request: Request) -> dict:
        token = AuthHelpers.get_token(request)
        if settings.SUPABASE_JWT_SECRET:
            return AuthHelpers.decode_token(token)
        return AuthHelpers.fetch_user(token)

    @staticmethod
    def current_user(request: Request) -> dict:
        user = getattr(request.state, "user", None)
        if not user:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
        return user


CurrentUser = Annotated[dict, Depends(AuthHelpers.current_user)]
