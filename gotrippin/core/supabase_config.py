from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from supabase import Client, ClientOptions, create_client

from .config import settings


@lru_cache
def get_supabase() -> Client:
    url = settings.SUPABASE_URL
    key = settings.SUPABASE_SERVICE_ROLE_KEY

    if not url or not key:
        raise RuntimeError(
            "Missing Supabase configuration. Please check SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables."
        )

    return create_client(
        url,
        key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


SupabaseDep = Annotated[Client, Depends(get_supabase)]
