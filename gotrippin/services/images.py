import logging

import httpx
from fastapi import HTTPException, status

from gotrippin.core.config import settings
from gotrippin.services.cache import TTLCache

logger = logging.getLogger(__name__)

UNSPLASH_API_HOST = "api.unsplash.com"
UNSPLASH_SEARCH_URL = f"https://{UNSPLASH_API_HOST}/search/photos"
CACHE_TTL = 60 * 60


class ImagesService:
    """Unsplash photo search for trip covers."""

    def __init__(self, access_key: str | None, transport: httpx.AsyncBaseTransport | None = None):
        self.access_key = access_key
        self.transport = transport
        self.cache = TTLCache(CACHE_TTL)
        if not access_key:
            logger.error("UNSPLASH_ACCESS_KEY is not set in environment variables")

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Client-ID {self.access_key}"}

    async def search(self, query: str, page: int = 1, per_page: int = 9) -> dict:
        cache_key = f"{query}_{page}_{per_page}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"Cache hit for: {cache_key}")
            return cached

        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self.transport) as client:
                resp = await client.get(
                    UNSPLASH_SEARCH_URL,
                    params={"query": query, "page": page, "per_page": per_page},
                    headers=self.headers,
                )
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error fetching images: {e}")
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to fetch images")

        data = resp.json()
        self.cache.set(cache_key, data)
        logger.info(f"Fetched {len(data.get('results', []))} images for query: {query}")
        return data

    async def track_download(self, download_url: str) -> None:
        # the access key is only ever sent to the Unsplash API
        try:
            url = httpx.URL(download_url)
        except httpx.InvalidURL:
            url = None
        if url is None or url.scheme != "https" or url.host != UNSPLASH_API_HOST:
            logger.warning(f"Refusing to track download for non-Unsplash URL: {download_url}")
            return

        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self.transport) as client:
                resp = await client.get(url, headers=self.headers)
                resp.raise_for_status()
            logger.info(f"Download tracked for URL: {download_url}")
        except httpx.HTTPError as e:
            logger.error(f"Error tracking download: {e}")


images_service = ImagesService(settings.UNSPLASH_ACCESS_KEY)


def get_images_service() -> ImagesService:
    return images_service
