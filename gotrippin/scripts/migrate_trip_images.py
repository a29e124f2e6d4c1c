"""
One-time migration of trip cover images from Unsplash URLs into R2.

For every trip that still has an ``image_url`` the image is copied to
``trip-images/<slug>.jpg``, a ``photos`` row is created (or an existing one with
the same Unsplash slug reused), and the trip is pointed at it through
``cover_photo_id`` with ``image_url`` cleared.

Run with ``gotrippin-migrate-images``.
"""
import logging
import re
import sys
import time

import httpx
from botocore.exceptions import BotoCoreError, ClientError
from postgrest.exceptions import APIError
from supabase import Client

from gotrippin.core.config import settings
from gotrippin.core.logging_config import setup_logging
from gotrippin.core.supabase_config import get_supabase
from gotrippin.services.database import first
from gotrippin.services.storage import StorageService, TRIP_IMAGES_PREFIX, create_r2_client

logger = logging.getLogger(__name__)

UNSPLASH_SLUG_RE = re.compile(r"unsplash\.com/photo-([a-zA-Z0-9_-]+)")
DOWNLOAD_DELAY = 0.2


class MigrationError(Exception):
    pass


def extract_unsplash_slug(url: str) -> str | None:
    # the URL slug is not the Unsplash API photo id; it is only used for dedup
    match = UNSPLASH_SLUG_RE.search(url or "")
    return match.group(1) if match else None


def download_image(http: httpx.Client, url: str) -> tuple[bytes, str]:
    resp = http.get(url)
    if resp.status_code != 200:
        raise MigrationError(f"Failed to download image: {resp.status_code} {url}")
    return resp.content, resp.headers.get("content-type", "image/jpeg")


class TripImageMigration:

    def __init__(self, client: Client, storage: StorageService, http: httpx.Client, delay: float = DOWNLOAD_DELAY):
        self.client = client
        self.storage = storage
        self.http = http
        self.delay = delay
        self.success = 0
        self.failed = 0

    def trips_to_migrate(self) -> list[dict]:
        # neq also filters out NULL image_url
        return self.client.table("trips").select("id, title, image_url").neq("image_url", "").execute().data

    def photo_for(self, slug: str, image_url: str) -> str:
        rows = self.client.table("photos").select("id").eq("unsplash_photo_id", slug).limit(1).execute().data
        existing = first(rows)
        if existing:
            logger.info(f"  Photo already in DB ({existing['id']}), reusing")
            return existing["id"]

        storage_key = f"{TRIP_IMAGES_PREFIX}{slug}.jpg"

        time.sleep(self.delay)
        logger.info(f"  Downloading {image_url[:80]}...")
        body, content_type = download_image(self.http, image_url)
        self.storage.upload_object(storage_key, body, content_type)
        logger.info(f"  Uploaded to R2: {storage_key}")

        photo = self.client.table("photos").insert({
            "storage_key": storage_key,
            "source": "unsplash",
            "unsplash_photo_id": slug,
        }).execute().data[0]
        logger.info(f"  Created photos row ({photo['id']})")
        return photo["id"]

    def migrate_trip(self, trip: dict) -> None:
        logger.info(f"[{trip.get('title')}] ({trip['id']})")

        slug = extract_unsplash_slug(trip["image_url"])
        if not slug:
            logger.warning(f"  Could not extract slug from URL: {trip['image_url']}")
            self.failed += 1
            return

        try:
            photo_id = self.photo_for(slug, trip["image_url"])
            self.client.table("trips").update({"cover_photo_id": photo_id, "image_url": None}).eq("id", trip["id"]).execute()
        except (MigrationError, APIError, httpx.HTTPError, BotoCoreError, ClientError) as e:
            logger.error(f"  Error migrating trip {trip['id']}: {e}")
            self.failed += 1
            return

        logger.info("  Trip updated, cover_photo_id set and image_url cleared")
        self.success += 1

    def run(self) -> dict:
        trips = self.trips_to_migrate()
        if not trips:
            logger.info("No trips with image_url found. Nothing to migrate.")
            return {"success": 0, "failed": 0}

        logger.info(f"Found {len(trips)} trips to migrate")
        for trip in trips:
            self.migrate_trip(trip)

        logger.info(f"Migration complete. Success: {self.success}  Failed: {self.failed}")
        return {"success": self.success, "failed": self.failed}


def main() -> int:
    setup_logging()

    missing = [
        name
        for name in ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "R2_ACCOUNT_ID", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY")
        if not getattr(settings, name)
    ]
    if missing:
        logger.error(f"Missing env: {', '.join(missing)}")
        return 1

    storage = StorageService(create_r2_client())
    with httpx.Client(timeout=30.0, follow_redirects=True) as http:
        summary = TripImageMigration(get_supabase(), storage, http).run()

    return 1 if summary["failed"] else 0


if __name__ == "__main__":
    sys.exit(main())
