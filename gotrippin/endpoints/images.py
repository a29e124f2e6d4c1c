from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Annotated

from gotrippin.models.images import TrackDownload
from gotrippin.services.images import ImagesService, get_images_service

router = APIRouter(prefix="/images", tags=["Images"])

ImagesDep = Annotated[ImagesService, Depends(get_images_service)]


@router.get("/search")
async def search_images(
    images: ImagesDep,
    query: str | None = Query(default=None),
    page: int = Query(default=1),
    perPage: int = Query(default=9, ge=1, le=30),
) -> dict:
    if not query:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Query parameter is required")
    if page < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Page must be >= 1")

    return await images.search(query, page, perPage)


@router.post("/download")
async def track_download(body: TrackDownload, images: ImagesDep) -> dict:
    await images.track_download(body.downloadUrl)
    return {"success": True}
