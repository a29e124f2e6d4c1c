from fastapi import APIRouter

from gotrippin.models.ai import RecommendationQuery
from gotrippin.services.ai import AIService

router = APIRouter(prefix="/ai", tags=["AI"])

ai_service = AIService()


@router.post("/recommendations")
async def get_recommendations(body: RecommendationQuery) -> dict:
    return await ai_service.get_recommendations(body.query)
