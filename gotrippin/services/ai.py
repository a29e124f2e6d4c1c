class AIService:
    # Placeholder until travel recommendations are backed by a model provider.

    async def get_recommendations(self, query: str) -> dict:
        return {
            "query": query,
            "recommendations": [],
            "message": "AI service not implemented yet. This will integrate OpenAI for travel recommendations.",
        }
