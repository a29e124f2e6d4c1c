from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from gotrippin.core.config import settings
from gotrippin.core.logging_config import setup_logging
from gotrippin.endpoints.activities import router as activities_router
from gotrippin.endpoints.ai import router as ai_router
from gotrippin.endpoints.auth import router as auth_router
from gotrippin.endpoints.health import router as health_router
from gotrippin.endpoints.images import router as images_router
from gotrippin.endpoints.profiles import router as profiles_router
from gotrippin.endpoints.routes import router as routes_router
from gotrippin.endpoints.trip_locations import router as trip_locations_router
from gotrippin.endpoints.trips import router as trips_router
from gotrippin.endpoints.weather import router as weather_router, trip_router as trip_weather_router
from gotrippin.middlewares.middlewares import VerifyToken, RequestLoggerMiddleware, RateLimitMiddleware, HTTPErrorHandler

setup_logging()

logger = logging.getLogger(__name__)

app = FastAPI(title="Go Trippin API", description="Backend API for the Go Trippin travel planner")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err["loc"][1:]) or str(err["loc"][0]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Validation failed", "errors": errors},
    )


app.add_middleware(VerifyToken)

if settings.REDIS_URL:
    app.add_middleware(
        RateLimitMiddleware,
        redis_url=settings.REDIS_URL,
        default_limit=settings.RATE_LIMIT_DEFAULT,
        default_window=settings.RATE_LIMIT_WINDOW,
    )
else:
    logger.info("REDIS_URL not set, rate limiting disabled")

app.add_middleware(HTTPErrorHandler)
app.add_middleware(RequestLoggerMiddleware)

# added last so it wraps everything and auth errors still carry CORS headers
origins = settings.frontend_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=bool(origins),
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(trips_router)
app.include_router(trip_locations_router)
app.include_router(activities_router)
app.include_router(trip_weather_router)
app.include_router(routes_router)
app.include_router(profiles_router)
app.include_router(images_router)
app.include_router(weather_router)
app.include_router(ai_router)
