from fastapi import APIRouter, Depends, Query, Response
from typing import Annotated

from gotrippin.core.supabase_config import SupabaseDep
from gotrippin.models.weather import WeatherData, TripWeatherResponse
from gotrippin.services.trip_locations import TripLocationsService
from gotrippin.services.utils import CurrentUser
from gotrippin.services.weather import WeatherService, get_weather_service, MAX_FORECAST_DAYS

router = APIRouter(prefix="/weather", tags=["Weather"])
trip_router = APIRouter(prefix="/trips/{trip_id}/weather", tags=["Weather"])

WeatherDep = Annotated[WeatherService, Depends(get_weather_service)]


@router.get("/timeline", response_model=WeatherData, response_model_exclude_none=True)
async def get_timeline(
    weather: WeatherDep,
    location: str = Query(min_length=1, examples=["42.6977,23.3219"]),
    startDate: str | None = Query(default=None),
    endDate: str | None = Query(default=None),
):
    return await weather.get_timeline(location, startDate, endDate)


@router.get("/realtime", response_model=WeatherData, response_model_exclude_none=True)
async def get_realtime(weather: WeatherDep, location: str = Query(min_length=1)):
    return await weather.get_realtime(location)


@trip_router.get("", response_model=TripWeatherResponse)
async def get_trip_weather(
    trip_id: str,
    response: Response,
    user: CurrentUser,
    supabase: SupabaseDep,
    weather: WeatherDep,
    days: int | None = Query(default=None, ge=1, le=MAX_FORECAST_DAYS),
):
    locations = TripLocationsService(supabase).get_route(trip_id, user["id"])

    response.headers["Cache-Control"] = "private, max-age=600, stale-while-revalidate=60"
    response.headers["Vary"] = "Authorization"
    return await weather.get_trip_weather(trip_id, locations, days)
