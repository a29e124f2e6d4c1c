"""
Tomorrow.io weather lookups.

Results are cached per location and date window for ten minutes. Trip weather
fans out over every stop of the trip concurrently and reports a failing stop
inline instead of failing the whole request.
"""
from datetime import datetime, timedelta
import asyncio
import logging

import httpx
from fastapi import HTTPException, status

from gotrippin.core.config import settings
from gotrippin.models.weather import WEATHER_FIELDS, WeatherData, get_weather_description
from gotrippin.services.cache import TTLCache
from gotrippin.services.utils import Utils

logger = logging.getLogger(__name__)

utils = Utils()

TOMORROW_BASE_URL = "https://api.tomorrow.io/v4"
CACHE_TTL = 10 * 60
MAX_FORECAST_DAYS = 14
PAST_LIMIT = timedelta(hours=24)


def _parse(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return utils.parse_iso(value)
    except ValueError:
        return None


def _iso(dt: datetime) -> str:
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_start_date(value: str | None) -> str | None:
    """Drops start dates that are unparseable or further than 24h in the past."""
    parsed = _parse(value)
    if parsed is None or parsed < utils.now_utc() - PAST_LIMIT:
        return None
    return _iso(parsed)


def normalize_end_date(value: str | None, start: str | None = None) -> str | None:
    parsed = _parse(value)
    if parsed is None:
        return None
    start_dt = _parse(start)
    if start_dt is not None and parsed < start_dt:
        return None
    return _iso(parsed)


def _current_from(values: dict) -> dict:
    code = values.get("weatherCode") or 1000
    return {
        "temperature": values.get("temperature") or 0,
        "temperatureApparent": values.get("temperatureApparent") or values.get("temperature") or 0,
        "humidity": values.get("humidity") or 0,
        "weatherCode": code,
        "description": get_weather_description(code),
        "windSpeed": values.get("windSpeed") or 0,
        "windDirection": values.get("windDirection") or 0,
        "cloudCover": values.get("cloudCover") or 0,
        "uvIndex": values.get("uvIndex"),
    }


def _find_timeline(payload: dict, timestep: str) -> dict | None:
    timelines = (payload.get("data") or {}).get("timelines") or []
    return next((t for t in timelines if t.get("timestep") == timestep), None)


def transform_timeline_response(payload: dict, location: str) -> dict:
    weather = {"location": location, "forecast": []}

    daily = _find_timeline(payload, "1d")
    if daily and daily.get("intervals"):
        forecast = []
        for interval in daily["intervals"]:
            values = interval.get("values") or {}
            code = values.get("weatherCode") or 1000
            forecast.append({
                "date": interval.get("startTime"),
                "temperatureMin": values.get("temperature"),
                "temperatureMax": values.get("temperature"),
                "temperature": values.get("temperature"),
                "humidity": values.get("humidity") or 0,
                "precipitationProbability": values.get("precipitationProbability") or 0,
                "precipitationIntensity": values.get("precipitationIntensity") or 0,
                "weatherCode": code,
                "description": get_weather_description(code),
                "windSpeed": values.get("windSpeed") or 0,
                "cloudCover": values.get("cloudCover") or 0,
            })
        weather["forecast"] = forecast

    hourly = _find_timeline(payload, "1h")
    if hourly and hourly.get("intervals"):
        weather["current"] = _current_from(hourly["intervals"][0].get("values") or {})

    return weather


def transform_realtime_response(payload: dict, location: str) -> dict:
    weather = {"location": location}

    current = _find_timeline(payload, "current")
    if current and current.get("intervals"):
        weather["current"] = _current_from(current["intervals"][0].get("values") or {})

    return weather


def _transform(transform, payload: dict, location: str) -> dict:
    try:
        weather = transform(payload, location)
        WeatherData.model_validate(weather)
    except (AttributeError, TypeError, ValueError) as e:
        logger.error(f"Malformed Tomorrow.io payload for {location}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch weather data: unexpected response from weather provider",
        )
    return weather


def upstream_error(resp: httpx.Response) -> HTTPException:
    """Maps a failed Tomorrow.io response onto the error returned to the client."""
    try:
        data = resp.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    message = str(data.get("message") or data.get("type") or resp.reason_phrase)
    code = data.get("code")
    status_code = resp.status_code

    if status_code == 401:
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid weather API key: {message}")
    if status_code == 403:
        if code == 403003 or "plan is restricted" in message or "cannot be more than" in message:
            return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Plan restriction: {message}")
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid weather API key: {message}")
    if status_code == 429:
        return HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Weather API rate limit exceeded")
    if status_code == 400:
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid request: {message}")
    if status_code == 404:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to fetch weather data: {message}",
    )


class WeatherService:

    def __init__(self, api_key: str | None, transport: httpx.AsyncBaseTransport | None = None):
        self.api_key = api_key
        self.transport = transport
        self.cache = TTLCache(CACHE_TTL)
        if not api_key:
            logger.warning("TOMORROW_IO_API_KEY not found in environment variables")

    async def _post_timelines(self, body: dict) -> dict:
        if not self.api_key:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Weather API key not configured")

        try:
            async with httpx.AsyncClient(base_url=TOMORROW_BASE_URL, timeout=10.0, transport=self.transport) as client:
                resp = await client.post("/timelines", json=body, params={"apikey": self.api_key})
        except httpx.HTTPError as e:
            logger.error(f"Error calling Tomorrow.io: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to fetch weather data: {e}",
            )

        if resp.status_code != 200:
            logger.error(f"Tomorrow.io responded {resp.status_code}: {resp.text}")
            raise upstream_error(resp)

        try:
            payload = resp.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            logger.error(f"Tomorrow.io returned an unreadable body: {resp.text[:200]}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to fetch weather data: unexpected response from weather provider",
            )
        return payload

    async def get_timeline(self, location: str, start_date: str | None = None, end_date: str | None = None) -> dict:
        cache_key = f"timeline:{location}:{start_date or 'none'}:{end_date or 'none'}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        if not self.api_key:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Weather API key not configured")

        body = {
            "location": location,
            "fields": WEATHER_FIELDS,
            "timesteps": ["1h", "1d"],
            "units": "metric",
        }

        start = _parse(start_date)
        if start_date:
            if start is None:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid request: startDate must be an ISO 8601 date")
            if utils.now_utc() - start > PAST_LIMIT:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Free tier plan restriction: startTime cannot be more than 24 hours in the past. Please use current or future dates.",
                )
            body["startTime"] = start_date

        end = _parse(end_date)
        if end_date:
            body["endTime"] = end_date

        if start is not None and end is not None:
            window = end - start
            if window <= timedelta(0):
                body.pop("endTime")
            elif window < timedelta(hours=24):
                body["timesteps"] = ["1h"]

        payload = await self._post_timelines(body)
        weather = _transform(transform_timeline_response, payload, location)
        self.cache.set(cache_key, weather)
        return weather

    async def get_realtime(self, location: str) -> dict:
        cache_key = f"realtime:{location}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        body = {
            "location": location,
            "fields": WEATHER_FIELDS,
            "timesteps": ["current"],
            "units": "metric",
        }
        payload = await self._post_timelines(body)
        weather = _transform(transform_realtime_response, payload, location)
        self.cache.set(cache_key, weather)
        return weather

    async def _stop_weather(self, loc: dict, limit_days: int | None) -> dict:
        if loc.get("latitude") is not None and loc.get("longitude") is not None:
            target = f"{loc['latitude']},{loc['longitude']}"
        else:
            target = loc["location_name"]

        start = normalize_start_date(loc.get("arrival_date"))
        end = normalize_end_date(loc.get("departure_date"), start)

        result = {
            "locationId": loc["id"],
            "locationName": loc["location_name"],
            "orderIndex": loc.get("order_index"),
            "arrivalDate": loc.get("arrival_date"),
            "departureDate": loc.get("departure_date"),
            "latitude": loc.get("latitude"),
            "longitude": loc.get("longitude"),
            "weather": None,
            "error": None,
        }

        try:
            weather = await self.get_timeline(target, start, end)
        except HTTPException as e:
            logger.warning(f"Weather fetch failed for location {loc['id']}: {e.detail}")
            result["error"] = e.detail or "Failed to fetch weather for this stop"
            return result

        forecast = weather.get("forecast")
        if limit_days and forecast:
            forecast = forecast[:limit_days]
        result["weather"] = {**weather, "forecast": forecast}
        return result

    async def get_trip_weather(self, trip_id: str, locations: list[dict], days: int | None = None) -> dict:
        limit_days = min(days, MAX_FORECAST_DAYS) if days and days > 0 else None
        results = await asyncio.gather(*(self._stop_weather(loc, limit_days) for loc in locations))
        return {"tripId": trip_id, "locations": list(results)}


weather_service = WeatherService(settings.TOMORROW_IO_API_KEY)


def get_weather_service() -> WeatherService:
    return weather_service
