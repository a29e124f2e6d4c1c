"""
Map route geometry for a trip.

Stops with coordinates become waypoints; Mapbox Directions turns them into a
road route which is split back into one coloured GeoJSON leg per pair of
consecutive stops. When Directions is unavailable the legs are straight lines.
"""
from typing import Literal
from urllib.parse import quote
import logging
import math
import random

import httpx

logger = logging.getLogger(__name__)

DIRECTIONS_BASE = "https://api.mapbox.com/directions/v5"
MAX_WAYPOINTS = 25

RouteProfile = Literal["driving", "driving-traffic", "walking", "cycling"]

ROUTE_COLOR_PALETTE = [
    "#3b82f6",  # blue
    "#22c55e",  # green
    "#f59e0b",  # amber
    "#8b5cf6",  # violet
    "#06b6d4",  # cyan
    "#ec4899",  # pink
    "#6366f1",  # indigo
    "#14b8a6",  # teal
    "#f97316",  # orange
    "#ff6b6b",  # coral
]

Coordinate = list[float]


def get_leg_color(leg_index: int) -> str:
    return ROUTE_COLOR_PALETTE[leg_index % len(ROUTE_COLOR_PALETTE)]


def get_random_route_color() -> str:
    return random.choice(ROUTE_COLOR_PALETTE)


def _is_finite(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def trip_locations_to_waypoints(locations: list[dict]) -> list[dict]:
    """Stops with usable coordinates, in route order, as ``{lng, lat}`` waypoints."""
    ordered = sorted(locations, key=lambda loc: loc.get("order_index") or 0)
    return [
        {"lng": loc["longitude"], "lat": loc["latitude"]}
        for loc in ordered
        if _is_finite(loc.get("latitude")) and _is_finite(loc.get("longitude"))
    ]


def split_at_waypoints(coordinates: list[Coordinate], waypoint_locations: list[Coordinate]) -> list[list[Coordinate]]:
    """
    Splits a full route line into legs at the snapped waypoint positions.

    For every interior waypoint the closest coordinate is searched for, moving
    forward only so legs stay in order. Legs shorter than two points are dropped.
    """
    if len(waypoint_locations) < 2 or len(coordinates) < 2:
        return [coordinates]

    split_indices = []
    search_from = 1

    for wp_lng, wp_lat in waypoint_locations[1:-1]:
        best_idx = search_from
        best_dist = math.inf

        for i in range(search_from, len(coordinates) - 1):
            dist = (coordinates[i][0] - wp_lng) ** 2 + (coordinates[i][1] - wp_lat) ** 2
            if dist < best_dist:
                best_dist = dist
                best_idx = i

        split_indices.append(best_idx)
        search_from = best_idx + 1

    legs = []
    start = 0
    for split_idx in split_indices:
        legs.append(coordinates[start:split_idx + 1])
        start = split_idx
    legs.append(coordinates[start:])

    return [leg for leg in legs if len(leg) >= 2]


def legs_to_feature_collection(legs: list[list[Coordinate]]) -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"color": get_leg_color(i), "legIndex": i},
                "geometry": {"type": "LineString", "coordinates": coords},
            }
            for i, coords in enumerate(legs)
        ],
    }


def straight_line_legs(waypoints: list[dict]) -> dict:
    legs = [
        [[a["lng"], a["lat"]], [b["lng"], b["lat"]]]
        for a, b in zip(waypoints, waypoints[1:])
    ]
    return legs_to_feature_collection(legs)


async def fetch_route(
    waypoints: list[dict],
    access_token: str,
    profile: RouteProfile = "driving",
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict | None:
    """Road route through ``waypoints`` as a leg FeatureCollection, or None on any failure."""
    with_coords = [w for w in waypoints if _is_finite(w.get("lat")) and _is_finite(w.get("lng"))]
    if len(with_coords) < 2 or len(with_coords) > MAX_WAYPOINTS:
        return None

    coords = ";".join(f"{w['lng']},{w['lat']}" for w in with_coords)
    url = f"{DIRECTIONS_BASE}/mapbox/{profile}/{quote(coords, safe='')}"
    params = {"access_token": access_token, "geometries": "geojson", "overview": "full"}

    try:
        async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
            resp = await client.get(url, params=params)
    except httpx.HTTPError as e:
        logger.error(f"Mapbox Directions request failed: {e}")
        return None

    if resp.status_code != 200:
        logger.error(f"Mapbox Directions request failed: {resp.status_code} {resp.text}")
        return None

    try:
        data = resp.json()
    except ValueError:
        logger.error("Mapbox Directions returned a non-JSON body")
        return None

    routes = data.get("routes") or []
    if data.get("code") != "Ok" or not routes:
        return None

    geometry = routes[0].get("geometry") or {}
    coordinates = geometry.get("coordinates")
    if geometry.get("type") != "LineString" or not isinstance(coordinates, list) or len(coordinates) < 2:
        return None

    waypoint_locations = [w["location"] for w in data.get("waypoints") or [] if "location" in w]
    legs = split_at_waypoints(coordinates, waypoint_locations)
    if not legs:
        return None

    return legs_to_feature_collection(legs)


class RouteService:

    def __init__(self, access_token: str | None, transport: httpx.AsyncBaseTransport | None = None):
        self.access_token = access_token
        self.transport = transport

    async def build_route(self, locations: list[dict], profile: RouteProfile = "driving") -> dict:
        waypoints = trip_locations_to_waypoints(locations)

        collection = None
        if self.access_token:
            collection = await fetch_route(waypoints, self.access_token, profile, transport=self.transport)
        else:
            logger.info("MAPBOX_ACCESS_TOKEN not set, using straight-line route")

        source = "directions"
        if collection is None:
            collection = straight_line_legs(waypoints)
            source = "straight"

        return {**collection, "waypoints": waypoints, "source": source}
