from pydantic import BaseModel


# Tomorrow.io weather codes
WEATHER_CODE_DESCRIPTIONS: dict[int, str] = {
    1000: "Clear, Sunny",
    1100: "Mostly Clear",
    1101: "Partly Cloudy",
    1102: "Mostly Cloudy",
    1001: "Cloudy",
    2000: "Fog",
    2100: "Light Fog",
    4000: "Drizzle",
    4001: "Rain",
    4200: "Light Rain",
    4201: "Heavy Rain",
    5000: "Snow",
    5001: "Flurries",
    5100: "Light Snow",
    5101: "Heavy Snow",
    6000: "Freezing Drizzle",
    6001: "Freezing Rain",
    6200: "Light Freezing Rain",
    6201: "Heavy Freezing Rain",
    7000: "Ice Pellets",
    7101: "Heavy Ice Pellets",
    7102: "Light Ice Pellets",
    8000: "Thunderstorm",
}

WEATHER_FIELDS = [
    "temperature",
    "temperatureApparent",
    "humidity",
    "precipitationProbability",
    "precipitationIntensity",
    "weatherCode",
    "windSpeed",
    "windDirection",
    "cloudCover",
    "visibility",
    "uvIndex",
]


def get_weather_description(code: int) -> str:
    return WEATHER_CODE_DESCRIPTIONS.get(code, "Unknown")


class CurrentWeather(BaseModel):
    temperature: float
    temperatureApparent: float
    humidity: float
    weatherCode: int
    description: str
    windSpeed: float
    windDirection: float
    cloudCover: float
    uvIndex: float | None = None


class DailyForecast(BaseModel):
    date: str
    temperatureMin: float | None = None
    temperatureMax: float | None = None
    temperature: float | None = None
    humidity: float
    precipitationProbability: float
    precipitationIntensity: float
    weatherCode: int
    description: str
    windSpeed: float
    cloudCover: float


class WeatherData(BaseModel):
    location: str
    current: CurrentWeather | None = None
    forecast: list[DailyForecast] | None = None


class TripLocationWeather(BaseModel):
    locationId: str
    locationName: str
    orderIndex: int | None = None
    arrivalDate: str | None = None
    departureDate: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    weather: WeatherData | None = None
    error: str | None = None


class TripWeatherResponse(BaseModel):
    tripId: str
    locations: list[TripLocationWeather]
