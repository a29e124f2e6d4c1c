from gotrippin.models.trip import (
    CreateTrip,
    UpdateTrip,
    AddMember,
)
from gotrippin.models.trip_location import (
    CreateTripLocation,
    UpdateTripLocation,
    ReorderLocations,
)
from gotrippin.models.activity import (
    ActivityType,
    CreateActivity,
    UpdateActivity,
)
from gotrippin.models.profile import (
    UpdateProfile,
    AvatarUploadRequest,
)
from gotrippin.models.weather import (
    WeatherData,
    TripLocationWeather,
    TripWeatherResponse,
)
from gotrippin.models.auth_model import EmailPasswordRequestForm
from gotrippin.models.images import TrackDownload
from gotrippin.models.ai import RecommendationQuery
