from datetime import timezone
import time

import pytest
from pydantic import ValidationError

from gotrippin.core.config import Settings
from gotrippin.models import CreateTrip, AddMember, ReorderLocations, UpdateActivity, AvatarUploadRequest
from gotrippin.services.cache import TTLCache
from gotrippin.services.utils import Utils

utils = Utils()


def test_share_codes():
    code = utils.generate_share_code()
    assert len(code) == 8
    assert utils.is_valid_share_code(code)
    assert len(utils.generate_share_code(12)) == 12
    assert not utils.is_valid_share_code("short")
    assert not utils.is_valid_share_code("abc-1234")
    assert not utils.is_valid_share_code("abcd12345")


def test_parse_iso_treats_naive_as_utc():
    assert utils.parse_iso("2026-05-01").tzinfo == timezone.utc
    assert utils.parse_iso("2026-05-01T10:00:00Z") == utils.parse_iso("2026-05-01T12:00:00+02:00")


def test_parse_iso_accepts_fractional_seconds():
    parsed = utils.parse_iso("2025-12-01T10:00:00.1Z")
    assert parsed.microsecond == 100000
    assert parsed.tzinfo == timezone.utc


def test_ends_before():
    assert utils.ends_before("2026-05-02", "2026-05-01")
    assert not utils.ends_before("2026-05-01", "2026-05-01")
    assert not utils.ends_before(None, "2026-05-01")


def test_validators():
    assert utils.validate_hex_color("#A1b2C3") == "#A1b2C3"
    with pytest.raises(ValueError):
        utils.validate_hex_color("#abc")
    with pytest.raises(ValueError):
        utils.validate_iso8601("31/12/2026")
    with pytest.raises(ValueError):
        utils.validate_url("example")
    assert utils.validate_url("https://example.com/a.jpg") == "https://example.com/a.jpg"


def test_ttl_cache_expires(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(time, "monotonic", lambda: now[0])
    cache = TTLCache(10)

    cache.set("k", {"v": 1})
    assert cache.get("k") == {"v": 1}

    now[0] += 11
    assert cache.get("k") is None
    assert len(cache) == 0


def test_trip_model_accepts_empty_and_equal_dates():
    assert CreateTrip().model_dump(exclude_unset=True) == {}
    trip = CreateTrip(start_date="2026-05-01", end_date="2026-05-01")
    assert trip.end_date == "2026-05-01"


def test_trip_model_rules():
    with pytest.raises(ValidationError):
        CreateTrip(title="")
    with pytest.raises(ValidationError):
        CreateTrip(description="d" * 2001)
    with pytest.raises(ValidationError):
        CreateTrip(title="x" * 201)


def test_uuid_v4_checks():
    with pytest.raises(ValidationError):
        AddMember(user_id="00000000-0000-1000-8000-000000000000")
    with pytest.raises(ValidationError):
        ReorderLocations(location_ids=["00000000-0000-1000-8000-000000000000"])


def test_update_activity_allows_nulls():
    update = UpdateActivity(location_id=None, notes=None)
    assert update.model_dump(exclude_unset=True) == {"location_id": None, "notes": None}


def test_avatar_extension_normalised():
    assert AvatarUploadRequest(content_type="image/jpeg", file_extension=".JPEG").file_extension == "jpeg"
    with pytest.raises(ValidationError):
        AvatarUploadRequest(content_type="image/jpeg", file_extension="p/h/p")


def test_frontend_origins_normalised():
    settings = Settings(FRONTEND_ORIGIN_DEV=" http://localhost:3000/ ", FRONTEND_ORIGIN_PROD=None)
    assert settings.frontend_origins == ["http://localhost:3000"]


def test_ttl_cache_sweeps_expired_on_write(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(time, "monotonic", lambda: now[0])
    cache = TTLCache(10)

    cache.set("beach_1_10", [1])
    cache.set("alps_1_10", [2])
    now[0] += 11
    cache.set("rome_1_10", [3])

    assert len(cache) == 1
    assert cache.get("rome_1_10") == [3]


def test_ttl_cache_evicts_oldest_when_full():
    cache = TTLCache(60, max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    assert len(cache) == 2
    assert cache.get("a") is None
    assert cache.get("c") == 3
