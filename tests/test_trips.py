import pytest
from postgrest.exceptions import APIError

from conftest import USER_ID, OTHER_USER_ID, auth_headers
from gotrippin.services.routes import ROUTE_COLOR_PALETTE


def test_requires_token(client):
    resp = client.get("/trips")
    assert resp.status_code == 401
    assert resp.json() == {"detail": "No authorization header provided"}


def test_rejects_bad_token(client):
    resp = client.get("/trips", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Invalid token"}


def test_list_only_member_trips_newest_first(client, db, headers):
    older = db.seed_trip(title="Older", created_at="2026-01-01T00:00:00+00:00")
    newer = db.seed_trip(title="Newer", share_code="ZzYy9876", created_at="2026-03-01T00:00:00+00:00")
    db.seed_trip(title="Someone else's", share_code="QqWw1111", members=(OTHER_USER_ID,))

    resp = client.get("/trips", headers=headers)

    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()] == [newer["id"], older["id"]]


def test_list_empty_without_memberships(client, headers):
    resp = client.get("/trips", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == []


def test_create_trip_adds_creator_share_code_and_color(client, db, headers):
    resp = client.post("/trips", json={"title": "Balkans", "destination": "Sofia"}, headers=headers)

    assert resp.status_code == 201
    trip = resp.json()
    assert trip["title"] == "Balkans"
    assert len(trip["share_code"]) == 8 and trip["share_code"].isalnum()
    assert trip["color"] in ROUTE_COLOR_PALETTE
    assert trip["created_at"]
    assert {"trip_id": trip["id"], "user_id": USER_ID} in [
        {"trip_id": m["trip_id"], "user_id": m["user_id"]} for m in db.tables["trip_members"]
    ]


def test_create_trip_keeps_given_color(client, headers):
    resp = client.post("/trips", json={"title": "Coast", "color": "#112233"}, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["color"] == "#112233"


def test_create_trip_retries_share_code_collision(client, db, headers, monkeypatch):
    db.seed_trip(share_code="TAKEN123")
    codes = iter(["TAKEN123", "FRESH456"])
    monkeypatch.setattr("gotrippin.services.trips.utils.generate_share_code", lambda: next(codes))

    resp = client.post("/trips", json={"title": "Retry"}, headers=headers)

    assert resp.status_code == 201
    assert resp.json()["share_code"] == "FRESH456"


def test_create_trip_storage_failure(client, db, headers):
    db.fail_tables["trips"] = "insert"
    resp = client.post("/trips", json={"title": "Broken"}, headers=headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Failed to create trip"


def test_create_trip_validation(client, headers):
    resp = client.post(
        "/trips",
        json={"title": "Bad", "start_date": "2026-05-10", "end_date": "2026-05-01"},
        headers=headers,
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation failed"
    assert any("End date must be after or equal to start date" in e["message"] for e in body["errors"])


def test_create_trip_rejects_unknown_fields(client, headers):
    resp = client.post("/trips", json={"title": "X", "user_id": USER_ID}, headers=headers)
    assert resp.status_code == 400


def test_create_trip_rejects_bad_color_and_url(client, headers):
    assert client.post("/trips", json={"color": "red"}, headers=headers).status_code == 400
    assert client.post("/trips", json={"image_url": "not a url"}, headers=headers).status_code == 400


def test_get_trip_non_member_forbidden(client, db, headers):
    trip = db.seed_trip(members=(OTHER_USER_ID,))
    resp = client.get(f"/trips/{trip['id']}", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Trip not found or access denied"


def test_get_trip(client, db, headers):
    trip = db.seed_trip(title="Mine")
    resp = client.get(f"/trips/{trip['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["title"] == "Mine"


def test_share_code_lookup(client, db, headers):
    trip = db.seed_trip(share_code="Share123")
    resp = client.get("/trips/share/Share123", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == trip["id"]


def test_share_code_errors(client, db, headers):
    db.seed_trip(share_code="Other123", members=(OTHER_USER_ID,))

    assert client.get("/trips/share/bad-code", headers=headers).status_code == 400
    assert client.get("/trips/share/Unknown1", headers=headers).status_code == 404
    assert client.get("/trips/share/Other123", headers=headers).status_code == 403


def test_update_trip_writes_only_sent_fields(client, db, headers):
    trip = db.seed_trip(title="Before", destination="Rome")
    resp = client.put(f"/trips/{trip['id']}", json={"title": "After"}, headers=headers)

    assert resp.status_code == 200
    assert resp.json()["title"] == "After"
    assert resp.json()["destination"] == "Rome"


def test_update_trip_non_member(client, db, headers):
    trip = db.seed_trip(members=(OTHER_USER_ID,))
    resp = client.put(f"/trips/{trip['id']}", json={"title": "Hijack"}, headers=headers)
    assert resp.status_code == 403


def test_delete_trip(client, db, headers):
    trip = db.seed_trip()
    resp = client.delete(f"/trips/{trip['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Trip deleted successfully"}
    assert db.tables["trips"] == []


def test_delete_trip_non_member(client, db, headers):
    trip = db.seed_trip(members=(OTHER_USER_ID,))
    assert client.delete(f"/trips/{trip['id']}", headers=headers).status_code == 403
    assert len(db.tables["trips"]) == 1


def test_members_flow(client, db, headers):
    trip = db.seed_trip()
    db.seed("profiles", id=OTHER_USER_ID, display_name="Friend")

    resp = client.post(f"/trips/{trip['id']}/members", json={"user_id": OTHER_USER_ID}, headers=headers)
    assert resp.status_code == 201
    assert resp.json() == {"message": "Member added successfully"}

    members = client.get(f"/trips/{trip['id']}/members", headers=headers).json()
    by_user = {m["user_id"]: m for m in members}
    assert set(by_user) == {USER_ID, OTHER_USER_ID}
    assert by_user[OTHER_USER_ID]["profile"]["display_name"] == "Friend"

    resp = client.delete(f"/trips/{trip['id']}/members/{OTHER_USER_ID}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Member removed successfully"}


def test_add_member_requires_uuid_v4(client, db, headers):
    trip = db.seed_trip()
    resp = client.post(f"/trips/{trip['id']}/members", json={"user_id": "nope"}, headers=headers)
    assert resp.status_code == 400


def test_non_member_cannot_view_or_add_members(client, db, headers):
    trip = db.seed_trip(members=(OTHER_USER_ID,))
    assert client.get(f"/trips/{trip['id']}/members", headers=headers).status_code == 403
    resp = client.post(f"/trips/{trip['id']}/members", json={"user_id": USER_ID}, headers=headers)
    assert resp.status_code == 403


def test_user_can_always_remove_themselves(client, db):
    trip = db.seed_trip(members=(USER_ID,))
    resp = client.delete(f"/trips/{trip['id']}/members/{OTHER_USER_ID}", headers=auth_headers(OTHER_USER_ID))
    assert resp.status_code == 200


def test_fake_unique_constraint_raises_api_error(db):
    db.seed("trips", share_code="SAME1234")
    try:
        db.table("trips").insert({"share_code": "SAME1234"}).execute()
    except APIError as e:
        assert e.code == "23505"
    else:
        raise AssertionError("expected a unique violation")


@pytest.mark.parametrize("method, path, body, detail", [
    ("PUT", "", {"title": "After"}, "Failed to update trip"),
    ("DELETE", "", None, "Failed to delete trip"),
    ("GET", "/members", None, "Failed to fetch trip members"),
    ("POST", "/members", {"user_id": OTHER_USER_ID}, "Failed to add member"),
    ("DELETE", f"/members/{OTHER_USER_ID}", None, "Failed to remove member"),
])
def test_membership_lookup_failure_is_404(client, db, headers, method, path, body, detail):
    trip = db.seed_trip()
    db.fail_tables["trip_members"] = "select"

    resp = client.request(method, f"/trips/{trip['id']}{path}", json=body, headers=headers)

    assert resp.status_code == 404
    assert resp.json()["detail"] == detail


def test_share_code_membership_failure_is_404(client, db, headers):
    db.seed_trip(share_code="Share123")
    db.fail_tables["trip_members"] = "select"

    resp = client.get("/trips/share/Share123", headers=headers)

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Trip not found"
