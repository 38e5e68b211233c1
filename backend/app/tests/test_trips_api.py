"""
Tests for trip, collaborator and itinerary endpoints.
"""

KYOTO = {"title": "Kyoto Trip", "start_date": "2024-04-01", "end_date": "2024-04-03"}


def create_trip(client, headers, payload=KYOTO) -> int:
    response = client.post("/api/trips", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()["id"]


def invite(client, headers, trip_id, username, role):
    return client.post(
        f"/api/trips/{trip_id}/collaborators",
        json={"email": f"{username}@example.com", "role": role},
        headers=headers
    )


def test_create_and_list_trips(client, auth_headers):
    trip_id = create_trip(client, auth_headers)

    response = client.get("/api/trips", headers=auth_headers)
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [trip_id]

    detail = client.get(f"/api/trips/{trip_id}", headers=auth_headers).json()
    assert detail["role"] == "owner"
    assert detail["collaborators"] == []


def test_create_trip_rejects_inverted_dates(client, auth_headers):
    response = client.post(
        "/api/trips",
        json={"title": "Backwards", "start_date": "2024-04-03", "end_date": "2024-04-01"},
        headers=auth_headers
    )
    assert response.status_code == 422


def test_update_trip(client, auth_headers):
    trip_id = create_trip(client, auth_headers)
    response = client.put(f"/api/trips/{trip_id}", json={"title": "Kyoto & Nara"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["title"] == "Kyoto & Nara"


def test_non_member_is_forbidden(client, auth_headers, register_user):
    trip_id = create_trip(client, auth_headers)
    stranger = register_user("stranger")
    assert client.get(f"/api/trips/{trip_id}", headers=stranger).status_code == 403
    assert client.get(f"/api/memoirs/{trip_id}", headers=stranger).status_code == 403


def test_missing_trip_is_not_found(client, auth_headers):
    assert client.get("/api/trips/999", headers=auth_headers).status_code == 404
    assert client.get("/api/memoirs/999", headers=auth_headers).status_code == 404


def test_collaborator_roles(client, auth_headers, register_user):
    trip_id = create_trip(client, auth_headers)
    viewer = register_user("viewer")
    editor = register_user("editor")

    assert invite(client, auth_headers, trip_id, "viewer", "viewer").status_code == 201
    assert invite(client, auth_headers, trip_id, "editor", "editor").status_code == 201
    assert invite(client, auth_headers, trip_id, "viewer", "editor").status_code == 400
    assert invite(client, auth_headers, trip_id, "owner", "editor").status_code == 400
    assert invite(client, auth_headers, trip_id, "nobody", "viewer").status_code == 404

    # Viewers read but do not edit
    assert client.get(f"/api/trips/{trip_id}", headers=viewer).json()["role"] == "viewer"
    item = {"title": "Nishiki Market", "type": "food", "day_index": 0}
    assert client.post(f"/api/trips/{trip_id}/items", json=item, headers=viewer).status_code == 403
    assert client.post(f"/api/memoirs/{trip_id}/draft", headers=viewer).status_code == 403

    # Editors edit but do not delete the trip
    assert client.post(f"/api/trips/{trip_id}/items", json=item, headers=editor).status_code == 201
    assert client.delete(f"/api/trips/{trip_id}", headers=editor).status_code == 403

    collaborators = client.get(f"/api/trips/{trip_id}/collaborators", headers=auth_headers).json()
    assert sorted(c["username"] for c in collaborators) == ["editor", "viewer"]


def test_change_and_remove_collaborator(client, auth_headers, register_user):
    trip_id = create_trip(client, auth_headers)
    viewer = register_user("viewer")
    user_id = invite(client, auth_headers, trip_id, "viewer", "viewer").json()["user_id"]

    response = client.put(
        f"/api/trips/{trip_id}/collaborators/{user_id}", json={"role": "editor"}, headers=auth_headers
    )
    assert response.json()["role"] == "editor"
    item = {"title": "Gion", "day_index": 0}
    assert client.post(f"/api/trips/{trip_id}/items", json=item, headers=viewer).status_code == 201

    assert client.delete(f"/api/trips/{trip_id}/collaborators/{user_id}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/trips/{trip_id}", headers=viewer).status_code == 403


def test_items_ordered_by_day_then_time(client, auth_headers):
    trip_id = create_trip(client, auth_headers)
    for item in [
        {"title": "Dinner", "type": "food", "day_index": 0, "start_time": "19:00:00"},
        {"title": "Free walk", "day_index": 0},
        {"title": "Temple", "day_index": 0, "start_time": "09:00:00"},
        {"title": "Train", "type": "transport", "day_index": 1, "start_time": "08:00:00"},
    ]:
        assert client.post(f"/api/trips/{trip_id}/items", json=item, headers=auth_headers).status_code == 201

    titles = [i["title"] for i in client.get(f"/api/trips/{trip_id}/items", headers=auth_headers).json()]
    assert titles == ["Temple", "Dinner", "Free walk", "Train"]


def test_update_and_delete_item(client, auth_headers):
    trip_id = create_trip(client, auth_headers)
    item_id = client.post(
        f"/api/trips/{trip_id}/items", json={"title": "Gion"}, headers=auth_headers
    ).json()["id"]

    response = client.put(
        f"/api/trips/{trip_id}/items/{item_id}", json={"description": "Evening stroll"}, headers=auth_headers
    )
    assert response.json()["description"] == "Evening stroll"
    assert response.json()["title"] == "Gion"

    assert client.delete(f"/api/trips/{trip_id}/items/{item_id}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/trips/{trip_id}/items", headers=auth_headers).json() == []


def test_gallery_upload_partial_failure(client, auth_headers):
    trip_id = create_trip(client, auth_headers)
    item_id = client.post(
        f"/api/trips/{trip_id}/items", json={"title": "Ramen Shop", "type": "food"}, headers=auth_headers
    ).json()["id"]

    response = client.post(
        f"/api/trips/{trip_id}/items/{item_id}/photos",
        files=[
            ("files", ("bowl.jpg", b"jpeg-bytes", "image/jpeg")),
            ("files", ("menu.pdf", b"%PDF-1.4", "application/pdf")),
        ],
        headers=auth_headers
    )
    assert response.status_code == 201
    body = response.json()
    assert len(body["photos"]) == 1
    assert body["failed"] == ["menu.pdf"]

    listed = client.get(f"/api/trips/{trip_id}/items/{item_id}/photos", headers=auth_headers).json()
    assert [p["url"] for p in listed] == [body["photos"][0]["url"]]

    photo_id = listed[0]["id"]
    assert client.delete(
        f"/api/trips/{trip_id}/items/{item_id}/photos/{photo_id}", headers=auth_headers
    ).status_code == 200


def test_gallery_upload_all_failed(client, auth_headers):
    trip_id = create_trip(client, auth_headers)
    item_id = client.post(f"/api/trips/{trip_id}/items", json={"title": "Gion"}, headers=auth_headers).json()["id"]
    response = client.post(
        f"/api/trips/{trip_id}/items/{item_id}/photos",
        files=[("files", ("notes.txt", b"hello", "text/plain"))],
        headers=auth_headers
    )
    assert response.status_code == 400


def test_cover_upload_is_served(client, auth_headers):
    trip_id = create_trip(client, auth_headers)
    item_id = client.post(f"/api/trips/{trip_id}/items", json={"title": "Gion"}, headers=auth_headers).json()["id"]

    response = client.post(
        f"/api/trips/{trip_id}/items/{item_id}/cover",
        files={"file": ("gion.png", b"png-bytes", "image/png")},
        headers=auth_headers
    )
    assert response.status_code == 200
    url = response.json()["image_url"]
    assert url.startswith("/static/items/")
    assert client.get(url).content == b"png-bytes"


def test_delete_trip_cascades(client, auth_headers):
    trip_id = create_trip(client, auth_headers)
    client.post(f"/api/trips/{trip_id}/items", json={"title": "Gion"}, headers=auth_headers)
    client.get(f"/api/memoirs/{trip_id}", headers=auth_headers)

    assert client.delete(f"/api/trips/{trip_id}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/trips/{trip_id}", headers=auth_headers).status_code == 404


def test_only_owner_changes_or_removes_collaborators(client, auth_headers, register_user):
    trip_id = create_trip(client, auth_headers)
    first = register_user("editor1")
    register_user("editor2")
    invite(client, auth_headers, trip_id, "editor1", "editor")
    second_id = invite(client, auth_headers, trip_id, "editor2", "editor").json()["user_id"]

    response = client.put(
        f"/api/trips/{trip_id}/collaborators/{second_id}", json={"role": "viewer"}, headers=first
    )
    assert response.status_code == 403
    assert client.delete(f"/api/trips/{trip_id}/collaborators/{second_id}", headers=first).status_code == 403

    # Editors may still invite
    register_user("guest")
    assert invite(client, first, trip_id, "guest", "viewer").status_code == 201

    roles = {c["username"]: c["role"] for c in client.get(f"/api/trips/{trip_id}/collaborators", headers=auth_headers).json()}
    assert roles["editor2"] == "editor"


def test_update_item_rejects_null_required_fields(client, auth_headers):
    trip_id = create_trip(client, auth_headers)
    item_id = client.post(f"/api/trips/{trip_id}/items", json={"title": "Gion"}, headers=auth_headers).json()["id"]

    for payload in ({"title": None}, {"type": None}):
        response = client.put(f"/api/trips/{trip_id}/items/{item_id}", json=payload, headers=auth_headers)
        assert response.status_code == 422

    # Nullable fields can still be cleared
    client.put(f"/api/trips/{trip_id}/items/{item_id}", json={"description": "Walk"}, headers=auth_headers)
    response = client.put(f"/api/trips/{trip_id}/items/{item_id}", json={"description": None}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["description"] is None
    assert response.json()["title"] == "Gion"
