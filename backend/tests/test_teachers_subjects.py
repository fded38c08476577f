from app.services.slot_locks import get_slot_write_guard


def test_teacher_crud(client):
    created = client.post(
        "/api/teachers",
        json={"name": "Carla Dias", "email": "carla@example.com", "bio": "History teacher"},
    )
    assert created.status_code == 201
    teacher = created.json()
    assert teacher["qualification"] is None

    duplicate = client.post("/api/teachers", json={"name": "Other", "email": "CARLA@example.com"})
    assert duplicate.status_code == 409

    listing = client.get("/api/teachers")
    assert [item["id"] for item in listing.json()] == [teacher["id"]]

    updated = client.patch(f"/api/teachers/{teacher['id']}", json={"qualification": "PhD History"})
    assert updated.status_code == 200
    assert updated.json()["qualification"] == "PhD History"

    assert client.patch(f"/api/teachers/{teacher['id']}", json={"name": None}).status_code == 400
    assert client.get("/api/teachers/missing").status_code == 404

    deleted = client.delete(f"/api/teachers/{teacher['id']}")
    assert deleted.status_code == 200
    assert client.get(f"/api/teachers/{teacher['id']}").status_code == 404


def test_teacher_rejects_invalid_email(client):
    response = client.post("/api/teachers", json={"name": "No Mail", "email": "not-an-email"})
    assert response.status_code == 422


def test_teacher_with_slots_cannot_be_deleted(client, teacher, make_slot):
    assert make_slot().status_code == 201
    response = client.delete(f"/api/teachers/{teacher['id']}")
    assert response.status_code == 409
    assert "1 scheduled slot" in response.json()["detail"]


def test_subject_crud(client):
    created = client.post("/api/subjects", json={"name": "  Chemistry  "})
    assert created.status_code == 201
    subject = created.json()
    assert subject["name"] == "Chemistry"

    assert client.post("/api/subjects", json={"name": "Chemistry"}).status_code == 409
    assert client.post("/api/subjects", json={"name": "   "}).status_code == 422

    updated = client.patch(f"/api/subjects/{subject['id']}", json={"description": "Organic and inorganic"})
    assert updated.status_code == 200
    assert updated.json()["description"] == "Organic and inorganic"

    assert client.get(f"/api/subjects/{subject['id']}").status_code == 200
    assert client.delete(f"/api/subjects/{subject['id']}").status_code == 200
    assert client.get(f"/api/subjects/{subject['id']}").status_code == 404


def test_subject_rename_clash(client, subject):
    other = client.post("/api/subjects", json={"name": "Biology"}).json()
    response = client.patch(f"/api/subjects/{other['id']}", json={"name": subject["name"]})
    assert response.status_code == 409


def test_subject_in_use_cannot_be_deleted(client, subject, make_slot):
    assert make_slot().status_code == 201
    response = client.delete(f"/api/subjects/{subject['id']}")
    assert response.status_code == 409


def test_deleting_teacher_drops_their_write_locks(client, teacher, other_teacher, make_slot):
    guard = get_slot_write_guard()
    mine = make_slot().json()
    make_slot(teacher_id=other_teacher["id"])
    assert len(guard) == 2

    client.delete(f"/api/schedules/{mine['id']}")
    assert client.delete(f"/api/teachers/{teacher['id']}").status_code == 200
    assert len(guard) == 1
