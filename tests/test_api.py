# tests/test_api.py
from datetime import date, timedelta

import pytest


def interaction_payload(person, reason_ids, /, **overrides):
    payload = {
        "date": date.today().isoformat(),
        "start_time": "08:00",
        "end_time": "08:30",
        "type": "Contact" if hasattr(person, "type") else "Student",
        "person_id": person.id,
        "reason_ids": list(reason_ids),
        "notes": "",
        "follow_up_needed": False,
        "follow_up_date": None,
    }
    payload.update(overrides)
    return payload


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").status_code == 200


# Students

def test_student_crud(client, counselor_headers, store):
    created = client.post("/api/v1/students", headers=counselor_headers, json={
        "first_name": " Liam ", "last_name": "Brown", "grade": "k", "notes": "",
    })
    assert created.status_code == 201
    student = created.json()
    assert (student["first_name"], student["grade"]) == ("Liam", "K")

    listed = client.get("/api/v1/students", headers=counselor_headers, params={"search": "brown"})
    assert [s["id"] for s in listed.json()] == [student["id"]]

    updated = client.put(f"/api/v1/students/{student['id']}", headers=counselor_headers, json={
        "first_name": "Liam", "last_name": "Brown", "grade": "1", "notes": "Moved up",
    })
    assert updated.status_code == 200
    assert store.get_student(student["id"]).grade == "1"

    deleted = client.delete(f"/api/v1/students/{student['id']}", headers=counselor_headers)
    assert deleted.json() == {"message": "Student deleted. Existing interactions were kept."}
    assert client.get(f"/api/v1/students/{student['id']}", headers=counselor_headers).status_code == 404


@pytest.mark.parametrize("body", [
    {"first_name": "", "last_name": "Brown", "grade": "9"},
    {"first_name": "   ", "last_name": "Brown", "grade": "9"},
    {"first_name": "Liam", "last_name": "Brown", "grade": "13"},
    {"first_name": "Liam", "grade": "9"},
])
def test_student_validation(client, counselor_headers, body):
    response = client.post("/api/v1/students", headers=counselor_headers, json=body)
    assert response.status_code == 422


def test_student_detail_includes_history(client, counselor_headers, store, emma, academic):
    client.post("/api/v1/interactions", headers=counselor_headers, json=interaction_payload(
        emma, [academic.id], date=(date.today() - timedelta(days=2)).isoformat(),
    ))
    client.post("/api/v1/interactions", headers=counselor_headers, json=interaction_payload(
        emma, [academic.id], end_time="09:00", follow_up_needed=True,
        follow_up_date=date.today().isoformat(),
    ))

    body = client.get(f"/api/v1/students/{emma.id}", headers=counselor_headers).json()

    assert body["student"]["first_name"] == "Emma"
    assert body["stats"] == {"total_interactions": 2, "total_minutes": 90, "has_follow_up": True}
    assert [i["duration"] for i in body["interactions"]] == [60, 30]


@pytest.mark.parametrize("method", ["put", "delete"])
def test_unknown_student_is_404(client, counselor_headers, method):
    kwargs = {"json": {"first_name": "A", "last_name": "B", "grade": "9"}} if method == "put" else {}
    response = getattr(client, method)("/api/v1/students/missing", headers=counselor_headers, **kwargs)
    assert response.status_code == 404
    assert response.json()["detail"] == "Student not found"


# Contacts

def test_contact_crud_and_filters(client, counselor_headers, robert):
    created = client.post("/api/v1/contacts", headers=counselor_headers, json={
        "type": "Teacher", "first_name": "Patricia", "last_name": "Miller",
        "relation": "Math Teacher", "email": "",
    })
    assert created.status_code == 201
    contact = created.json()
    assert contact["email"] is None

    parents = client.get("/api/v1/contacts", headers=counselor_headers, params={"type": "Parent"}).json()
    assert [c["id"] for c in parents] == [robert.id]
    found = client.get("/api/v1/contacts", headers=counselor_headers, params={"search": "math"}).json()
    assert [c["id"] for c in found] == [contact["id"]]

    detail = client.get(f"/api/v1/contacts/{contact['id']}", headers=counselor_headers).json()
    assert detail["stats"]["total_interactions"] == 0

    assert client.delete(f"/api/v1/contacts/{contact['id']}", headers=counselor_headers).status_code == 200
    assert client.get(f"/api/v1/contacts/{contact['id']}", headers=counselor_headers).status_code == 404


@pytest.mark.parametrize("body", [
    {"type": "Neighbor", "first_name": "A", "last_name": "B"},
    {"type": "Parent", "first_name": "A", "last_name": "B", "email": "not-an-email"},
])
def test_contact_validation(client, counselor_headers, body):
    assert client.post("/api/v1/contacts", headers=counselor_headers, json=body).status_code == 422


def test_renaming_contact_updates_interactions(client, counselor_headers, robert, academic):
    logged = client.post("/api/v1/interactions", headers=counselor_headers,
                         json=interaction_payload(robert, [academic.id])).json()

    client.put(f"/api/v1/contacts/{robert.id}", headers=counselor_headers, json={
        "type": "Parent", "first_name": "Bob", "last_name": "Johnson",
    })

    detail = client.get(f"/api/v1/interactions/{logged['id']}", headers=counselor_headers).json()
    assert detail["interaction"]["person_name"] == "Bob Johnson"


# Reasons

def test_reason_changes_are_admin_only(client, counselor_headers, admin_headers, academic):
    body = {"category": "Career", "subcategory": "Job Applications"}
    assert client.post("/api/v1/reasons", headers=counselor_headers, json=body).status_code == 403
    assert client.delete(f"/api/v1/reasons/{academic.id}", headers=counselor_headers).status_code == 403

    created = client.post("/api/v1/reasons", headers=admin_headers, json=body)
    assert created.status_code == 201

    renamed = client.put(f"/api/v1/reasons/{academic.id}", headers=admin_headers,
                         json={"category": "Academic", "subcategory": "Tutoring"})
    assert renamed.json()["subcategory"] == "Tutoring"

    reasons = client.get("/api/v1/reasons", headers=counselor_headers).json()
    assert {r["subcategory"] for r in reasons} == {"Tutoring", "Job Applications"}

    assert client.delete("/api/v1/reasons/missing", headers=admin_headers).status_code == 404


def test_deleted_reason_falls_back_to_placeholder(client, counselor_headers, admin_headers, emma, academic):
    logged = client.post("/api/v1/interactions", headers=counselor_headers,
                         json=interaction_payload(emma, [academic.id])).json()
    client.delete(f"/api/v1/reasons/{academic.id}", headers=admin_headers)

    detail = client.get(f"/api/v1/interactions/{logged['id']}", headers=counselor_headers).json()
    assert detail["interaction"]["reason_ids"] == [academic.id]
    assert detail["reasons"] == ["No reason specified"]


# Interactions

def test_log_interaction(client, counselor_headers, store, emma, academic, behavioral):
    response = client.post("/api/v1/interactions", headers=counselor_headers, json=interaction_payload(
        emma, [academic.id, behavioral.id], start_time="10:00", end_time="10:45",
        notes="Discussed grades", follow_up_needed=True,
        follow_up_date=(date.today() - timedelta(days=1)).isoformat(),
    ))

    assert response.status_code == 201
    interaction = response.json()
    assert interaction["duration"] == 45
    assert interaction["person_name"] == "Emma Johnson"
    assert interaction["counselor_id"] == "1"
    assert store.stats.total_time_spent == 45

    detail = client.get(f"/api/v1/interactions/{interaction['id']}", headers=counselor_headers).json()
    assert detail["reasons"] == ["Academic: Grade Concerns", "Behavioral: Attendance"]
    assert detail["past_due"] is True


@pytest.mark.parametrize("overrides, message", [
    ({"start_time": "09:00", "end_time": "08:30"}, "End time must be after start time"),
    ({"reason_ids": []}, "At least one reason is required"),
    ({"follow_up_needed": True}, "Follow-up date is required"),
    ({"start_time": "9am"}, "time must be in HH:MM format"),
])
def test_interaction_validation(client, counselor_headers, store, emma, academic, overrides, message):
    response = client.post("/api/v1/interactions", headers=counselor_headers,
                           json=interaction_payload(emma, [academic.id], **overrides))
    assert response.status_code == 422
    assert message in response.text
    assert store.interactions == []


def test_interaction_for_unknown_person(client, counselor_headers, emma, academic):
    payload = interaction_payload(emma, [academic.id], type="Contact")
    response = client.post("/api/v1/interactions", headers=counselor_headers, json=payload)
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid person selected"


def test_edit_interaction_keeps_counselor(client, counselor_headers, admin_headers, store, emma, robert, academic):
    logged = client.post("/api/v1/interactions", headers=counselor_headers,
                         json=interaction_payload(emma, [academic.id])).json()

    response = client.put(f"/api/v1/interactions/{logged['id']}", headers=admin_headers,
                          json=interaction_payload(robert, [academic.id], end_time="09:30"))

    assert response.status_code == 200
    edited = response.json()
    assert edited["duration"] == 90
    assert edited["person_name"] == "Robert Johnson"
    assert edited["counselor_id"] == "1"
    assert store.stats.contact_interactions == 1
    assert store.stats.student_interactions == 0


def test_unknown_interaction(client, counselor_headers, emma, academic):
    assert client.get("/api/v1/interactions/missing", headers=counselor_headers).status_code == 404
    assert client.put("/api/v1/interactions/missing", headers=counselor_headers,
                      json=interaction_payload(emma, [academic.id])).status_code == 404
    assert client.delete("/api/v1/interactions/missing", headers=counselor_headers).status_code == 404


def test_delete_interaction_updates_stats(client, counselor_headers, store, emma, academic):
    logged = client.post("/api/v1/interactions", headers=counselor_headers,
                         json=interaction_payload(emma, [academic.id])).json()

    response = client.delete(f"/api/v1/interactions/{logged['id']}", headers=counselor_headers)

    assert response.json() == {"message": "Interaction deleted"}
    assert store.stats.total_interactions == 0


def test_interaction_list_filters(client, counselor_headers, emma, robert, academic, behavioral):
    old = (date.today() - timedelta(days=40)).isoformat()
    client.post("/api/v1/interactions", headers=counselor_headers,
                json=interaction_payload(emma, [academic.id], date=old, notes="old visit"))
    recent = client.post("/api/v1/interactions", headers=counselor_headers,
                         json=interaction_payload(robert, [behavioral.id], follow_up_needed=True,
                                                  follow_up_date=date.today().isoformat())).json()

    def listed(**params):
        response = client.get("/api/v1/interactions", headers=counselor_headers, params=params)
        assert response.status_code == 200
        return [i["id"] for i in response.json()]

    assert len(listed()) == 2
    assert listed(date_range="month") == [recent["id"]]
    assert listed(type="Contact") == [recent["id"]]
    assert listed(category="Behavioral") == [recent["id"]]
    assert listed(follow_up="true") == [recent["id"]]
    assert len(listed(search="old")) == 1
    assert client.get("/api/v1/interactions", headers=counselor_headers,
                      params={"date_range": "year"}).status_code == 422
