from datetime import datetime, timedelta

from tuition_app.database.database import TuitionPost, TuitionStatus


NEW_POST = {
    "subject": "Physics",
    "classLevel": "HSC",
    "location": "Mirpur",
    "salary": 8000,
    "daysPerWeek": 4,
    "schedule": "Evening",
    "description": "Need help with mechanics",
    "studentName": "Test Student",
    "studentEmail": "student@example.com"
}


def test_create_tuition_is_pending(client, db):
    response = client.post("/tuition", json=NEW_POST)

    assert response.status_code == 200
    body = response.json()
    assert body["insertedId"] is not None
    assert "pending admin review" in body["message"]

    tuition = db.query(TuitionPost).filter(TuitionPost.id == body["insertedId"]).first()
    assert tuition.status == TuitionStatus.PENDING
    assert tuition.created_at is not None
    assert tuition.days_per_week == 4


def test_create_tuition_missing_fields(client, db):
    missing_email = {key: value for key, value in NEW_POST.items() if key != "studentEmail"}
    missing_subject = {key: value for key, value in NEW_POST.items() if key != "subject"}

    for body in (missing_email, missing_subject):
        response = client.post("/tuition", json=body)
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required fields."

    assert db.query(TuitionPost).count() == 0


def test_create_tuition_ignores_client_status(client, db):
    response = client.post("/tuition", json={**NEW_POST, "status": "Approved"})

    tuition = db.query(TuitionPost).filter(TuitionPost.id == response.json()["insertedId"]).first()
    assert tuition.status == TuitionStatus.PENDING


def test_create_tuition_negative_salary(client):
    response = client.post("/tuition", json={**NEW_POST, "salary": -1})

    assert response.status_code == 400


def test_my_tuitions_newest_first(client, make_tuition):
    now = datetime.now()
    make_tuition(subject="Old", created_at=now - timedelta(days=2))
    make_tuition(subject="New", created_at=now)
    make_tuition(subject="Someone else", student_email="other@example.com", created_at=now)

    response = client.post("/my-tuitions", json={"email": "student@example.com"})

    assert response.status_code == 200
    assert [post["subject"] for post in response.json()] == ["New", "Old"]


def test_my_tuitions_requires_email(client):
    response = client.post("/my-tuitions", json={})

    assert response.status_code == 400
    assert response.json()["detail"] == "Student email is required."


def test_all_tuitions(client, make_tuition):
    make_tuition(status=TuitionStatus.APPROVED)
    make_tuition(status=TuitionStatus.PENDING)

    response = client.get("/all-tuitions")

    assert response.status_code == 200
    assert len(response.json()) == 2


def test_latest_tuitions_limit(client, make_tuition):
    now = datetime.now()
    for day in range(8):
        make_tuition(subject=f"Subject {day}", created_at=now - timedelta(days=day))

    response = client.post("/latest-tuitions")

    assert response.status_code == 200
    subjects = [post["subject"] for post in response.json()]
    assert subjects == [f"Subject {day}" for day in range(6)]


def test_get_tuition(client, make_tuition):
    tuition = make_tuition()

    response = client.get(f"/tuition/{tuition.id}")

    assert response.status_code == 200
    body = response.json()
    assert body["_id"] == tuition.id
    assert body["studentEmail"] == "student@example.com"
    assert body["status"] == "Pending"


def test_get_unknown_tuition(client, make_tuition):
    make_tuition()

    assert client.get("/tuition/not-an-id").status_code == 404
    assert client.get("/tuition/00000000-0000-0000-0000-000000000000").status_code == 404


def test_update_tuition(client, db, make_tuition):
    tuition = make_tuition()

    response = client.put(f"/tuition/{tuition.id}", json={"salary": 7000, "location": "Uttara"})

    assert response.status_code == 200
    assert response.json()["modifiedCount"] == 1
    assert response.json()["message"] == "Tuition post updated successfully."
    db.refresh(tuition)
    assert tuition.salary == 7000
    assert tuition.location == "Uttara"
    assert tuition.subject == "Mathematics"


def test_update_tuition_cannot_change_owner_or_status(client, db, make_tuition):
    tuition = make_tuition()

    client.put(f"/tuition/{tuition.id}", json={"studentEmail": "thief@example.com", "status": "Approved"})

    db.refresh(tuition)
    assert tuition.student_email == "student@example.com"
    assert tuition.status == TuitionStatus.PENDING


def test_update_unknown_tuition(client):
    response = client.put("/tuition/00000000-0000-0000-0000-000000000000", json={"salary": 1})

    assert response.status_code == 404


def test_delete_tuition(client, db, make_tuition):
    tuition = make_tuition()
    tuition_id = tuition.id

    response = client.delete(f"/tuition/{tuition_id}")

    assert response.status_code == 200
    assert response.json()["deletedCount"] == 1
    assert db.query(TuitionPost).filter(TuitionPost.id == tuition_id).first() is None

    # A second delete finds nothing
    assert client.delete(f"/tuition/{tuition_id}").status_code == 404
