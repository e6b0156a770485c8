from datetime import datetime, timedelta

from tuition_app.database.database import TutorProfile, Payment


def test_tutor_profile_unknown_email(client):
    response = client.get("/tutor-profile/nobody@example.com")

    assert response.status_code == 200
    assert response.json() == {}


def test_tutor_profile_upsert(client, db):
    # First call creates the profile
    created = client.patch("/tutor-profile-update", json={
        "tutorEmail": "tutor@example.com",
        "name": "Test Tutor",
        "university": "University of Dhaka",
        "specialization": "Mathematics"
    })

    assert created.status_code == 200
    assert created.json()["upsertedId"] is not None
    assert created.json()["matchedCount"] == 0

    # Second call updates it in place
    updated = client.patch("/tutor-profile-update", json={"tutorEmail": "tutor@example.com", "bio": "Ten years of teaching"})

    assert updated.json()["matchedCount"] == 1
    assert updated.json()["upsertedId"] is None
    assert db.query(TutorProfile).count() == 1

    profile = client.get("/tutor-profile/tutor@example.com").json()
    assert profile["_id"] == created.json()["upsertedId"]
    assert profile["name"] == "Test Tutor"
    assert profile["university"] == "University of Dhaka"
    assert profile["bio"] == "Ten years of teaching"


def test_tutor_profile_update_requires_email(client):
    response = client.patch("/tutor-profile-update", json={"name": "Nameless"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Tutor email is required."


def test_all_and_latest_tutors(client, db):
    now = datetime.now()
    for index in range(5):
        db.add(TutorProfile(tutor_email=f"tutor{index}@example.com", name=f"Tutor {index}", created_at=now - timedelta(days=index)))
    db.commit()

    assert len(client.get("/all-tutors").json()) == 5

    latest = client.post("/latest-tutors").json()
    assert [tutor["tutorEmail"] for tutor in latest] == ["tutor0@example.com", "tutor1@example.com", "tutor2@example.com"]


def test_tutor_revenue(client, db, make_application):
    paid = make_application(tutor_email="tutor@example.com", subject="Physics")
    other = make_application(tutor_email="other@example.com")
    db.add_all([
        Payment(application_id=paid.id, transaction_id="pi_1", amount=5000, student_email="student@example.com"),
        Payment(application_id=other.id, transaction_id="pi_2", amount=3000, student_email="student@example.com"),
    ])
    db.commit()

    response = client.get("/tutor/revenue/tutor@example.com")

    assert response.status_code == 200
    revenue = response.json()
    assert len(revenue) == 1
    assert revenue[0]["transactionId"] == "pi_1"
    assert revenue[0]["amount"] == 5000
    assert revenue[0]["subject"] == "Physics"
    assert revenue[0]["studentEmail"] == "student@example.com"


def test_tutor_revenue_without_payments(client):
    response = client.get("/tutor/revenue/tutor@example.com")

    assert response.status_code == 200
    assert response.json() == []
