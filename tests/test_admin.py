from datetime import datetime, timedelta

from tuition_app.database.database import Payment, TuitionStatus, UserRole


def test_admin_endpoints_require_admin(client, student_headers):
    for method, path in [("get", "/admin/all-tuitions"), ("get", "/admin/stats")]:
        assert getattr(client, method)(path).status_code == 401
        assert getattr(client, method)(path, headers=student_headers).status_code == 403

    response = client.patch("/admin/tuition-status/00000000-0000-0000-0000-000000000000", json={"status": "Approved"}, headers=student_headers)
    assert response.status_code == 403


def test_admin_all_tuitions(client, make_tuition, admin_headers):
    make_tuition(status=TuitionStatus.PENDING)
    make_tuition(status=TuitionStatus.REJECTED)

    response = client.get("/admin/all-tuitions", headers=admin_headers)

    assert response.status_code == 200
    assert {post["status"] for post in response.json()} == {"Pending", "Rejected"}


def test_admin_approves_tuition(client, db, make_tuition, admin_headers):
    tuition = make_tuition()

    response = client.patch(f"/admin/tuition-status/{tuition.id}", json={"status": "Approved"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["modifiedCount"] == 1
    db.refresh(tuition)
    assert tuition.status == TuitionStatus.APPROVED


def test_admin_rejects_tuition(client, db, make_tuition, admin_headers):
    tuition = make_tuition()

    client.patch(f"/admin/tuition-status/{tuition.id}", json={"status": "Rejected"}, headers=admin_headers)

    db.refresh(tuition)
    assert tuition.status == TuitionStatus.REJECTED


def test_admin_invalid_status(client, db, make_tuition, admin_headers):
    tuition = make_tuition()

    for status in ("Closed", "Pending", "approved", None):
        response = client.patch(f"/admin/tuition-status/{tuition.id}", json={"status": status}, headers=admin_headers)
        assert response.status_code == 400

    db.refresh(tuition)
    assert tuition.status == TuitionStatus.PENDING


def test_admin_status_unknown_tuition(client, admin_headers):
    response = client.patch("/admin/tuition-status/00000000-0000-0000-0000-000000000000", json={"status": "Approved"}, headers=admin_headers)

    assert response.status_code == 404


def test_admin_stats(client, db, make_user, make_tuition, admin_headers):
    make_user(email="student@example.com")
    make_user(email="tutor@example.com", role=UserRole.TUTOR)
    make_tuition()
    now = datetime.now()
    db.add_all([
        Payment(application_id="app-1", transaction_id="pi_old", amount=3000, date=now - timedelta(days=1)),
        Payment(application_id="app-2", transaction_id="pi_new", amount=4500.5, date=now),
    ])
    db.commit()

    response = client.get("/admin/stats", headers=admin_headers)

    assert response.status_code == 200
    stats = response.json()
    assert stats["totalEarnings"] == 7500.5
    assert stats["totalUsers"] == 2
    assert stats["totalTuitions"] == 1
    assert [payment["transactionId"] for payment in stats["transactions"]] == ["pi_new", "pi_old"]


def test_admin_stats_empty(client, admin_headers):
    stats = client.get("/admin/stats", headers=admin_headers).json()

    assert stats["totalEarnings"] == 0
    assert stats["transactions"] == []


def test_admin_cannot_reopen_closed_tuition(client, db, make_tuition, admin_headers):
    tuition = make_tuition(status=TuitionStatus.CLOSED)

    for status in ("Approved", "Rejected"):
        response = client.patch(f"/admin/tuition-status/{tuition.id}", json={"status": status}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Closed tuition posts cannot be reviewed."

    db.refresh(tuition)
    assert tuition.status == TuitionStatus.CLOSED
