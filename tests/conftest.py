import os
import tempfile

# Settings are read at import time, so the environment is prepared before the app is imported
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-secret")
os.environ["DB_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
# A nested directory that does not exist yet, created on import
os.environ["LOGS_DIR"] = os.path.join(tempfile.mkdtemp(prefix="tuition-logs-"), "server", "logs")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tuition_app.main import app  # noqa: E402
from tuition_app.auth_tools import create_access_token  # noqa: E402
from tuition_app.database.database import (  # noqa: E402
    Base, get_db, generate_uuid, User, UserRole, TuitionPost, TuitionStatus, Application, ApplicationStatus
)
from tuition_app.identity import IdentityError, get_identity_provider  # noqa: E402
from tuition_app.payment_gateway import CheckoutSession, PaymentGatewayError, get_payment_gateway  # noqa: E402
from tuition_app.schemas.authentication_schema import IdentityClaims  # noqa: E402


class FakePaymentGateway:
    """Records created sessions and serves whatever sessions a test registers."""

    def __init__(self):
        self.sessions = {}
        self.created = []
        self.fail = False

    def add_session(self, session_id, application_id, paid=True, amount=5000.0, transaction_id="pi_test_1", customer_email="student@example.com"):
        self.sessions[session_id] = CheckoutSession(
            id=session_id,
            url=None,
            paid=paid,
            application_id=application_id,
            transaction_id=transaction_id,
            amount=amount,
            customer_email=customer_email,
        )

    def create_checkout_session(self, application_id, amount, tutor_name, student_email):
        if self.fail:
            raise PaymentGatewayError("Your card was declined.")
        self.created.append({"application_id": application_id, "amount": amount, "tutor_name": tutor_name, "student_email": student_email})
        session_id = f"cs_test_{len(self.created)}"
        return CheckoutSession(
            id=session_id,
            url=f"https://checkout.example.com/pay/{session_id}",
            paid=False,
            application_id=application_id,
            transaction_id=None,
            amount=amount,
            customer_email=student_email,
        )

    def retrieve_session(self, session_id):
        if self.fail or session_id not in self.sessions:
            raise PaymentGatewayError("No such checkout session")
        return self.sessions[session_id]


class FakeIdentityProvider:
    """Accepts tokens of the form 'valid:<email>'."""

    enabled = True

    def verify_id_token(self, id_token):
        if not id_token.startswith("valid:"):
            raise IdentityError("Invalid ID token")
        email = id_token.split(":", 1)[1]
        return IdentityClaims(uid=f"uid-{email}", email=email)


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest.fixture
def client(session_factory, gateway):
    # Override the get_db dependency to use the test database
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_identity_provider] = lambda: FakeIdentityProvider()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_access_token('admin@example.com', 'Admin')}"}


@pytest.fixture
def student_headers():
    return {"Authorization": f"Bearer {create_access_token('student@example.com', 'Student')}"}


@pytest.fixture
def make_user(db):
    def _make(**fields):
        data = {"email": "student@example.com", "name": "Test Student", "role": UserRole.STUDENT}
        data.update(fields)
        user = User(**data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_tuition(db):
    def _make(**fields):
        data = {
            "subject": "Mathematics",
            "class_level": "Class 8",
            "location": "Dhanmondi",
            "salary": 5000,
            "days_per_week": 3,
            "student_name": "Test Student",
            "student_email": "student@example.com",
            "status": TuitionStatus.PENDING,
        }
        data.update(fields)
        tuition = TuitionPost(**data)
        db.add(tuition)
        db.commit()
        db.refresh(tuition)
        return tuition
    return _make


@pytest.fixture
def make_application(db):
    def _make(**fields):
        data = {
            "tuition_id": generate_uuid(),
            "tutor_email": "tutor@example.com",
            "tutor_name": "Test Tutor",
            "student_email": "student@example.com",
            "subject": "Mathematics",
            "expected_salary": 5000,
            "status": ApplicationStatus.PENDING,
        }
        data.update(fields)
        application = Application(**data)
        db.add(application)
        db.commit()
        db.refresh(application)
        return application
    return _make
