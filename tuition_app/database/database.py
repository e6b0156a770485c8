from sqlalchemy import create_engine, Column, String, Float, Text, DateTime, Integer, Enum, Index, CheckConstraint
from sqlalchemy.orm import declarative_base, sessionmaker
from datetime import datetime
from typing import Optional
import uuid
import enum

from tuition_app.config import get_settings

"""
Database models for the tuition marketplace.
One table per collection: users, tuitions, tutor profiles, applications and payments.
Records are plain documents linked by string keys (emails and ids), there are no ORM relationships.
Uses SQLAlchemy ORM with PostgreSQL/SQLite backend.
"""

# Base class for ORM models
Base = declarative_base()

# Enum for user roles
class UserRole(enum.Enum):
    STUDENT = "Student"
    TUTOR = "Tutor"
    ADMIN = "Admin"

class TuitionStatus(enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CLOSED = "Closed"

class ApplicationStatus(enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"

def is_valid_uuid(uuid_str: str) -> bool:
    """Validate UUID string format."""
    if not uuid_str:
        return False
    try:
        if len(uuid_str) != 36:
            return False
        uuid_obj = uuid.UUID(uuid_str)
        return str(uuid_obj) == uuid_str.lower()
    except (ValueError, AttributeError, TypeError):
        return False

def generate_uuid() -> str:
    """Generate a string UUID."""
    return str(uuid.uuid4()).lower()

class DocumentMixin:
    """Lookup by primary key shared by every collection."""

    @classmethod
    def get_by_id(cls, db, record_id: str):
        """Get a record by UUID string, None for malformed or unknown ids."""
        if not is_valid_uuid(record_id):
            return None
        return db.query(cls).filter(cls.id == record_id).first()

# User Model
class User(DocumentMixin, Base):
    """Registered account. The email is the natural key used by every other collection."""
    __tablename__ = 'users'
    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100))
    photo = Column(String(500))
    role = Column(Enum(UserRole), default=UserRole.STUDENT, nullable=False)
    status = Column(String(20), default="active", nullable=False)
    phone = Column(String(30))
    institution = Column(String(255))
    address = Column(String(255))
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    last_updated = Column(DateTime)

    @classmethod
    def get_by_email(cls, db, email: str) -> Optional['User']:
        return db.query(cls).filter(cls.email == email).first()

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

# Tuition Post Model
class TuitionPost(DocumentMixin, Base):
    """A student's request for a tutor, reviewed by an admin before it is listed."""
    __tablename__ = 'tuitions'
    id = Column(String(36), primary_key=True, default=generate_uuid)
    subject = Column(String(100), nullable=False)
    class_level = Column(String(50))
    location = Column(String(255))
    salary = Column(Float)
    days_per_week = Column(Integer)
    schedule = Column(String(100))
    description = Column(Text)
    student_name = Column(String(100))
    student_email = Column(String(255), nullable=False, index=True)
    status = Column(Enum(TuitionStatus), default=TuitionStatus.PENDING, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (
        CheckConstraint('salary IS NULL OR salary >= 0', name='check_salary_positive'),
    )

    def __repr__(self):
        return f"<TuitionPost(id={self.id}, subject={self.subject}, status={self.status})>"

# Tutor Profile Model
class TutorProfile(DocumentMixin, Base):
    __tablename__ = 'tutor_profiles'
    id = Column(String(36), primary_key=True, default=generate_uuid)
    tutor_email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100))
    photo = Column(String(500))
    university = Column(String(255))
    specialization = Column(String(255))
    experience = Column(String(100))
    bio = Column(Text)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    last_updated = Column(DateTime)

    def __repr__(self):
        return f"<TutorProfile(id={self.id}, tutor_email={self.tutor_email})>"

# Application Model
class Application(DocumentMixin, Base):
    """A tutor applying to a tuition post. At most one per (tuition, tutor) pair."""
    __tablename__ = 'applications'
    id = Column(String(36), primary_key=True, default=generate_uuid)
    tuition_id = Column(String(36), nullable=False)
    tutor_email = Column(String(255), nullable=False, index=True)
    tutor_name = Column(String(100))
    student_email = Column(String(255), index=True)
    subject = Column(String(100))
    expected_salary = Column(Float)
    qualifications = Column(Text)
    experience = Column(String(100))
    status = Column(Enum(ApplicationStatus), default=ApplicationStatus.PENDING, nullable=False)
    applied_at = Column(DateTime, default=datetime.now, nullable=False)

    def __repr__(self):
        return f"<Application(id={self.id}, tuition_id={self.tuition_id}, tutor_email={self.tutor_email})>"

# Payment Model
class Payment(DocumentMixin, Base):
    __tablename__ = 'payments'
    id = Column(String(36), primary_key=True, default=generate_uuid)
    application_id = Column(String(36)) # Stored as a string, not a foreign key
    session_id = Column(String(255), unique=True) # Checkout session that produced the payment
    transaction_id = Column(String(255), index=True)
    amount = Column(Float, nullable=False)
    student_email = Column(String(255))
    date = Column(DateTime, default=datetime.now, nullable=False)

    def __repr__(self):
        return f"<Payment(id={self.id}, application_id={self.application_id}, amount={self.amount})>"

# Add indexes for frequently queried columns
Index('idx_tuition_created_at', TuitionPost.created_at)
Index('idx_application_pair', Application.tuition_id, Application.tutor_email, unique=True)
Index('idx_payment_date', Payment.date)

# Database setup
DATABASE_URL = get_settings().db_url

engine_options = {"echo": False}
if DATABASE_URL.startswith("sqlite"):
    engine_options["connect_args"] = {"check_same_thread": False}
else:
    engine_options.update(pool_size=5, max_overflow=10, pool_timeout=30)

engine = create_engine(DATABASE_URL, **engine_options)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db():
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine)

# Dependency to get DB session
def get_db():
    """Provides a transactional scope around a series of operations."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
