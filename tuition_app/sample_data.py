# sample_data.py

from datetime import datetime, timedelta

from tuition_app.database.database import TuitionStatus

sample_tuitions = [
    {"subject": "Mathematics", "class_level": "Class 8", "location": "Dhanmondi, Dhaka", "salary": 6000, "days_per_week": 3, "schedule": "Evening", "student_name": "Sample Student", "student_email": "student@example.com", "status": TuitionStatus.APPROVED, "created_at": datetime.now() - timedelta(days=2)},
    {"subject": "Physics", "class_level": "HSC", "location": "Mirpur, Dhaka", "salary": 8000, "days_per_week": 4, "schedule": "Afternoon", "student_name": "Sample Student", "student_email": "student@example.com", "status": TuitionStatus.APPROVED, "created_at": datetime.now() - timedelta(days=1)},
    {"subject": "English", "class_level": "Class 5", "location": "Uttara, Dhaka", "salary": 4000, "days_per_week": 2, "schedule": "Morning", "student_name": "Sample Student", "student_email": "student@example.com", "status": TuitionStatus.PENDING, "created_at": datetime.now()},
]

sample_tutors = [
    {"tutor_email": "tutor@example.com", "name": "Sample Tutor", "university": "University of Dhaka", "specialization": "Mathematics, Physics", "experience": "3 years", "bio": "Experienced tutor"},
    {"tutor_email": "tutor2@example.com", "name": "Second Tutor", "university": "BUET", "specialization": "English", "experience": "1 year", "bio": "Patient and friendly"},
]
